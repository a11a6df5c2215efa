"""Camera module: viewing geometry and primary ray generation.

Components:
    camera: Thin-lens Camera configuration and jittered ray generation
"""

from .camera import (
    Camera,
    get_camera_info,
    get_ray,
    get_ray_through,
    is_camera_initialized,
    reset_camera,
)

__all__ = [
    "Camera",
    "get_ray",
    "get_ray_through",
    "get_camera_info",
    "is_camera_initialized",
    "reset_camera",
]
