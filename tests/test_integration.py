"""Integration tests for the end-to-end rendering pipeline.

These tests build a small scene with every material type, render it through
the camera and write it out, checking that all components work together.
Resolution and sample counts are kept low so the tests stay fast.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pytest
from PIL import Image as PILImage

if TYPE_CHECKING:
    import numpy.typing as npt


def _render_material_scene(width: int = 24, samples: int = 4) -> npt.NDArray[np.float32]:
    """Render ground, diffuse, hollow glass and fuzzy metal spheres."""
    from pathlite.camera.camera import Camera
    from pathlite.core.integrator import render
    from pathlite.scene.world import HittableList

    world = HittableList()
    ground = world.add_lambertian_material((0.8, 0.8, 0.0))
    center = world.add_lambertian_material((0.1, 0.2, 0.5))
    glass = world.add_dielectric_material(1.5)
    bubble = world.add_dielectric_material(1.0 / 1.5)
    metal = world.add_metal_material((0.8, 0.6, 0.2), 1.0)

    world.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    world.add_sphere((0.0, 0.0, -1.2), 0.5, center)
    world.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    world.add_sphere((-1.0, 0.0, -1.0), 0.4, bubble)
    world.add_sphere((1.0, 0.0, -1.0), 0.5, metal)

    camera = Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=width,
        samples_per_pixel=samples,
        max_depth=10,
        vfov=20.0,
        lookfrom=(-2.0, 2.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        defocus_angle=10.0,
        focus_dist=3.4,
    )
    return render(camera, world)


class TestMaterialSceneIntegration:
    """Integration tests for a scene exercising all materials."""

    def test_renders_successfully(self) -> None:
        """Test that the pipeline produces an image of the expected size."""
        image = _render_material_scene()

        assert image.shape == (13, 24, 3)

    def test_output_is_finite_and_bounded(self) -> None:
        """Test that no pixel is NaN, infinite, negative or brighter than white."""
        image = _render_material_scene()

        assert not np.isnan(image).any()
        assert not np.isinf(image).any()
        assert (image >= 0.0).all()
        assert (image <= 1.0 + 1e-5).all()

    def test_has_nonzero_illumination(self) -> None:
        """Test that the sky lights the scene."""
        image = _render_material_scene()

        assert image.mean() > 0.1

    def test_save_png(self, tmp_path: Path) -> None:
        """Test that a render can be written and read back as PNG."""
        from pathlite.preview.export import image_to_uint8, save_png

        image = _render_material_scene(width=16, samples=2)
        output = tmp_path / "spheres.png"
        save_png(image, output)

        with PILImage.open(output) as loaded:
            assert loaded.size == (16, 9)
            assert loaded.mode == "RGB"
            assert np.array_equal(np.asarray(loaded), image_to_uint8(image))

    def test_camera_render_to_stream(self) -> None:
        """Test Camera.render end to end with a PPM stream."""
        from pathlite.camera.camera import Camera
        from pathlite.scene.world import HittableList

        world = HittableList()
        mat = world.add_lambertian_material((0.5, 0.5, 0.5))
        world.add_sphere((0.0, 0.0, -1.0), 0.5, mat)
        world.add_sphere((0.0, -100.5, -1.0), 100.0, mat)

        out = io.StringIO()
        Camera(image_width=10, samples_per_pixel=2, max_depth=5).render(world, out)

        lines = out.getvalue().splitlines()
        assert lines[0] == "P3"
        assert lines[1] == "10 10"
        assert len(lines) == 103

    @pytest.mark.parametrize("max_depth", [1, 2])
    def test_shallow_depth_darkens_diffuse_scene(self, max_depth: int) -> None:
        """Test that a depth-1 render is darker than a deeper one.

        With one bounce every ray that hits a surface is cut off, so only
        directly visible sky contributes.
        """
        from pathlite.camera.camera import Camera
        from pathlite.core.integrator import render
        from pathlite.scene.world import HittableList

        world = HittableList()
        mat = world.add_lambertian_material((0.9, 0.9, 0.9))
        world.add_sphere((0.0, 0.0, -1.0), 0.5, mat)

        camera = Camera(image_width=12, samples_per_pixel=8, focus_dist=1.0)
        camera.max_depth = max_depth
        image = render(camera, world)
        # Center pixel lies on the sphere
        center = image[6, 6]
        if max_depth == 1:
            assert np.all(center == 0.0)
        else:
            assert center.sum() > 0.0


class TestSkyReference:
    """Compare an empty-scene render against the analytic sky."""

    def test_empty_scene_matches_sky_gradient(self) -> None:
        """Test that the averaged render is close to the sky at pixel centers."""
        from pathlite.camera.camera import Camera
        from pathlite.core.integrator import render
        from pathlite.scene.world import HittableList

        camera = Camera(image_width=10, samples_per_pixel=16)
        image = render(camera, HittableList())

        j, i = np.mgrid[0 : camera.image_height, 0 : camera.image_width]
        centers = (
            camera.pixel00_loc
            + i[..., None] * camera.pixel_delta_u
            + j[..., None] * camera.pixel_delta_v
        )
        unit_y = centers[..., 1] / np.linalg.norm(centers, axis=-1)
        a = 0.5 * (unit_y + 1.0)[..., None]
        expected = (1.0 - a) + a * np.array([0.5, 0.7, 1.0])

        rmse = np.sqrt(np.mean((image - expected) ** 2))
        assert rmse < 0.02
