#!/usr/bin/env python3
"""Render a scene of spheres to a PPM or PNG image.

Two scenes are available:

    final   A large ground sphere, three big spheres (glass, diffuse and
            metal) and a grid of small spheres with random materials.
    simple  Four spheres: a diffuse ground, a diffuse center sphere, a
            hollow glass sphere and a fuzzy metal sphere.

Progress is reported on stderr as the number of scanlines remaining.

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene {final,simple}  Scene to render (default: final)
    --width WIDTH           Image width in pixels (default: 400)
    --samples SAMPLES       Samples per pixel (default: 50)
    --max-depth DEPTH       Maximum ray bounces (default: 50)
    --seed SEED             Seed for the scene layout and Taichi RNG (default: 0)
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --output OUTPUT         Output file, .ppm or .png; "-" writes PPM to stdout
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Example:
    python examples/render_spheres.py --scene simple --width 200 --output spheres.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

if TYPE_CHECKING:
    from pathlite.camera.camera import Camera
    from pathlite.scene.world import HittableList


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene of spheres.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("final", "simple"),
        default="final",
        help="Scene to render (default: final)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=50,
        help="Samples per pixel (default: 50)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum ray bounces (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the scene layout and Taichi RNG (default: 0)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend; gpu needs float64 support, e.g. CUDA (default: cpu)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help='Output file (.ppm or .png); "-" writes PPM to stdout (default: -)',
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def build_final_scene(world: HittableList, rng: np.random.Generator) -> None:
    """Fill the world with the ground, three big spheres and random small ones."""
    ground = world.add_lambertian_material((0.5, 0.5, 0.5))
    world.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)

    clearance_point = np.array([4.0, 0.2, 0.0])

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])

            if np.linalg.norm(center - clearance_point) <= 0.9:
                continue

            if choose_mat < 0.8:
                # Diffuse
                albedo = rng.random(3) * rng.random(3)
                material = world.add_lambertian_material(tuple(albedo))
            elif choose_mat < 0.95:
                # Metal
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = rng.uniform(0.0, 0.5)
                material = world.add_metal_material(tuple(albedo), fuzz)
            else:
                # Glass
                material = world.add_dielectric_material(1.5)

            world.add_sphere(tuple(center), 0.2, material)

    glass = world.add_dielectric_material(1.5)
    world.add_sphere((0.0, 1.0, 0.0), 1.0, glass)

    diffuse = world.add_lambertian_material((0.4, 0.2, 0.1))
    world.add_sphere((-4.0, 1.0, 0.0), 1.0, diffuse)

    metal = world.add_metal_material((0.7, 0.6, 0.5), 0.0)
    world.add_sphere((4.0, 1.0, 0.0), 1.0, metal)


def build_simple_scene(world: HittableList) -> None:
    """Fill the world with four spheres, including a hollow glass sphere."""
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


def make_camera(args: argparse.Namespace) -> Camera:
    """Build the camera for the selected scene from the command-line options."""
    from pathlite.camera.camera import Camera

    camera = Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=args.width,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
    )

    if args.scene == "final":
        camera.vfov = 20.0
        camera.lookfrom = (13.0, 2.0, 3.0)
        camera.lookat = (0.0, 0.0, 0.0)
        camera.defocus_angle = 0.6
        camera.focus_dist = 10.0
    else:
        camera.vfov = 90.0
        camera.lookfrom = (0.0, 0.0, 0.0)
        camera.lookat = (0.0, 0.0, -1.0)

    return camera


def render_scene(args: argparse.Namespace) -> None:
    """Build the scene, render it and write the output image."""
    # Lazy imports to allow Taichi initialization first
    from pathlite.core.integrator import make_scanline_reporter
    from pathlite.preview.export import save_png, save_ppm
    from pathlite.scene.world import HittableList

    world = HittableList()
    if args.scene == "final":
        build_final_scene(world, np.random.default_rng(args.seed))
    else:
        build_simple_scene(world)

    camera = make_camera(args)
    callback = None if args.quiet else make_scanline_reporter(sys.stderr)

    if args.output == "-":
        camera.render(world, sys.stdout, callback=callback)
        return

    from pathlite.core.integrator import render

    image = render(camera, world, callback=callback)

    output_file = Path(args.output)
    if output_file.suffix.lower() == ".png":
        save_png(image, output_file)
    else:
        save_ppm(image, output_file)

    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}", file=sys.stderr)


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    arch = ti.gpu if args.arch == "gpu" else ti.cpu
    ti.init(arch=arch, default_fp=ti.f64, random_seed=args.seed)

    try:
        render_scene(args)
        return 0
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
