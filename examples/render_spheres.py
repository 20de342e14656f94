#!/usr/bin/env python3
"""Render one of the demonstration scenes to an image file.

This script builds a scene, sets up the camera, renders it with the
row-partitioned scheduler and saves the framebuffer.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH          Image width in pixels (default: 400)
    --height HEIGHT        Image height in pixels (default: 225)
    --samples SAMPLES      Samples per pixel (default: 500)
    --max-depth DEPTH      Maximum bounces per ray (default: 150)
    --workers WORKERS      Number of row-partitioned workers (default: 8)
    --seed SEED            Random seed for the Taichi runtime (default: 0)
    --scene {default,prism}
                           Scene to render (default: default)
    --output OUTPUT        Output file path (default: img.bmp)
    --arch {gpu,cpu}       Taichi backend (default: gpu, falls back to cpu)
    --verbose              Enable debug logging

Example:
    python -m examples.render_spheres --samples 50 --scene prism --output prism.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a demonstration scene with the prism path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=225,
        help="Image height in pixels (default: 225)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=500,
        help="Samples per pixel (default: 500)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=150,
        help="Maximum bounces per ray (default: 150)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=8,
        help="Number of row-partitioned workers (default: 8)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for the Taichi runtime (default: 0)",
    )
    parser.add_argument(
        "--scene",
        choices=("default", "prism"),
        default="default",
        help="Scene to render (default: default)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="img.bmp",
        help="Output file path (default: img.bmp)",
    )
    parser.add_argument(
        "--arch",
        choices=("gpu", "cpu"),
        default="gpu",
        help="Taichi backend (default: gpu, falls back to cpu)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def init_taichi(arch: str, seed: int) -> None:
    """Initialize Taichi, falling back to the CPU backend."""
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu, random_seed=seed)
            logger.info("Using GPU backend")
            return
        except RuntimeError as exc:
            logger.warning("GPU backend unavailable (%s), using CPU", exc)
    ti.init(arch=ti.cpu, random_seed=seed)
    logger.info("Using CPU backend")


def render_scene(
    width: int = 400,
    height: int = 225,
    samples: int = 500,
    max_depth: int = 150,
    workers: int = 8,
    scene_name: str = "default",
    output_path: str = "img.bmp",
) -> Path:
    """Render a demonstration scene and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so Taichi is initialized first
    from prismtracer.camera.pinhole import get_camera_info, setup_camera
    from prismtracer.core.scheduler import RenderScheduler, RenderSettings
    from prismtracer.output.export import save_render
    from prismtracer.scene.default_scene import create_default_scene, create_prism_scene

    settings = RenderSettings(
        samples_per_pixel=samples,
        max_depth=max_depth,
        num_workers=workers,
    )
    scheduler = RenderScheduler(width, height)

    factory = create_prism_scene if scene_name == "prism" else create_default_scene
    scene, camera = factory(aspect_ratio=width / height)
    logger.info(
        "Scene '%s': %d bodies, %d materials",
        scene_name,
        scene.get_body_count(),
        scene.get_material_count(),
    )
    setup_camera(camera)
    logger.debug("Camera: %s", get_camera_info())

    scheduler.render(settings)
    return save_render(scheduler, output_path)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_taichi(args.arch, args.seed)

    try:
        output_file = render_scene(
            width=args.width,
            height=args.height,
            samples=args.samples,
            max_depth=args.max_depth,
            workers=args.workers,
            scene_name=args.scene,
            output_path=args.output,
        )
    except (ValueError, RuntimeError) as e:
        # ImageExportError is a RuntimeError
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Saved to: {output_file.absolute()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
