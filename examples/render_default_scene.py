#!/usr/bin/env python3
"""Render the default reference scene.

Builds the reference scene (or one loaded from a JSON description), renders
it with one primary ray per pixel and writes an 8-bit RGB PNG.

Usage:
    python -m examples.render_default_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 512)
    --height HEIGHT     Image height in pixels (default: 512)
    --fov DEGREES       Vertical field of view (default: 90)
    --depth DEPTH       Reflection/refraction recursion depth (default: 6)
    --output OUTPUT     Output file path (default: out.png)
    --envmap PATH       Equirectangular environment texture
    --scene PATH        JSON scene description instead of the default scene
    --arch ARCH         Taichi backend: auto, cpu or gpu (default: auto)
    --quiet             Suppress progress output

Example:
    python -m examples.render_default_scene --width 256 --height 256 --depth 4
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the default reference scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=512,
        help="Image width in pixels (default: 512)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=512,
        help="Image height in pixels (default: 512)",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=90.0,
        help="Vertical field of view in degrees (default: 90)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=6,
        help="Reflection/refraction recursion depth (default: 6)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="out.png",
        help="Output file path (default: out.png)",
    )
    parser.add_argument(
        "--envmap",
        type=str,
        default=None,
        help="Equirectangular environment texture (default: flat color)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene description (default: built-in reference scene)",
    )
    parser.add_argument(
        "--arch",
        choices=("auto", "cpu", "gpu"),
        default="auto",
        help="Taichi backend (default: auto, GPU with CPU fallback)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def init_taichi(arch: str = "auto", quiet: bool = False) -> None:
    """Initialize Taichi with 64-bit floats on the requested backend."""
    if arch == "cpu":
        ti.init(arch=ti.cpu, default_fp=ti.f64)
        if not quiet:
            print("Using CPU backend")
        return

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, default_fp=ti.f64)
        if not quiet:
            print("Using GPU backend")
    except Exception:
        if arch == "gpu":
            raise
        ti.init(arch=ti.cpu, default_fp=ti.f64)
        if not quiet:
            print("Using CPU backend")


def render_default_scene(
    width: int = 512,
    height: int = 512,
    fov: float = 90.0,
    depth: int = 6,
    output_path: str = "out.png",
    envmap_path: str | None = None,
    scene_path: str | None = None,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Vertical field of view in degrees.
        depth: Reflection/refraction recursion depth.
        output_path: Output file path (PNG).
        envmap_path: Optional environment texture. Overrides the one named in
            a scene file.
        scene_path: Optional JSON scene description. Uses the default scene
            if omitted.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from whitted.camera.pinhole import RenderSettings
    from whitted.core.integrator import render_image
    from whitted.output.export import save_png
    from whitted.scene.default_scene import create_default_scene
    from whitted.scene.manager import SceneManager

    # Validate settings before building the scene
    settings = RenderSettings(width=width, height=height, fov=fov, depth=depth)

    if scene_path is None:
        if not quiet:
            print(f"Creating default scene ({width}x{height})...")
        scene = create_default_scene()
    else:
        if not quiet:
            print(f"Loading scene from {scene_path} ({width}x{height})...")
        with open(scene_path, encoding="utf-8") as f:
            scene_data = json.load(f)
        scene = SceneManager()
        scene.from_dict(scene_data)

    if envmap_path is not None:
        if not quiet:
            print(f"Loading environment map {envmap_path}...")
        scene.load_environment_map(envmap_path)

    if not quiet:
        print(
            f"  {scene.get_primitive_count()} primitives, "
            f"{scene.get_material_count()} materials, "
            f"{scene.get_light_count()} lights"
        )
        print(f"Rendering (fov {fov:g}, depth {depth})...")

    start_time = time.time()
    image = render_image(settings)
    render_time = time.time() - start_time

    output_file = Path(output_path)
    save_png(image, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Render time: {render_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    try:
        init_taichi(args.arch, args.quiet)
        render_default_scene(
            width=args.width,
            height=args.height,
            fov=args.fov,
            depth=args.depth,
            output_path=args.output,
            envmap_path=args.envmap,
            scene_path=args.scene,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
