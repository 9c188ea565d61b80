"""
Command-line front end: builds a scene, renders it and writes the image.
"""

from __future__ import annotations
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from .vec3 import Vec3, Color
from .renderer import Renderer, RenderSettings
from .scenes import (
    SCENE_NAMES, DEFAULT_SCENE, SceneOverrides, build_scene,
    default_output_name, resolve_scene_name,
    SphereSpec, PlaneSpec, CubeSpec, CylinderSpec
)
from .scene_parser import SceneParseError, load_scene

logger = logging.getLogger(__name__)


def dequote(s: str) -> str:
    """Strip one pair of matching surrounding quotes."""
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ('"', "'"):
        return s[1:-1]
    return s


def parse_vec3(text: str) -> Vec3:
    """Parse ``"x,y,z"`` into a Vec3."""
    parts = dequote(text.strip()).split(',')
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected x,y,z but got {text!r}")
    try:
        return Vec3(*(float(p.strip()) for p in parts))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected three numbers but got {text!r}")


def parse_color01(text: str) -> Color:
    """Parse an albedo, clamping each component to [0, 1]."""
    return parse_vec3(text).clamp(0.0, 1.0)


def parse_intensity(text: str) -> Color:
    """Parse a light intensity, clamping negative components to 0."""
    return parse_vec3(text).clamp(0.0, float('inf'))


def parse_resolution(text: str) -> Tuple[int, int]:
    """Parse ``"WxH"``; each side is clamped to at least 1."""
    parts = dequote(text.strip()).lower().split('x')
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT but got {text!r}")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected integer sizes but got {text!r}")
    return max(width, 1), max(height, 1)


def parse_int(text: str) -> int:
    try:
        return int(dequote(text.strip()))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer but got {text!r}")


def parse_positive_int(text: str) -> int:
    """Parse an integer, clamping it to at least 1."""
    return max(parse_int(text), 1)


def parse_float(text: str) -> float:
    try:
        return float(dequote(text.strip()))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number but got {text!r}")


def _split_fields(text: str, count: int, layout: str) -> List[str]:
    fields = [dequote(f.strip()) for f in dequote(text.strip()).split(';')]
    if len(fields) != count:
        raise argparse.ArgumentTypeError(f"expected {layout} but got {text!r}")
    return fields


def _reflectivity(text: str) -> float:
    return min(max(parse_float(text), 0.0), 1.0)


def parse_sphere(text: str) -> SphereSpec:
    """``"cx,cy,cz;radius;r,g,b;reflectivity"``"""
    c, r, col, refl = _split_fields(text, 4, "center;radius;albedo;reflectivity")
    return parse_vec3(c), parse_float(r), parse_color01(col), _reflectivity(refl)


def parse_plane(text: str) -> PlaneSpec:
    """``"px,py,pz;nx,ny,nz;r,g,b;reflectivity"``"""
    p, n, col, refl = _split_fields(text, 4, "point;normal;albedo;reflectivity")
    return parse_vec3(p), parse_vec3(n), parse_color01(col), _reflectivity(refl)


def parse_cube(text: str) -> CubeSpec:
    """``"cx,cy,cz;size;r,g,b;reflectivity"``"""
    c, size, col, refl = _split_fields(text, 4, "center;size;albedo;reflectivity")
    return parse_vec3(c), parse_float(size), parse_color01(col), _reflectivity(refl)


def parse_cylinder(text: str) -> CylinderSpec:
    """``"cx,cy,cz;radius;half_height;r,g,b;reflectivity"``"""
    c, r, hh, col, refl = _split_fields(text, 5, "center;radius;half_height;albedo;reflectivity")
    return parse_vec3(c), parse_float(r), parse_float(hh), parse_color01(col), _reflectivity(refl)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mirrorcast',
        description='Mirrorcast - a recursive Whitted-style ray tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  mirrorcast --scene sphere --res 800x600 --spp 32
  mirrorcast --scene all_alt_cam --out alt.png
  mirrorcast --add-sphere "0,0,-1;0.5;0.9,0.2,0.2;0.3" --light-pos 2,4,0
  mirrorcast --scene-file scenes/room.yaml --out room.ppm
        '''
    )

    parser.add_argument('--scene', type=dequote, default=DEFAULT_SCENE,
                        help=f"Preset scene: {', '.join(SCENE_NAMES)} (default: {DEFAULT_SCENE})")
    parser.add_argument('--scene-file', type=str, default=None,
                        help='Load the scene from a YAML or JSON file instead of a preset')
    parser.add_argument('--res', type=parse_resolution, default=None,
                        help='Resolution as WIDTHxHEIGHT (default: 400x300)')
    parser.add_argument('--out', type=dequote, default=None,
                        help='Output file; .ppm writes P3, other extensions use Pillow '
                             '(default: scene_<name>.ppm)')
    parser.add_argument('--spp', type=parse_positive_int, default=None,
                        help='Samples per pixel (default: 16)')
    parser.add_argument('--depth', type=parse_int, default=None, help='Max reflection depth (default: 5)')
    parser.add_argument('--threads', type=parse_int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=parse_int, default=None, help='Random seed for reproducible renders')

    camera = parser.add_argument_group('camera')
    camera.add_argument('--lookfrom', type=parse_vec3, help='Camera position x,y,z')
    camera.add_argument('--lookat', type=parse_vec3, help='Camera target x,y,z')
    camera.add_argument('--vup', type=parse_vec3, help='Camera up vector x,y,z')
    camera.add_argument('--fov', type=parse_float, help='Vertical field of view in degrees')

    light = parser.add_argument_group('light')
    light.add_argument('--light-pos', type=parse_vec3, help='Light position x,y,z')
    light.add_argument('--light-int', type=parse_intensity, help='Light intensity r,g,b')

    objects = parser.add_argument_group('custom objects (repeatable, switch to the custom scene)')
    objects.add_argument('--add-sphere', type=parse_sphere, action='append', default=[],
                         metavar='"C;R;ALBEDO;REFL"')
    objects.add_argument('--add-plane', type=parse_plane, action='append', default=[],
                         metavar='"P;N;ALBEDO;REFL"')
    objects.add_argument('--add-cube', type=parse_cube, action='append', default=[],
                         metavar='"C;SIZE;ALBEDO;REFL"')
    objects.add_argument('--add-cylinder', type=parse_cylinder, action='append', default=[],
                         metavar='"C;R;HALF_H;ALBEDO;REFL"')

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def overrides_from_args(args: argparse.Namespace) -> SceneOverrides:
    return SceneOverrides(
        look_from=args.lookfrom,
        look_at=args.lookat,
        vup=args.vup,
        fov=args.fov,
        light_position=args.light_pos,
        light_intensity=args.light_int,
        spheres=list(args.add_sphere),
        planes=list(args.add_plane),
        cubes=list(args.add_cube),
        cylinders=list(args.add_cylinder)
    )


def settings_from_args(args: argparse.Namespace, base: Optional[RenderSettings] = None) -> RenderSettings:
    """Merge command-line values over a base configuration."""
    base = base if base is not None else RenderSettings()
    width, height = args.res if args.res is not None else (base.width, base.height)
    return RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=args.spp if args.spp is not None else base.samples_per_pixel,
        max_depth=args.depth if args.depth is not None else base.max_depth,
        tile_size=base.tile_size,
        num_threads=args.threads if args.threads is not None else base.num_threads,
        seed=args.seed if args.seed is not None else base.seed,
        gamma=base.gamma,
        ambient=base.ambient,
        bias=base.bias
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )

    overrides = overrides_from_args(args)
    logger.debug(
        "spheres=%d planes=%d cubes=%d cylinders=%d camera override=%s light override=%s",
        len(overrides.spheres), len(overrides.planes), len(overrides.cubes),
        len(overrides.cylinders), overrides.look_from is not None,
        overrides.light_position is not None
    )

    if args.scene_file:
        try:
            # --res overrides the file's size, so the camera must follow it
            aspect = args.res[0] / args.res[1] if args.res is not None else None
            scene, file_settings = load_scene(args.scene_file, aspect)
        except SceneParseError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        settings = settings_from_args(args, file_settings)
        scene_name = Path(args.scene_file).stem
    else:
        settings = settings_from_args(args)
        scene_name = resolve_scene_name(args.scene, overrides)
        if scene_name != args.scene:
            logger.info("Using scene %r (requested %r)", scene_name, args.scene)
        scene = build_scene(scene_name, settings.aspect_ratio, overrides)

    output = args.out if args.out else default_output_name(scene_name)

    print("=" * 60)
    print("Mirrorcast Ray Tracer")
    print("=" * 60)
    print(f"\nRender Settings:")
    print(f"  Scene: {scene_name}")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")
    print(f"  Objects in scene: {len(scene.world)}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '#' * filled + '-' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    print("\nRendering...")
    start_time = time.time()
    image = renderer.render(scene.world, scene.camera, scene.light)
    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")

    print(f"\nSaving to: {output}")
    try:
        output_path = Path(output)
        if output_path.parent != Path('.'):
            output_path.parent.mkdir(parents=True, exist_ok=True)
        renderer.save_image(image, output)
    except OSError as e:
        print(f"error: cannot write {output}: {e}", file=sys.stderr)
        return 1

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
