import argparse
import os
import sys
import time

from ImLite import Image
from tracer import RenderMode, render_image
from ExampleSceneDef import SCENES

# Stage label and output file stem for each mode, in pipeline order
STAGES = [
    (RenderMode.DISTANCE, "Step b: Distance rendering", "output_distance"),
    (RenderMode.MATERIAL, "Step c: Material rendering", "output_materials"),
    (RenderMode.DIFFUSE, "Step d: Diffuse shading", "output_diffuse"),
    (RenderMode.SHADOW, "Step e: Rendering with shadows", "output_final"),
]


def render(camera, scene, modes=None, width=800, height=600, output_dir=".", fmt="ppm",
           workers=None, figure=None, verbose=True):
    """Render the scene through the given stages and write one image per stage.

    Returns a dict mapping each RenderMode to its Image.
    """
    if modes is None:
        modes = [mode for mode, _, _ in STAGES]
    modes = [RenderMode(m) for m in modes]

    if verbose and camera.is_degenerate():
        print("Warning: camera view direction is parallel to up; all rays point straight ahead")

    images = {}
    written = []
    start = time.time()
    for mode, label, stem in STAGES:
        if mode not in modes:
            continue
        if verbose:
            print(f"  {label}...")
        im = Image.Zeros((height, width))
        render_image(camera, scene, im, mode, workers=workers, verbose=False)
        path = os.path.join(output_dir, f"{stem}.{fmt}")
        im.writeToFile(path)
        images[mode] = im
        written.append(path)

    if figure is not None:
        Image.SaveStagesFigure(list(images.values()), [m.value for m in images], figure)
        written.append(figure)

    if verbose:
        print(f"Done in {time.time() - start:.1f}s! Generated images:")
        for path in written:
            print(f"  - {path}")
    return images


def positive_int(text):
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def build_parser():
    parser = argparse.ArgumentParser(description='Sphere ray tracer: distance, material, diffuse and shadow stages')
    parser.add_argument('--scene', choices=sorted(SCENES), default='default', help='Scene to render')
    parser.add_argument('--mode', choices=[m.value for m in RenderMode] + ['all'], default='all',
                        help='Render stage (default: all four)')
    parser.add_argument('--width', type=positive_int, default=800, help='Image width')
    parser.add_argument('--height', type=positive_int, default=600, help='Image height')
    parser.add_argument('--workers', type=positive_int, default=None,
                        help='Number of worker processes (default: render sequentially)')
    parser.add_argument('--output-dir', default='.', help='Directory for the output images')
    parser.add_argument('--format', dest='fmt', choices=['ppm', 'png'], default='ppm',
                        help='Output image format')
    parser.add_argument('--figure', default=None, help='Also save a side-by-side figure of the stages here')
    parser.add_argument('--quiet', action='store_true', help='Do not print progress')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    scene_def = SCENES[args.scene]()
    modes = None if args.mode == 'all' else [args.mode]
    verbose = not args.quiet

    if verbose:
        print(f"Scene '{args.scene}': {len(scene_def.scene.spheres)} spheres, "
              f"{len(scene_def.scene.lights)} lights")
        print(f"Rendering {args.width}x{args.height} images...")

    try:
        render(scene_def.camera, scene_def.scene, modes=modes, width=args.width, height=args.height,
               output_dir=args.output_dir, fmt=args.fmt, workers=args.workers,
               figure=args.figure, verbose=verbose)
    except OSError as e:
        print(f"Error: could not write {e.filename or args.output_dir}: {e.strerror or e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
