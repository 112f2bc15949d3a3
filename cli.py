import argparse
import sys
import time

from utils import to_srgb8, to_linear8
from ImLite import Image
from tracer import render_image, MAX_DEPTH
from scene_file import load_scene, SceneFileError


def add_render_arguments(parser):
    """Options shared by the raytrace command and scene scripts."""
    parser.add_argument('-o', '--output', default='output.png',
                        help='output image file; the extension picks the format (default: %(default)s)')
    parser.add_argument('--width', type=int, default=320, help='image width (default: %(default)s)')
    parser.add_argument('--height', type=int, default=180, help='image height (default: %(default)s)')
    parser.add_argument('-d', '--depth', type=int, default=MAX_DEPTH,
                        help='maximum number of reflection/refraction bounces (default: %(default)s)')
    parser.add_argument('-j', '--workers', type=int, default=1,
                        help='number of render processes, 0 for one per CPU (default: %(default)s)')
    parser.add_argument('--no-gamma', dest='gamma', action='store_false',
                        help='write linear values instead of sRGB')
    parser.add_argument('--show', action='store_true', help='display the image after rendering')
    parser.add_argument('-q', '--quiet', action='store_true', help='do not print progress')
    return parser


def _check_args(parser, args):
    if args.width < 1 or args.height < 1:
        parser.error(f"image size must be positive, got {args.width}x{args.height}")
    if args.depth < 0:
        parser.error(f"depth must not be negative, got {args.depth}")
    if args.workers < 0:
        parser.error(f"workers must not be negative, got {args.workers}")
    if not Image.CanWrite(args.output):
        parser.error(f"unknown image format for output file {args.output}")


def _render_and_save(parser, scene, args):
    verbose = not args.quiet
    if verbose:
        print(f"Rendering {args.width}x{args.height}, depth {args.depth}...")
    start_time = time.time()

    pix = render_image(scene, args.width, args.height, max_depth=args.depth,
                       workers=args.workers or None, verbose=verbose)

    if verbose:
        print(f"Render complete in: {time.time() - start_time:.2f} seconds")

    im = Image(pixels=to_srgb8(pix) if args.gamma else to_linear8(pix))
    try:
        im.writeToFile(args.output)
    except (OSError, ValueError) as e:
        parser.exit(1, f"{parser.prog}: error: could not write {args.output}: {e}\n")
    if verbose:
        print(f"Wrote {args.output}")
    if args.show:
        im.show(title=args.output)
    return im


def render(scene, argv=None):
    """Render scene with options taken from the command line.

    Meant to be called at the bottom of a scene script.
    """
    parser = add_render_arguments(argparse.ArgumentParser(description='Render this scene.'))
    args = parser.parse_args(argv)
    _check_args(parser, args)
    return _render_and_save(parser, scene, args)


def main(argv=None):
    parser = argparse.ArgumentParser(prog='raytrace', description='Python Ray Tracer')
    parser.add_argument('scene_file', help='path to the scene file')
    parser.add_argument('--bvh', action='store_true',
                        help='accelerate intersection with a bounding volume hierarchy')
    add_render_arguments(parser)
    args = parser.parse_args(argv)
    _check_args(parser, args)

    try:
        scene = load_scene(args.scene_file, use_bvh=args.bvh)
    except SceneFileError as e:
        parser.error(str(e))
    except OSError as e:
        parser.error(f"could not read {args.scene_file}: {e}")

    _render_and_save(parser, scene, args)
    return 0


if __name__ == '__main__':
    sys.exit(main())
