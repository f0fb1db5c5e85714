#!/usr/bin/env python3
"""Render a YAML scene to an image file.

CLI tool that loads a scene.v1 YAML file, draws every op onto a canvas and
saves the result through Pillow (format from the output extension).

Usage:
    # Demo scene, antialiased
    python scripts/render_scene.py --scene configs/scenes/basic1.yaml --output outputs/basic1.png

    # Hard edges, debug logging, JSON log file
    python scripts/render_scene.py --scene configs/scenes/basic1.yaml --output outputs/basic1.png \
        --no-antialias --verbose --log-file outputs/logs/render.log --json-log

    # Raw byte dump instead of an image (e.g. BGRA for a blit)
    python scripts/render_scene.py --scene configs/scenes/basic1.yaml --output outputs/basic1.raw \
        --raw --format BGRA --bit-depth 8

Outputs:
    - <output>: rendered image (or raw pixel bytes with --raw)
    - <output stem>.yaml: metadata (scene, size, stride, time) with --metadata
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from vecraster import __version__
from vecraster.scene import render_scene
from vecraster.utils import fs, logging_config, validators


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a vector scene with the software rasterizer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--scene',
        type=str,
        required=True,
        help='Path to scene.v1 YAML file'
    )
    parser.add_argument(
        '--output',
        type=str,
        required=True,
        help='Output file (extension selects the image format)'
    )

    # Rendering
    parser.add_argument(
        '--no-antialias',
        action='store_true',
        help='Disable subpixel coverage for every op'
    )

    # Raw export
    parser.add_argument(
        '--raw',
        action='store_true',
        help='Write serialized pixel bytes instead of an image'
    )
    parser.add_argument(
        '--format',
        type=str,
        default='RGBA',
        choices=['RGBA', 'BGRA', 'ARGB', 'ABGR'],
        help='Channel order for --raw (default: RGBA)'
    )
    parser.add_argument(
        '--bit-depth',
        type=int,
        default=8,
        choices=[8, 16],
        help='Bits per channel for --raw (default: 8)'
    )
    parser.add_argument(
        '--metadata',
        action='store_true',
        help='Write <output stem>.yaml with render metadata'
    )

    # Logging
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also log to this file'
    )
    parser.add_argument(
        '--json-log',
        action='store_true',
        help='JSON lines in the log file'
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    # Setup logging
    log_level = "DEBUG" if args.verbose else "INFO"
    logging_config.setup_logging(
        log_level=log_level,
        log_file=args.log_file,
        json=args.json_log,
        quiet_libs=['PIL'],
        context={'app': 'render'}
    )
    logging_config.install_excepthook()
    logger = logging.getLogger(__name__)

    scene_path = Path(args.scene)
    output_path = Path(args.output)

    logger.info(f"vecraster {__version__}")
    logger.info(f"Loading scene from: {scene_path}")
    try:
        scene = validators.load_scene_config(scene_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    antialias = False if args.no_antialias else None

    start_time = time.time()
    canvas = render_scene(scene, antialias=antialias)
    width, height = canvas.width, canvas.height
    render_time = time.time() - start_time
    logger.info(f"Rendering completed in {render_time:.3f}s")

    if args.raw:
        data, stride = canvas.to_bytebuffer(args.format, args.bit_depth)
        fs.atomic_write_bytes(output_path, data)
        logger.info(f"Saved raw {args.format} {args.bit_depth}-bit buffer: {output_path}")
    else:
        data, stride = canvas.to_bytebuffer('RGBA', 8)
        img = fs.rgba_bytes_to_array(data, width, height, stride)
        fs.atomic_save_image(img, output_path)
        logger.info(f"Saved image: {output_path}")

    if args.metadata:
        metadata = {
            'scene': scene.name,
            'scene_file': str(scene_path),
            'width': width,
            'height': height,
            'ops': len(scene.ops),
            'antialias': scene.canvas.antialias and not args.no_antialias,
            'format': args.format if args.raw else 'RGBA',
            'bit_depth': args.bit_depth if args.raw else 8,
            'stride': stride,
            'render_time_s': round(render_time, 4),
            'version': __version__,
        }
        meta_path = output_path.with_suffix('.yaml')
        fs.atomic_yaml_dump(metadata, meta_path)
        logger.info(f"Saved metadata: {meta_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
