#!/usr/bin/env python3
"""
Offline Compose Script
======================

Standalone script that runs the compose pipeline on an image file.

This script:
    1. Loads a source image from disk
    2. Composes it with the given frame and editor controls
    3. Encodes the canvas and writes it next to the input (or to --output)
    4. Reports timing and compositor counters

Usage:
    python scripts/compose_file.py photo.jpg --frame frame1
    python scripts/compose_file.py photo.png --zoom 1.3 --rotate 15 --mime image/png
"""

import argparse
import asyncio
import logging
import os
import sys
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from photobooth.capture import load_image
from photobooth.editor import Compositor, Exporter
from photobooth.frames import DirectoryFrameProvider
from photobooth.models import build_controls


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def run_compose(args: argparse.Namespace) -> Path:
    """
    Compose one image file.

    Args:
        args: Parsed command line arguments

    Returns:
        Path of the written output
    """
    source = load_image(args.image)
    controls = build_controls(
        zoom=args.zoom,
        rotate=args.rotate,
        brightness=args.brightness,
        contrast=args.contrast,
    )

    compositor = Compositor(
        frames=DirectoryFrameProvider(args.frames_dir),
        width=args.width,
        height=args.height,
    )
    exporter = Exporter()

    logger.info("=" * 60)
    logger.info(f"Source: {args.image} ({source.width}x{source.height})")
    logger.info(f"Frame: {args.frame or '(none)'}")
    logger.info(f"Controls: {controls.model_dump()}")
    logger.info("=" * 60)

    start = time.perf_counter()
    canvas = await compositor.compose(source, args.frame, controls)
    compose_ms = (time.perf_counter() - start) * 1000

    start = time.perf_counter()
    result = exporter.encode(canvas, args.mime, args.quality)
    encode_ms = (time.perf_counter() - start) * 1000

    output = Path(args.output) if args.output else (
        Path(args.image).with_name(f"{Path(args.image).stem}_composed{result.extension}")
    )
    output.write_bytes(result.data)

    logger.info(f"Compose: {compose_ms:.1f} ms")
    logger.info(f"Encode: {encode_ms:.1f} ms ({len(result.data)} bytes)")
    if compositor.last_warning:
        logger.warning(f"Warning: {compositor.last_warning}")
    logger.info(f"Written: {output}")

    return output


def main():
    parser = argparse.ArgumentParser(description="Compose an image file with a photobooth frame")
    parser.add_argument("image", type=str, help="Source image path")
    parser.add_argument("--frame", type=str, default=None, help="Frame id from the catalog")
    parser.add_argument(
        "--frames-dir",
        type=str,
        default=os.environ.get("PHOTOBOOTH_FRAMES_DIR", "./public/frames"),
        help="Frame catalog directory",
    )
    parser.add_argument("--zoom", type=float, default=1.0)
    parser.add_argument("--rotate", type=float, default=0.0, help="Degrees, clockwise")
    parser.add_argument("--brightness", type=float, default=1.0)
    parser.add_argument("--contrast", type=float, default=1.0)
    parser.add_argument("--width", type=int, default=1396, help="Canvas width")
    parser.add_argument("--height", type=int, default=1006, help="Canvas height")
    parser.add_argument("--mime", type=str, default="image/jpeg", help="Export MIME type")
    parser.add_argument("--quality", type=float, default=0.9, help="Quality in [0, 1]")
    parser.add_argument("--output", type=str, default=None, help="Output path")

    args = parser.parse_args()

    try:
        asyncio.run(run_compose(args))
    except Exception as e:
        logger.error(f"Compose failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
