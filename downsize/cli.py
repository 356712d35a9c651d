"""
Command-Line Interface (CLI) setup for Smart Downsize.

This module uses Python's `argparse` to define the `image`, `video`, `still`
and `check-tools` subcommands, and turns the parsed flags into
`ConversionOptions`.
"""
import argparse
import sys
from typing import List, Optional

from .config.image import DEFAULT_QUALITY, WATERMARK_ANCHORS
from .domain.options import ConversionOptions, WatermarkOptions


def _add_conversion_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source", help="Input file.")
    parser.add_argument("target", help="Output file. Missing directories are created.")
    parser.add_argument("--width", type=int, default=None, help="Target width in pixels.")
    parser.add_argument("--height", type=int, default=None, help="Target height in pixels.")
    parser.add_argument(
        "--quality",
        type=int,
        default=None,
        help=f"Compression quality 0-100. Images default to {DEFAULT_QUALITY}; for videos it selects constant-quality encoding.",
    )
    parser.add_argument("--format", default=None, help="Output format or container (e.g. jpg, webp, mp4, webm).")
    parser.add_argument("--bitrate", default=None, help="Video bitrate, e.g. 800k.")
    parser.add_argument(
        "--animated", action="store_true", help="Keep all frames of a GIF source (uses gifsicle)."
    )
    parser.add_argument("--watermark", default=None, help="Overlay image composited onto the output.")
    parser.add_argument(
        "--watermark-position",
        default=None,
        choices=sorted(WATERMARK_ANCHORS),
        help="Watermark placement (default SouthEast).",
    )
    parser.add_argument(
        "--arg",
        dest="args",
        action="append",
        default=[],
        metavar="DIRECTIVE",
        help="Post-processing directive such as '-sharpen 1'. Repeatable.",
    )


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for Smart Downsize.

    Args:
        argv: The arguments to parse; defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments. `command` holds the chosen
                            subcommand.
    """
    parser = argparse.ArgumentParser(description="Resize images, transcode videos and extract still frames.")
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_conversion_arguments(subparsers.add_parser("image", help="Convert and/or resize an image."))
    _add_conversion_arguments(subparsers.add_parser("video", help="Transcode a video."))
    _add_conversion_arguments(subparsers.add_parser("still", help="Extract and resize a still frame from a video."))
    subparsers.add_parser("check-tools", help="Verify that ffmpeg, ffprobe and gifsicle can be run.")

    # Directive values start with a dash, so "--arg -sharpen" must be joined
    # into "--arg=-sharpen" before argparse sees it.
    argv = _join_directive_values(sys.argv[1:] if argv is None else list(argv))
    return parser.parse_args(argv)


def _join_directive_values(argv: List[str]) -> List[str]:
    joined = []
    iterator = iter(argv)
    for item in iterator:
        if item == "--arg":
            value = next(iterator, None)
            joined.append(f"--arg={value}" if value is not None else item)
        else:
            joined.append(item)
    return joined


def options_from_args(args: argparse.Namespace) -> ConversionOptions:
    """Builds `ConversionOptions` from the parsed flags of a conversion subcommand."""
    watermark = None
    if args.watermark:
        watermark = WatermarkOptions(file=args.watermark, position=args.watermark_position)
    return ConversionOptions(
        width=args.width,
        height=args.height,
        animated=args.animated,
        watermark=watermark,
        quality=args.quality,
        format=args.format,
        bitrate=args.bitrate,
        args=args.args,
    )
