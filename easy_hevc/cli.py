"""Command-line interface for easy-hevc."""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .converter import run_convert
from .encoder import FFMPEG_BIN, check_binaries
from .errors import MissingBinaryError
from .finalize import run_finalize
from .models import PRESETS, ConvertOptions, FinalizeOptions, Resolution
from .probe import FFPROBE_BIN


COMMANDS = ("convert", "finalize")
DEFAULT_COMMAND = "convert"


def _crf(value: str) -> int:
    crf = int(value)
    if not 0 < crf < 51:
        raise argparse.ArgumentTypeError("CRF must be between 1 and 50")
    return crf


def _tolerance(value: str) -> float:
    tolerance = float(value)
    if tolerance < 0:
        raise argparse.ArgumentTypeError("duration tolerance must not be negative")
    return tolerance


def _add_tolerance_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--duration-tolerance",
        type=_tolerance,
        default=os.environ.get("HEVC_DURATION_TOLERANCE", "2.0"),
        help="Maximum allowed duration difference in seconds between source "
             "and converted file (default: 2.0, env: HEVC_DURATION_TOLERANCE)"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with convert and finalize subcommands."""
    parser = argparse.ArgumentParser(
        prog="easy-hevc",
        description="Batch convert video files to HEVC (H.265) to save disk space.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -i /path/to/videos
  %(prog)s convert -i movie.mp4 -r 720 --crf 26
  %(prog)s finalize -i /path/to/videos --dry-run
        """
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert videos to HEVC/H.265 (default)")
    convert.add_argument(
        "-i", "--input", type=Path, required=True, help="Input file or folder"
    )
    convert.add_argument(
        "-s", "--suffix",
        default=os.environ.get("HEVC_SUFFIX", "_converted"),
        help="Output suffix (default: _converted, env: HEVC_SUFFIX)"
    )
    convert.add_argument(
        "-r", "--resolution",
        type=Resolution,
        choices=list(Resolution),
        metavar="{" + ",".join(r.value for r in Resolution) + "}",
        default=os.environ.get("HEVC_RES", Resolution.R1080.value),
        help="Output height; taller sources are downscaled, 'source' keeps "
             "the native height (default: 1080, env: HEVC_RES)"
    )
    convert.add_argument(
        "--crf",
        type=_crf,
        default=os.environ.get("HEVC_CRF", "24"),
        help="Constant Rate Factor, lower is better quality (default: 24, env: HEVC_CRF)"
    )
    convert.add_argument(
        "--preset",
        choices=PRESETS,
        default=os.environ.get("HEVC_PRESET", "medium"),
        help="x265 speed preset (default: medium, env: HEVC_PRESET)"
    )
    convert.add_argument(
        "--delete-original",
        action="store_true",
        help="Delete the source when the converted file is smaller"
    )
    convert.add_argument(
        "--preserve-dates",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Copy the source's modification time to the converted file (default: on)"
    )
    _add_tolerance_option(convert)

    finalize = subparsers.add_parser(
        "finalize", help="Delete originals and rename converted files to replace them"
    )
    finalize.add_argument(
        "-i", "--input", type=Path, required=True, help="Input folder to clean"
    )
    finalize.add_argument(
        "-f", "--force", action="store_true", help="Skip the confirmation prompt"
    )
    finalize.add_argument(
        "-d", "--dry-run",
        action="store_true",
        help="Show what would be deleted and renamed without touching any file"
    )
    _add_tolerance_option(finalize)

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments, defaulting to the convert command."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in (*COMMANDS, "-h", "--help", "--version"):
        argv.insert(0, DEFAULT_COMMAND)
    return build_parser().parse_args(argv)


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments."""
    if not args.input.exists():
        print(f"Error: Input path does not exist: {args.input}")
        sys.exit(1)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    validate_args(args)

    try:
        if args.command == "finalize":
            check_binaries((FFPROBE_BIN,))
        else:
            check_binaries((FFMPEG_BIN, FFPROBE_BIN))
    except MissingBinaryError as e:
        print(f"Error: {e}")
        print("Please install ffmpeg (which provides ffprobe) and make sure it is on PATH.")
        sys.exit(1)

    try:
        if args.command == "finalize":
            run_finalize(FinalizeOptions(
                input=args.input.absolute(),
                force=args.force,
                dry_run=args.dry_run,
                duration_tolerance=args.duration_tolerance,
            ))
        else:
            run_convert(ConvertOptions(
                input=args.input.absolute(),
                suffix=args.suffix,
                resolution=args.resolution,
                crf=args.crf,
                preset=args.preset,
                delete_original=args.delete_original,
                preserve_dates=args.preserve_dates,
                duration_tolerance=args.duration_tolerance,
            ))
    except KeyboardInterrupt:
        print("\n\nInterrupted!")
        sys.exit(1)
