"""Command-line entry point: compress one image towards a target size.

    python main.py photo.jpg -t 50 -w 1200 -f webp
"""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Sequence

from sizetarget import config
from sizetarget.controller import default_controller
from sizetarget.loader import load_pixels
from sizetarget.models import CompressionError, EncodeFormat, TargetSpec
from sizetarget.report import CompressionReport, output_name
from utils.validation import validate_output_path

LOGGER_NAME = "sizetarget"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_OVER_TARGET = 2


def configure_logging(
    verbose: bool = False,
    log_path: Optional[Path] = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Idempotent so repeated calls (tests, embedding) do not stack handlers.
    Output goes to a rotating log file and to stdout.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    log_path = log_path or Path.cwd() / config.LOG_FILE
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compress an image so it fits a target size in KB."
    )
    parser.add_argument("input", help="Image file to compress")
    parser.add_argument(
        "-t", "--target", type=int, default=config.DEFAULT_TARGET_KB,
        help=f"Target size in KB (presets: {', '.join(map(str, config.TARGET_PRESETS_KB))})",
    )
    parser.add_argument(
        "-w", "--max-width", default=str(config.DEFAULT_MAX_DIMENSION),
        help=f"Initial maximum width in pixels (at least {config.MIN_DIMENSION})",
    )
    parser.add_argument(
        "-f", "--format", default="jpeg", choices=["jpeg", "jpg", "webp", "png"],
        help="Output format",
    )
    parser.add_argument("-o", "--output", help="Output file (default: next to the input)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every search step")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logging(args.verbose)

    try:
        spec = TargetSpec.from_request(args.target, args.max_width, args.format)
        source, original_bytes = load_pixels(args.input)
        fmt = EncodeFormat.from_value(args.format)
        if args.output:
            out_path = validate_output_path(args.output, [fmt.extension, fmt.name.lower()])
        else:
            out_path = Path(args.input).resolve().parent / output_name(args.target, fmt)
        outcome = default_controller().compress_detailed(source, spec)
    except (ValueError, CompressionError) as exc:
        logger.error("Compression failed: %s", exc)
        print("Compression failed. Try again with JPG format.", file=sys.stderr)
        return EXIT_FAILED

    try:
        out_path.write_bytes(outcome.blob.data)
    except OSError as exc:
        logger.error("Cannot write %s: %s", out_path, exc)
        print(f"Could not write output file: {out_path}", file=sys.stderr)
        return EXIT_FAILED

    report = CompressionReport.build(outcome, original_bytes, args.target, out_path.name)
    print(report.summary())
    print(report.status)
    logger.info("Wrote %s (%d bytes)", out_path, report.size_bytes)
    return EXIT_OK if report.target_met else EXIT_OVER_TARGET


if __name__ == "__main__":
    sys.exit(main())
