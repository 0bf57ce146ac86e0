import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from jpeg_dump.marker import marker_detector

logger = logging.getLogger(__name__)

EX_OK = 0
EX_IOERR = 74


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jpegdump",
        description="Dump the marker segments of a JPEG / JPEG-LS file",
    )
    parser.add_argument("path", help="Path to the JPEG file to dump")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on a truncated segment instead of reading the missing bytes as 0",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log scanner decisions to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s | %(name)s | %(message)s",
    )

    jpeg_path = Path(args.path)
    print(f"Dumping JPEG file: {jpeg_path}")
    print("=============================================================================")

    try:
        marker_detector(jpeg_path, strict=args.strict)
    except OSError as e:
        logger.error("Failed to dump %s: %s", jpeg_path, e)
        return EX_IOERR

    return EX_OK


if __name__ == "__main__":
    sys.exit(main())
