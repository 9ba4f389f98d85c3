"""
Command line entry point: recognize drawn text in a DXF or vector PDF.
"""

import sys
import logging
import argparse
import warnings
from pathlib import Path
from typing import List, Optional

from .classifier import TesseractClassifier
from .clustering import POLICIES
from .config import CLUSTERING_CONFIG, LOGGING_CONFIG, OCR_CONFIG
from .config_validator import ConfigValidator, print_validation_report
from .exceptions import CADTextError, ClassifierUnavailableError
from .output import export_lines_json, save_glyph_bitmap, write_dxf_text
from .pipeline import TextRecognizer
from .sources import DxfEntitySource, open_source

logger = logging.getLogger(__name__)

# Suppress warnings
warnings.filterwarnings('ignore', category=UserWarning)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cadtext",
        description="Rebuild text from vector strokes (lines, arcs, polylines, splines) in a drawing.",
    )
    parser.add_argument("input", nargs="?", type=Path, help="DXF or vector PDF file")
    parser.add_argument("--page", type=int, default=0, help="PDF page index (default 0)")
    parser.add_argument("--layer", action="append", default=None,
                        help="Only use entities on this DXF layer (repeatable)")
    parser.add_argument("--policy", choices=sorted(POLICIES), default=CLUSTERING_CONFIG["policy"],
                        help="Clustering policy")
    parser.add_argument("--lang", default=OCR_CONFIG["language"], help="Tesseract language, e.g. eng or eng+rus")
    parser.add_argument("--json", type=Path, help="Write recognized lines as JSON")
    parser.add_argument("--dxf-out", type=Path, help="Write recognized lines as DXF TEXT entities")
    parser.add_argument("--dump-dir", type=Path, help="Save every glyph bitmap as PNG")
    parser.add_argument("--validate-only", action="store_true", help="Only run configuration checks")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def run(args: argparse.Namespace) -> int:
    source = open_source(args.input, page_index=args.page, layers=args.layer)
    recognizer = TextRecognizer(TesseractClassifier(language=args.lang), policy=args.policy)

    on_glyph = None
    if args.dump_dir is not None:
        def on_glyph(index, cluster, bitmap, text):
            save_glyph_bitmap(bitmap, args.dump_dir, index, text)

    result = recognizer.recognize(source, on_glyph=on_glyph)

    for line in result.lines:
        print(line.text)

    if args.json is not None:
        export_lines_json(result.lines, args.json)
        logger.info(f"Lines written to {args.json}")
    if args.dxf_out is not None:
        base = source.doc if isinstance(source, DxfEntitySource) else None
        write_dxf_text(result.lines, args.dxf_out, base=base)

    if not result.lines:
        logger.warning("Could not recognize any text")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the text recognition tool."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, LOGGING_CONFIG["level"]),
        format=LOGGING_CONFIG["format"],
    )

    logger.info("Validating configuration...")
    is_valid, errors, warns = ConfigValidator.validate_all()
    if args.validate_only:
        print_validation_report(is_valid, errors, warns)
        return 0 if is_valid else 1

    for warning in warns:
        logger.warning(f"Configuration warning: {warning}")
    if not is_valid:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        logger.error("Stopping: configuration validation failed")
        return 1

    if args.input is None:
        parser.error("input file is required")

    try:
        return run(args)
    except ClassifierUnavailableError as e:
        logger.error(str(e))
        return 1
    except CADTextError as e:
        logger.error(f"Recognition failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Recognition interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
