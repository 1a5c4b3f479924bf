#!/usr/bin/env python
"""
Command-line interface for the Layout Text Reconstruction Pipeline.

Usage:
    python src/cli.py --input <json_or_folder> --output <output_dir> [options]

Examples:
    # Convert a folder of Document AI JSON files
    python src/cli.py --input ./document-ai-json --output ./document-ai-text

    # Word-to-word spacing with statistical paragraph gaps
    python src/cli.py --input doc.json --output ./out --spacing word_gap --gap-policy statistical

    # Debug mode with word/line visualization
    python src/cli.py --input doc.json --output ./out --debug
"""

import sys
from pathlib import Path

# Add src directory to path for imports when running as script
_src_dir = Path(__file__).parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import argparse
import logging
import time
from typing import List, Optional

from config import (
    ClusteringStrategy,
    GapStrategy,
    SlotScope,
    SpacingStrategy,
    TokenSource,
    get_config,
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("layout_text")

__version__ = "1.0.0"


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Layout Text Reconstruction - Convert OCR token geometry into layout-preserving plain text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Convert every JSON file of a folder:
    python -m src.cli --input ./document-ai-json --output ./document-ai-text

  Use the fixed row grouping instead of overlap clustering:
    python -m src.cli --input doc.json --output ./out --clustering fixed

  Process only specific pages:
    python -m src.cli --input doc.json --output ./out --pages 1-3
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input Document AI JSON file or folder of JSON files"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated text files"
    )

    # Strategies
    parser.add_argument(
        "--clustering",
        choices=ClusteringStrategy.ALL,
        default=None,
        help="Line clustering strategy (default: overlap)"
    )

    parser.add_argument(
        "--spacing",
        choices=SpacingStrategy.ALL,
        default=None,
        help="Horizontal spacing strategy (default: grid)"
    )

    parser.add_argument(
        "--gap-policy",
        choices=GapStrategy.ALL,
        default=None,
        help="Paragraph gap detection policy (default: fixed)"
    )

    parser.add_argument(
        "--slot-scope",
        choices=SlotScope.ALL,
        default=None,
        help="Use the page slot or each line's median word width (default: global)"
    )

    parser.add_argument(
        "--token-source",
        choices=TokenSource.ALL,
        default=None,
        help="Page records to read as words (default: tokens)"
    )

    # Tunable constants
    parser.add_argument(
        "--overlap-threshold",
        type=float,
        default=None,
        help="Vertical overlap percentage for joining a line (default: 65)"
    )

    parser.add_argument(
        "--gap-multiplier",
        type=float,
        default=None,
        help="Row height multiple that marks a paragraph gap (default: 1.5)"
    )

    parser.add_argument(
        "--significance",
        type=float,
        default=None,
        help="Fraction of used width a line must cover to anchor the slot (default: 0.30)"
    )

    parser.add_argument(
        "--pages",
        type=str,
        default=None,
        help="Page range to process, e.g., '1-5' or '1,3,5' (default: all)"
    )

    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Process at most this many leading pages of each document (default: all)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (writes page images and diagnostics JSON)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def parse_page_range(page_str: str, max_pages: int) -> List[int]:
    """Parse page range string to list of page numbers."""
    pages = []

    for part in page_str.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-")
            start = max(int(start), 1)
            end = min(int(end), max_pages)
            pages.extend(range(start, end + 1))
        else:
            page = int(part)
            if 1 <= page <= max_pages:
                pages.append(page)

    return sorted(set(pages))


def check_dependencies(debug: bool = False) -> bool:
    """Check if required dependencies are available."""
    missing = []
    optional_missing = []

    try:
        import numpy
    except ImportError:
        missing.append("numpy")

    try:
        import cv2
    except ImportError:
        optional_missing.append("opencv-python (for debug images)")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    if optional_missing and debug:
        logger.warning("Missing optional dependencies (some features may be limited):")
        for dep in optional_missing:
            logger.warning(f"  - {dep}")

    return True


def build_config(args):
    """Apply command-line overrides on top of the default configuration."""
    config = get_config()

    if args.clustering:
        config.clustering.strategy = args.clustering
    if args.overlap_threshold is not None:
        config.clustering.overlap_threshold = args.overlap_threshold
    if args.spacing:
        config.render.spacing = args.spacing
    if args.gap_policy:
        config.render.gap_policy = args.gap_policy
    if args.gap_multiplier is not None:
        config.render.gap_multiplier = args.gap_multiplier
    if args.significance is not None:
        config.slots.significance_ratio = args.significance
    if args.slot_scope:
        config.slots.slot_scope = args.slot_scope
    if args.token_source:
        config.extraction.token_source = args.token_source
    if args.max_pages is not None:
        config.max_pages = args.max_pages
    if args.debug:
        config.debug_mode = True
        config.output_debug_images = True

    return config


def convert_file(json_path: Path, output_dir: Path, config, pages_arg: Optional[str]) -> Path:
    """Convert a single JSON file and write its text output."""
    from layout_text.io import load_document, save_text, save_json, output_path_for
    from layout_text.assembler import LayoutAssembler
    from layout_text.diagnostics import CollectingSink, LoggingSink, TeeSink

    document = load_document(json_path)

    collector = CollectingSink() if config.debug_mode else None
    sinks = [LoggingSink()] + ([collector] if collector else [])
    assembler = LayoutAssembler.from_config(
        config,
        output_dir=output_dir,
        diagnostics=TeeSink(*sinks)
    )

    page_count = len(document.pages)
    if config.max_pages is not None:
        page_count = max(0, min(page_count, config.max_pages))

    pages = None
    if pages_arg:
        pages = parse_page_range(pages_arg, page_count)
    elif page_count < len(document.pages):
        pages = list(range(1, page_count + 1))

    result = assembler.process_document(document, pages=pages)
    text_path = save_text(
        result.text,
        output_path_for(json_path, output_dir, config.output.output_extension)
    )

    if collector is not None:
        save_json(
            {"result": result.to_dict(), **collector.to_dict()},
            output_dir / "debug" / f"{json_path.stem}_diagnostics.json"
        )

    logger.info(f"Converted {json_path.name}: {len(result.pages)} page(s) -> {text_path}")
    return text_path


def run_pipeline(args) -> int:
    """Run the layout reconstruction pipeline."""
    from layout_text.io import detect_input_type, list_json_files, ensure_dir

    start_time = time.time()
    config = build_config(args)

    output_dir = ensure_dir(args.output)

    input_path = Path(args.input)
    input_type = detect_input_type(input_path)
    logger.info(f"Input type detected: {input_type}")

    if input_type == "json":
        files = [input_path]
    elif input_type == "json_folder":
        files = list_json_files(input_path)
    else:
        logger.error(f"Unsupported input: {input_path}")
        return 1

    failures = 0
    outputs = []
    for json_path in files:
        try:
            outputs.append(convert_file(json_path, output_dir, config, args.pages))
        except (OSError, ValueError) as e:
            failures += 1
            logger.error(f"Failed to convert {json_path}: {e}")

    elapsed = time.time() - start_time

    if not args.quiet:
        print("\n" + "=" * 60)
        print("LAYOUT RECONSTRUCTION COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Output: {output_dir}")
        print(f"Files converted: {len(outputs)}")
        print(f"Files failed: {failures}")
        print(f"Processing time: {elapsed:.2f}s")
        print("=" * 60)

    return 1 if failures else 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if not check_dependencies(debug=args.debug):
        sys.exit(1)

    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
