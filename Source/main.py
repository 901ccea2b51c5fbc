"""
SplitSpree - Receipt splitting with settlement of who owes whom

python3 main.py                              # Interactive CLI mode
python3 main.py receipt.jpg                  # Process image and start CLI
python3 main.py --receipt-json receipt.json  # Load an extraction result and start CLI
python3 main.py receipt.jpg --quick          # Quick mode - just show the extraction
"""

import argparse
import json
import logging
import sys

from cli_interface import SplitSpreeCLI
from config import DEFAULT_MAX_WORKERS, WORKERS_MAX, WORKERS_MIN
from log_setup import get_logger, set_log_level
from receipt_extraction import OCRReceiptExtractor, ReceiptExtractionError
from utils import validate_image_path

logger = get_logger(__name__)


def quick_process(image_path: str, workers: int = DEFAULT_MAX_WORKERS) -> int:
    """Extract a receipt and print it as JSON"""
    extractor = OCRReceiptExtractor(num_workers=workers)
    try:
        extraction = extractor.extract(image_path)
    except ReceiptExtractionError as e:
        print(f"⚠ {e}")
        return 1
    print(json.dumps(extraction.to_dict(), indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='SplitSpree - Receipt bill splitter',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                          # Interactive mode
  python main.py receipt.jpg              # Process image then interactive
  python main.py receipt.jpg --quick      # Print the extracted receipt as JSON
  python main.py --receipt-json r.json    # Start from a saved extraction
  python main.py --workers 8              # Use 8 parallel OCR workers
        """
    )
    parser.add_argument('image', nargs='?', help='Receipt image to process')
    parser.add_argument('--receipt-json', help='Extraction result (JSON) to load at startup')
    parser.add_argument(
        '--workers',
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help=f'Number of parallel OCR workers (default: {DEFAULT_MAX_WORKERS})'
    )
    parser.add_argument('--quick', action='store_true', help='Process image and print the extraction only')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--version', action='version', version='SplitSpree 1.0')
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    if args.verbose:
        set_log_level(logging.DEBUG)

    if not WORKERS_MIN <= args.workers <= WORKERS_MAX:
        print(f"⚠ Workers must be between {WORKERS_MIN} and {WORKERS_MAX}")
        args.workers = max(WORKERS_MIN, min(WORKERS_MAX, args.workers))

    if args.image and not validate_image_path(args.image):
        print(f"❌ Invalid or unsupported image: {args.image}")
        return 1

    if args.quick:
        if not args.image:
            print("❌ --quick needs an image")
            return 1
        return quick_process(args.image, args.workers)

    cli = SplitSpreeCLI(extractor=OCRReceiptExtractor(num_workers=args.workers) if args.image else None)
    if args.image:
        cli.process_receipt_image(args.image)
    if args.receipt_json:
        cli.load_receipt_file(args.receipt_json)

    cli.run()
    return 0


def run():
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\n👋 Goodbye!")
        sys.exit(0)
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
