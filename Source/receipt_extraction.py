"""
Receipt extraction sources for SplitSpree
Turns a receipt photo, or a JSON result from the extraction service, into a ReceiptExtraction
"""

import json
from pathlib import Path
from typing import Any, Optional

from config import DEFAULT_MAX_WORKERS
from data_models import ReceiptExtraction
from log_setup import get_logger
from ocr_processor import ParallelOCRProcessor
from receipt_parser import ReceiptParser

logger = get_logger(__name__)

NOT_A_RECEIPT = "NOT_A_RECEIPT"


class ReceiptExtractionError(ValueError):
    """The input could not be read as a receipt"""


class OCRReceiptExtractor:
    """Extracts receipts locally: Tesseract OCR followed by text parsing"""

    def __init__(self, num_workers: int = DEFAULT_MAX_WORKERS,
                 processor: Optional[ParallelOCRProcessor] = None,
                 parser: Optional[ReceiptParser] = None):
        self.processor = processor or ParallelOCRProcessor(num_workers=num_workers)
        self.parser = parser or ReceiptParser()

    def extract_text(self, ocr_text: str) -> ReceiptExtraction:
        extraction = self.parser.parse(ocr_text)
        if not extraction.items:
            raise ReceiptExtractionError(
                "No items found. The image may not be a receipt; try a clearer photo."
            )
        self.processor.metrics.items_detected = len(extraction.items)
        return extraction

    def extract(self, image_path: str) -> ReceiptExtraction:
        logger.info("Extracting receipt from %s", image_path)
        return self.extract_text(self.processor.process_image_parallel(image_path))


def extraction_from_json(data: Any) -> ReceiptExtraction:
    """Validate an extraction service reply"""
    if data == NOT_A_RECEIPT:
        raise ReceiptExtractionError(
            "The uploaded image is not a receipt. Please upload a clear photo of a receipt."
        )
    if not isinstance(data, dict):
        raise ReceiptExtractionError(f"Unexpected extraction result: {type(data).__name__}")
    try:
        return ReceiptExtraction.from_dict(data)
    except ValueError as e:
        raise ReceiptExtractionError(f"Malformed extraction result: {e}") from e


def load_extraction(path: str) -> ReceiptExtraction:
    """Read an extraction result saved as JSON"""
    try:
        with open(Path(path), encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ReceiptExtractionError(f"{path} is not valid JSON: {e}") from e
    extraction = extraction_from_json(data)
    logger.info("Loaded %d items from %s", len(extraction.items), path)
    return extraction
