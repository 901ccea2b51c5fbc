"""Tests for extraction sources: saved JSON results and OCR text."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest

from data_models import ProcessingMetrics
from receipt_extraction import (
    NOT_A_RECEIPT,
    OCRReceiptExtractor,
    ReceiptExtractionError,
    extraction_from_json,
    load_extraction,
)

SERVICE_REPLY = {
    "storeName": "Corner Market",
    "date": "03/15/2024",
    "items": [
        {"name": "SNCK BAR", "price": 4.5, "description": "Snack Bars ($1.50 each x 3)"},
        {"name": "BANANAS", "price": 1.25},
    ],
    "subtotal": 5.75,
    "tax": 0.46,
    "tip": 0,
    "total": 6.21,
}


def fake_extractor() -> OCRReceiptExtractor:
    processor = SimpleNamespace(metrics=ProcessingMetrics())
    return OCRReceiptExtractor(processor=processor)


def test_extraction_from_service_reply() -> None:
    extraction = extraction_from_json(SERVICE_REPLY)

    assert extraction.store_name == "Corner Market"
    assert extraction.items[0].price == Decimal("4.5")
    assert extraction.items[0].description == "Snack Bars ($1.50 each x 3)"
    assert extraction.items[1].description == "BANANAS"
    assert extraction.tax == Decimal("0.46")
    assert extraction.total == Decimal("6.21")


def test_not_a_receipt_reply() -> None:
    with pytest.raises(ReceiptExtractionError, match="not a receipt"):
        extraction_from_json(NOT_A_RECEIPT)


@pytest.mark.parametrize("reply", [[], {"storeName": "x"}, {"items": [{"name": "no price"}]}, {"items": [], "total": "n/a"}])
def test_malformed_replies(reply) -> None:
    with pytest.raises(ReceiptExtractionError):
        extraction_from_json(reply)


def test_load_extraction_round_trips_to_dict(tmp_path: Path) -> None:
    path = tmp_path / "receipt.json"
    path.write_text(json.dumps(SERVICE_REPLY), encoding="utf-8")

    extraction = load_extraction(str(path))
    assert extraction.to_dict()["items"][1] == {"name": "BANANAS", "price": 1.25, "description": "BANANAS"}
    assert extraction.to_dict()["total"] == 6.21


def test_load_extraction_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ReceiptExtractionError):
        load_extraction(str(path))


def test_extract_text_counts_items() -> None:
    extractor = fake_extractor()
    extraction = extractor.extract_text("Pasta 11.50\nSalad 8.50\nTOTAL 20.00\n")
    assert len(extraction.items) == 2
    assert extractor.processor.metrics.items_detected == 2


def test_extract_text_without_items_is_an_error() -> None:
    with pytest.raises(ReceiptExtractionError):
        fake_extractor().extract_text("just some words\n")
