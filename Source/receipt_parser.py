"""
Receipt Parser module for SplitSpree
Parses OCR text into a ReceiptExtraction: store, date, items and amount lines
"""

import os
import re
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from difflib import SequenceMatcher
from typing import List, Optional

from config import (
    DUPLICATE_SIMILARITY_THRESHOLD,
    FALLBACK_PRICE_MAX,
    FALLBACK_PRICE_MIN,
    ITEM_PRICE_MAX,
    ITEM_PRICE_MIN,
    TOTAL_MISMATCH_TOLERANCE,
)
from constants import (
    DATE_PATTERNS,
    SKIP_WORDS,
    SUBTOTAL_PATTERNS,
    SUMMARY_KEYWORDS,
    TAX_PATTERNS,
    TIP_PATTERNS,
    TOTAL_SUM_PATTERNS,
    ZERO,
)
from data_models import ExtractedItem, ReceiptExtraction
from log_setup import get_logger

logger = get_logger(__name__)

CURRENCY_SUFFIX = r'(?:лв|BGN|\$|USD|€|EUR)?'


class ReceiptParser:
    """Parses OCR text to extract receipt items and amounts"""

    def _clean_price(self, price_str: str, low: float = ITEM_PRICE_MIN, high: float = ITEM_PRICE_MAX) -> Decimal:
        """Clean and convert a price string; out-of-range values give 0"""
        if not price_str:
            return ZERO

        cleaned = re.sub(r'[^\d,\.]', '', str(price_str))

        # European format (comma as decimal separator)
        if ',' in cleaned and '.' in cleaned:
            if cleaned.rfind(',') > cleaned.rfind('.'):
                cleaned = cleaned.replace('.', '').replace(',', '.')
            else:
                cleaned = cleaned.replace(',', '')
        elif ',' in cleaned and cleaned.count(',') == 1:
            if len(cleaned.split(',')[1]) <= 2:
                cleaned = cleaned.replace(',', '.')
            else:
                cleaned = cleaned.replace(',', '')

        if cleaned.count('.') > 1 or cleaned in ('', '.'):
            return ZERO

        price = Decimal(cleaned)
        if Decimal(str(low)) <= price <= Decimal(str(high)):
            return price
        return ZERO

    def _normalize_text(self, text: str) -> str:
        normalized = ' '.join(text.lower().split())
        normalized = re.sub(r'[^\w\s]', ' ', normalized)
        return ' '.join(normalized.split())

    def _is_valid_item_name(self, name: str) -> bool:
        """Check if the name is likely a real item"""
        if not name or len(name.strip()) < 2:
            return False

        words = self._normalize_text(name).split()
        normalized = ' '.join(words)
        for skip_word in SKIP_WORDS:
            if ' ' in skip_word:
                if skip_word in normalized:
                    return False
            elif skip_word in words:
                return False

        if not re.search(r'[a-zA-Zа-яА-Я]', name):
            return False

        if len(re.sub(r'[\d\s\.\,\-]', '', name)) < 2:
            return False

        return True

    def _is_summary_line(self, line: str) -> bool:
        upper = line.upper()
        return any(re.search(r'\b' + re.escape(word) + r'\b', upper) for word in SUMMARY_KEYWORDS)

    def _similarity_score(self, str1: str, str2: str) -> float:
        return SequenceMatcher(None, str1.lower(), str2.lower()).ratio()

    def _deduplicate_by_line_similarity(self, text: str) -> List[str]:
        """Remove duplicate lines that appear due to overlapping OCR regions"""
        unique_lines = []
        seen_exact = set()

        for line in text.split('\n'):
            line = line.strip()
            if not line:
                continue

            if line in seen_exact:
                logger.debug("Skipping exact duplicate: %r", line)
                continue

            similar = next(
                (seen for seen in unique_lines[-10:]
                 if self._similarity_score(line, seen) > DUPLICATE_SIMILARITY_THRESHOLD),
                None,
            )
            if similar is not None:
                logger.debug("Skipping similar duplicate: %r (similar to %r)", line, similar)
                continue

            unique_lines.append(line)
            seen_exact.add(line)

        return unique_lines

    def _make_item(self, name: str, price: Decimal, quantity: int = 1) -> ExtractedItem:
        description = name
        if quantity > 1:
            description = f"{name} ({price / quantity:.2f} each x {quantity})"
        return ExtractedItem(name=name, price=price, description=description)

    def _extract_item_from_line(self, line: str) -> Optional[ExtractedItem]:
        """Extract an item from a single line, trying the patterns in order"""
        line = line.strip()
        if not line or self._is_summary_line(line):
            return None

        # Item xN Price
        qty_match = re.search(r'^(.+?)\s*[xх×](\d+)\s*[-\s]*([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$', line, re.IGNORECASE)
        if qty_match:
            name = qty_match.group(1).strip()
            quantity = int(qty_match.group(2))
            price = self._clean_price(qty_match.group(3))
            if self._is_valid_item_name(name) and price > 0:
                logger.debug("Found qty item: %s x%d = %s", name, quantity, price)
                return self._make_item(name, price, quantity)

        # N Item - Price
        num_item_match = re.search(r'^(\d+)\s+(.+?)\s*[-–]\s*([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$', line, re.IGNORECASE)
        if num_item_match:
            quantity = int(num_item_match.group(1))
            name = num_item_match.group(2).strip()
            price = self._clean_price(num_item_match.group(3))
            if self._is_valid_item_name(name) and price > 0:
                logger.debug("Found numbered item: %s x%d = %s", name, quantity, price)
                return self._make_item(name, price, quantity)

        # Item Qty x UnitPrice Total
        traditional_match = re.search(r'^(.+?)\s+(\d+)\s*[xх×@]\s*([\d,\.]+)\s+([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$', line, re.IGNORECASE)
        if traditional_match:
            name = traditional_match.group(1).strip()
            quantity = int(traditional_match.group(2))
            unit_price = self._clean_price(traditional_match.group(3))
            price = self._clean_price(traditional_match.group(4))
            if self._is_valid_item_name(name) and price > 0 and abs(quantity * unit_price - price) < Decimal("0.5"):
                logger.debug("Found traditional item: %s %dx%s = %s", name, quantity, unit_price, price)
                return self._make_item(name, price, quantity)

        # Item - Price
        simple_match = re.search(r'^(.+?)\s*[-–]\s*\$?([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$', line, re.IGNORECASE)
        if simple_match:
            name = simple_match.group(1).strip()
            price = self._clean_price(simple_match.group(2))
            if self._is_valid_item_name(name) and price > 0:
                logger.debug("Found simple item: %s = %s", name, price)
                return self._make_item(name, price)

        # Item Price
        no_dash_match = re.search(r'^(.+?)\s+\$?([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$', line, re.IGNORECASE)
        if no_dash_match:
            name = no_dash_match.group(1).strip()
            price = self._clean_price(no_dash_match.group(2))
            if self._is_valid_item_name(name) and price > 0:
                logger.debug("Found no-dash item: %s = %s", name, price)
                return self._make_item(name, price)

        return None

    def _fallback_items(self, lines: List[str]) -> List[ExtractedItem]:
        """Looser extraction: any line ending in a plausible price"""
        items = []
        for line in lines:
            if self._is_summary_line(line):
                continue

            price_match = re.search(r'\$?([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$', line, re.IGNORECASE)
            if not price_match:
                continue
            price = self._clean_price(price_match.group(1), FALLBACK_PRICE_MIN, FALLBACK_PRICE_MAX)
            if price <= 0:
                continue

            name = line[:price_match.start()].strip()
            name = re.sub(r'^[\d\s\-\*]+', '', name).strip()
            name = re.sub(r'\s*[-–]\s*$', '', name).strip()
            if len(name) > 2 and self._is_valid_item_name(name):
                logger.debug("Fallback item: %s = %s", name, price)
                items.append(self._make_item(name, price))
        return items

    def _find_amount(self, lines: List[str], patterns: List[str], exclude: Optional[List[str]] = None) -> Decimal:
        """Last matching amount line wins; receipts repeat totals near the bottom"""
        found = ZERO
        for line in lines:
            if exclude and any(re.search(p, line, re.IGNORECASE) for p in exclude):
                continue
            for pattern in patterns:
                match = re.search(pattern, line, re.IGNORECASE)
                if match:
                    amount = self._clean_price(match.group(1), 0, ITEM_PRICE_MAX)
                    if amount > 0:
                        found = amount
                    break
        return found

    def _find_date(self, lines: List[str]) -> str:
        for line in lines:
            for pattern in DATE_PATTERNS:
                match = re.search(pattern, line, re.IGNORECASE)
                if match:
                    return match.group(1)
        return ""

    def _find_store_name(self, lines: List[str]) -> str:
        """First line with letters that is not an item, an amount or a date"""
        for line in lines[:5]:
            if not re.search(r'[a-zA-Zа-яА-Я]', line) or self._is_summary_line(line):
                continue
            if any(re.search(p, line, re.IGNORECASE) for p in DATE_PATTERNS):
                continue
            if self._extract_item_from_line(line) is not None:
                continue
            return line.strip()
        return ""

    def parse(self, ocr_text: str) -> ReceiptExtraction:
        """Parse OCR text to extract receipt items and amounts"""
        logger.debug("Parsing %d characters of OCR text", len(ocr_text))

        lines = self._deduplicate_by_line_similarity(ocr_text)

        max_workers = max(1, min(8, (os.cpu_count() or 4)))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            items = [item for item in executor.map(self._extract_item_from_line, lines) if item is not None]

        if not items:
            logger.info("No items found with the line patterns, trying fallback extraction")
            items = self._fallback_items(lines)

        items_sum = sum((item.price for item in items), ZERO)
        subtotal = self._find_amount(lines, SUBTOTAL_PATTERNS) or items_sum
        tax = self._find_amount(lines, TAX_PATTERNS)
        tip = self._find_amount(lines, TIP_PATTERNS)
        total = self._find_amount(lines, TOTAL_SUM_PATTERNS, exclude=SUBTOTAL_PATTERNS)
        if total == 0:
            total = subtotal + tax + tip
            logger.debug("Calculated total from amounts: %s", total)

        if items and abs(items_sum - subtotal) > Decimal(str(TOTAL_MISMATCH_TOLERANCE)):
            logger.warning(
                "Subtotal mismatch: items sum to %s but receipt says %s; "
                "this suggests duplicate items or parsing errors", items_sum, subtotal,
            )

        extraction = ReceiptExtraction(
            store_name=self._find_store_name(lines),
            date=self._find_date(lines),
            items=tuple(items),
            subtotal=subtotal,
            tax=tax,
            tip=tip,
            total=total,
        )
        logger.info("Parsed %d items, total %s", len(extraction.items), extraction.total)
        return extraction
