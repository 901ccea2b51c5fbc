#!/usr/bin/env python3
"""
Utility functions for SplitSpree
"""

import mimetypes
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from config import MAX_IMAGE_SIZE_BYTES
from log_setup import get_logger

logger = get_logger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.gif', '.webp'}


def validate_image_path(image_path: str) -> bool:
    """Check that a path points to a readable image of acceptable size"""
    if not isinstance(image_path, str):
        logger.warning("Image path must be a string")
        return False

    path = Path(image_path)

    if '..' in path.parts:
        logger.warning("Invalid path pattern: %s", image_path)
        return False

    if not path.is_file():
        logger.warning("File not found: %s", image_path)
        return False

    size = path.stat().st_size
    if size > MAX_IMAGE_SIZE_BYTES:
        logger.warning("File too large: %d bytes (max: %d)", size, MAX_IMAGE_SIZE_BYTES)
        return False

    if path.suffix.lower() not in IMAGE_EXTENSIONS:
        logger.warning("Unsupported file extension: %s", path.suffix)
        return False

    mime_type, _ = mimetypes.guess_type(str(path))
    if mime_type and not mime_type.startswith('image/'):
        logger.warning("Invalid MIME type: %s", mime_type)
        return False

    return True


def try_parse_int(value: str) -> Optional[int]:
    """Safely parse integer from string"""
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def try_parse_decimal(value: str) -> Optional[Decimal]:
    """Safely parse an amount such as '12.50', '12,50' or '$12.50'"""
    if not isinstance(value, str):
        return None
    cleaned = value.strip().lstrip('$').replace(',', '.')
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def parse_selection(value: str, count: int) -> Optional[List[int]]:
    """Parse '1, 3' into zero-based indices; None if any entry is out of range"""
    if not isinstance(value, str) or not value.strip():
        return None
    indices = []
    for part in value.split(','):
        number = try_parse_int(part)
        if number is None or not 1 <= number <= count:
            return None
        indices.append(number - 1)
    return indices


def validate_menu_choice(choice: str, valid_choices: List[str]) -> Optional[str]:
    """Validate a menu choice against allowed options"""
    if not isinstance(choice, str):
        return None
    choice = choice.strip()
    return choice if choice in set(valid_choices) else None


def clean_text_for_display(text: str, max_length: int = 100) -> str:
    """Clean text for safe display in the terminal"""
    if not isinstance(text, str):
        return ""

    text = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', text)
    text = ' '.join(text.split())

    if len(text) > max_length:
        text = text[:max_length - 3] + "..."

    return text


def ensure_directory_exists(directory: str) -> bool:
    """Ensure a directory exists, create it if it doesn't"""
    try:
        Path(directory).mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        logger.error("Failed to create directory %s: %s", directory, e)
        return False
