"""
Centralized configuration for SplitSpree with environment
"""

import os

# OCR settings
OCR_PSM = int(os.getenv("SPLITSPREE_OCR_PSM", "6"))
OCR_LANGUAGES = os.getenv("SPLITSPREE_OCR_LANGUAGES", "eng")

# Runtime settings
DEFAULT_MAX_WORKERS = int(os.getenv("SPLITSPREE_MAX_WORKERS", "4"))
EXPORT_DIRECTORY = os.getenv("SPLITSPREE_EXPORT_DIR", ".")
LOG_LEVEL = os.getenv("SPLITSPREE_LOG_LEVEL", "INFO")

# Thresholds
DUPLICATE_SIMILARITY_THRESHOLD = float(os.getenv("SPLITSPREE_DUP_SIMILARITY", "0.95"))
IMAGE_REGION_OVERLAP_PX = int(os.getenv("SPLITSPREE_IMAGE_OVERLAP", "50"))
MAX_IMAGE_SIZE_BYTES = int(os.getenv("SPLITSPREE_MAX_IMAGE_SIZE_BYTES", str(50 * 1024 * 1024)))

# Price normalization
ITEM_PRICE_MIN = float(os.getenv("SPLITSPREE_ITEM_PRICE_MIN", "0.01"))
ITEM_PRICE_MAX = float(os.getenv("SPLITSPREE_ITEM_PRICE_MAX", "10000"))
FALLBACK_PRICE_MIN = float(os.getenv("SPLITSPREE_FALLBACK_PRICE_MIN", "1.0"))
FALLBACK_PRICE_MAX = float(os.getenv("SPLITSPREE_FALLBACK_PRICE_MAX", "500.0"))
TOTAL_MISMATCH_TOLERANCE = float(os.getenv("SPLITSPREE_TOTAL_MISMATCH_TOLERANCE", "1.0"))

# Workers bounds
WORKERS_MIN = int(os.getenv("SPLITSPREE_WORKERS_MIN", "1"))
WORKERS_MAX = int(os.getenv("SPLITSPREE_WORKERS_MAX", "16"))
