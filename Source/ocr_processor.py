"""
OCR Processing module for SplitSpree
Handles parallel OCR processing of receipt images
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Tuple

import cv2
import numpy as np
import pytesseract
from PIL import Image, ImageEnhance, ImageFilter

from config import DEFAULT_MAX_WORKERS, IMAGE_REGION_OVERLAP_PX, OCR_LANGUAGES, OCR_PSM
from data_models import ProcessingMetrics
from log_setup import get_logger

logger = get_logger(__name__)


class ParallelOCRProcessor:
    """Parallel OCR processing of receipt images"""

    def __init__(self, num_workers: int = DEFAULT_MAX_WORKERS):
        self.num_workers = num_workers
        self.metrics = ProcessingMetrics()
        self.available_languages = self._check_languages()

    def _check_languages(self) -> List[str]:
        """Available Tesseract languages"""
        try:
            languages = pytesseract.get_languages(config='')
        except pytesseract.TesseractNotFoundError:
            raise
        except (pytesseract.TesseractError, OSError) as e:
            logger.warning("Could not check OCR languages: %s", e)
            return ['eng']
        logger.debug("Available OCR languages: %s", ', '.join(languages))
        return languages

    def _get_ocr_language(self) -> str:
        """Configured languages that Tesseract actually has, falling back to English"""
        wanted = [lang for lang in OCR_LANGUAGES.split('+') if lang in self.available_languages]
        return '+'.join(wanted) if wanted else 'eng'

    def preprocess_image(self, image: Image.Image) -> Image.Image:
        """Preprocess image to improve OCR accuracy"""
        if image.mode != 'L':
            image = image.convert('L')

        image = ImageEnhance.Contrast(image).enhance(2.0)
        image = image.filter(ImageFilter.SHARPEN)

        # Remove noise with bilateral filter
        img_array = np.array(image)
        img_array = cv2.bilateralFilter(img_array, 9, 75, 75)
        return Image.fromarray(img_array)

    def split_image_into_regions(self, image: Image.Image) -> List[Tuple[int, Image.Image]]:
        """Split image into overlapping horizontal bands, one per worker"""
        width, height = image.size
        region_height = height // self.num_workers
        regions = []

        for i in range(self.num_workers):
            y_start = i * region_height
            y_end = height if i == self.num_workers - 1 else (i + 1) * region_height + IMAGE_REGION_OVERLAP_PX
            regions.append((i, image.crop((0, y_start, width, min(y_end, height)))))

        return regions

    def process_region(self, region_data: Tuple[int, Image.Image]) -> str:
        """Process a single region with OCR"""
        region_id, region_image = region_data
        logger.debug("Worker %d: processing region", region_id + 1)
        text = pytesseract.image_to_string(
            region_image,
            lang=self._get_ocr_language(),
            config=f'--psm {OCR_PSM}',
        )
        logger.debug("Worker %d: complete", region_id + 1)
        return text

    def process_image_parallel(self, image_path: str) -> str:
        """Process image with parallel OCR workers"""
        start_time = time.time()
        logger.info("Starting parallel OCR with %d workers", self.num_workers)

        with Image.open(image_path) as image:
            logger.info("Image loaded: %dx%d pixels", image.size[0], image.size[1])
            processed_image = self.preprocess_image(image)

        regions = self.split_image_into_regions(processed_image)
        self.metrics.regions_processed = len(regions)

        full_text = []
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            future_to_region = {
                executor.submit(self.process_region, region): region[0]
                for region in regions
            }

            for future in as_completed(future_to_region):
                region_id = future_to_region[future]
                try:
                    full_text.append((region_id, future.result()))
                except pytesseract.TesseractError as e:
                    logger.error("Worker %d failed: %s", region_id + 1, e)

        full_text.sort(key=lambda x: x[0])
        combined_text = '\n'.join(text for _, text in full_text)

        self.metrics.workers_used = self.num_workers
        self.metrics.processing_time = time.time() - start_time

        logger.info("OCR complete in %.2fs", self.metrics.processing_time)
        return combined_text
