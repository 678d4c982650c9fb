import io
import logging
from typing import Union

import pytesseract
from PIL import Image, UnidentifiedImageError

from healthscan.errors import OCRError

logger = logging.getLogger(__name__)

TESSERACT_CONFIG = "--psm 3"


def open_image(image: Union[str, bytes]) -> Image.Image:
    if isinstance(image, (bytes, bytearray)):
        return Image.open(io.BytesIO(image))
    return Image.open(image)


def extract_text_from_image(image: Union[str, bytes], lang: str = "spa+eng") -> str:
    """
    Uses OCR to extract text from an image path or raw image bytes.
    Requires pytesseract (and the tesseract binary) and Pillow.
    """
    try:
        img = open_image(image)
    except (OSError, UnidentifiedImageError) as e:
        raise OCRError(f"Could not open image: {e}") from e

    try:
        text = pytesseract.image_to_string(img, lang=lang, config=TESSERACT_CONFIG)
    except pytesseract.TesseractNotFoundError as e:
        raise OCRError("Tesseract is not installed or not on PATH") from e
    except pytesseract.TesseractError as e:
        raise OCRError(f"OCR extraction failed: {e}") from e

    logger.info(f"OCR completed, {len(text)} characters read")
    return text
