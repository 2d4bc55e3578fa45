"""
Image transformation functions for preprocessing.

Each transform takes a PIL Image and returns a new PIL Image. Failures are
raised as PreprocessingError so a broken image fails the upload instead of
reaching the OCR engine.
"""

import cv2
import numpy as np
from PIL import Image
import structlog

from ocr_records.errors import PreprocessingError

logger = structlog.get_logger(__name__)


def pil_to_cv2(image: Image.Image) -> np.ndarray:
    """Convert PIL Image to OpenCV format (BGR, or 2-D for grayscale)."""
    if image.mode == "L":
        return np.array(image)
    if image.mode != "RGB":
        image = image.convert("RGB")
    return cv2.cvtColor(np.array(image), cv2.COLOR_RGB2BGR)


def cv2_to_pil(image: np.ndarray) -> Image.Image:
    """Convert OpenCV image to PIL Image."""
    if len(image.shape) == 2:
        return Image.fromarray(image)
    return Image.fromarray(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))


def _to_gray(image: Image.Image) -> np.ndarray:
    cv_image = pil_to_cv2(image)
    if len(cv_image.shape) == 2:
        return cv_image
    return cv2.cvtColor(cv_image, cv2.COLOR_BGR2GRAY)


def grayscale(image: Image.Image) -> Image.Image:
    """
    Convert image to single-channel luminance.

    Args:
        image: PIL Image in any mode

    Returns:
        Grayscale ("L" mode) PIL Image
    """
    try:
        gray = _to_gray(image)
    except Exception as e:
        raise PreprocessingError(f"Grayscale conversion failed: {e}", {"step": "grayscale"})

    logger.debug("grayscale_applied", size=image.size)
    return cv2_to_pil(gray)


def threshold(image: Image.Image, value: int = 150) -> Image.Image:
    """
    Binarize around a fixed threshold.

    Pixels with luminance >= value become white (255), all others black (0),
    so dark text ends up on a white background.

    Args:
        image: PIL Image
        value: Threshold in 0-255

    Returns:
        Binary ("L" mode) PIL Image
    """
    if not 0 <= value <= 255:
        raise PreprocessingError(f"Threshold must be within 0-255, got {value}", {"step": "threshold"})

    try:
        gray = _to_gray(image)
        # cv2 keeps pixels strictly above the threshold
        _, binary = cv2.threshold(gray, value - 1, 255, cv2.THRESH_BINARY)
    except Exception as e:
        raise PreprocessingError(f"Thresholding failed: {e}", {"step": "threshold"})

    logger.debug("threshold_applied", value=value)
    return cv2_to_pil(binary)


def normalize_contrast(
    image: Image.Image,
    lower_percentile: float = 1.0,
    upper_percentile: float = 99.0
) -> Image.Image:
    """
    Stretch luminance so the given percentiles map to 0 and 255.

    Args:
        image: PIL Image
        lower_percentile: Percentile mapped to black
        upper_percentile: Percentile mapped to white

    Returns:
        Contrast-normalized ("L" mode) PIL Image
    """
    try:
        gray = _to_gray(image)
        low, high = np.percentile(gray, (lower_percentile, upper_percentile))

        if high <= low:
            # Flat image, nothing to stretch
            return cv2_to_pil(gray)

        stretched = (gray.astype(np.float32) - low) * (255.0 / (high - low))
        normalized = np.clip(stretched, 0, 255).astype(np.uint8)
    except Exception as e:
        raise PreprocessingError(f"Contrast normalization failed: {e}", {"step": "normalize_contrast"})

    logger.debug("normalize_contrast_applied", low=float(low), high=float(high))
    return cv2_to_pil(normalized)
