"""Image preprocessing module."""

from ocr_records.preprocessing.pipeline import PreprocessingPipeline
from ocr_records.preprocessing.transforms import (
    grayscale,
    threshold,
    normalize_contrast,
)

__all__ = [
    "PreprocessingPipeline",
    "grayscale",
    "threshold",
    "normalize_contrast",
]
