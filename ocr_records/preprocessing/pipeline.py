"""
Preprocessing pipeline orchestrator.
"""

import shutil
import time
from pathlib import Path
from typing import Callable, List, Union

from PIL import Image, UnidentifiedImageError
import structlog

from ocr_records.config import get_settings
from ocr_records.errors import PreprocessingError
from ocr_records.observability.metrics import get_metrics
from ocr_records.preprocessing.transforms import (
    grayscale,
    threshold,
    normalize_contrast,
)

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class PreprocessingPipeline:
    """
    Configurable image preprocessing pipeline.

    Runs grayscale -> threshold -> contrast normalization by default. Unlike
    a best-effort enhancer, any failing step aborts the pipeline.
    """

    def __init__(self, config=None):
        """
        Initialize pipeline with configuration.

        Args:
            config: PreprocessingSettings instance (uses default if not provided)
        """
        self.settings = config or get_settings().preprocessing
        self._steps: List[tuple[str, Callable, dict]] = []
        self._build_pipeline()

    def _build_pipeline(self):
        """Build preprocessing steps based on configuration."""
        self._steps = []

        if self.settings.grayscale:
            self._steps.append(("grayscale", grayscale, {}))

        self._steps.append(("threshold", threshold, {"value": self.settings.threshold}))

        if self.settings.normalize:
            self._steps.append(("normalize_contrast", normalize_contrast, {}))

    @property
    def step_names(self) -> List[str]:
        return [name for name, _, _ in self._steps]

    def add_step(self, name: str, func: Callable, params: dict = None):
        """
        Add a custom preprocessing step.

        Args:
            name: Step name for logging
            func: Function that takes PIL Image and returns PIL Image
            params: Additional parameters to pass to the function
        """
        self._steps.append((name, func, params or {}))

    def remove_step(self, name: str):
        """Remove a preprocessing step by name."""
        self._steps = [(n, f, p) for n, f, p in self._steps if n != name]

    def process(self, image: Image.Image) -> Image.Image:
        """
        Process image through the pipeline.

        Args:
            image: PIL Image to process

        Returns:
            Processed PIL Image

        Raises:
            PreprocessingError: if any step fails
        """
        if not self.settings.enabled:
            logger.debug("preprocessing_disabled")
            return image

        current = image

        for step_name, func, params in self._steps:
            logger.debug("preprocessing_step_start", step=step_name)
            try:
                current = func(current, **params)
            except PreprocessingError:
                logger.warning("preprocessing_step_failed", step=step_name)
                raise
            except Exception as e:
                logger.warning("preprocessing_step_failed", step=step_name, error=str(e))
                raise PreprocessingError(
                    f"Preprocessing step '{step_name}' failed: {e}",
                    {"step": step_name}
                )
            logger.debug("preprocessing_step_complete", step=step_name)

        return current

    def process_file(self, source: PathLike, destination: PathLike) -> Path:
        """
        Load an image file, process it and save the result as PNG.

        Args:
            source: Path of the input image
            destination: Path to write the processed PNG to

        Returns:
            The destination path
        """
        destination = Path(destination)
        start_time = time.time()

        if not self.settings.enabled:
            shutil.copyfile(source, destination)
            return destination

        image = self.load_image(source)
        processed = self.process(image)

        try:
            processed.save(destination, format="PNG")
        except OSError as e:
            raise PreprocessingError(f"Failed to write processed image: {e}")

        elapsed = time.time() - start_time
        get_metrics().record_preprocessing(elapsed)
        logger.info(
            "preprocessing_complete",
            steps=self.step_names,
            elapsed_seconds=round(elapsed, 3)
        )
        return destination

    @staticmethod
    def load_image(source: PathLike) -> Image.Image:
        """
        Load and decode an image file.

        Raises:
            PreprocessingError: if the file cannot be read or decoded
        """
        try:
            with Image.open(source) as image:
                # Multi-frame formats (gif, tiff) use the first frame
                image.seek(0)
                image.load()
                return image.copy()
        except (UnidentifiedImageError, OSError) as e:
            raise PreprocessingError(f"Failed to load image: {e}")
