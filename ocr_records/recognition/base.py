"""
Recognizer interface shared by all OCR engines.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union


class Recognizer(ABC):
    """
    Text recognition capability.

    Implementations read an image file and return the plain text found in
    it. Engine failures are raised as RecognitionError.
    """

    name: str = "abstract"

    @abstractmethod
    def recognize(self, image_path: Union[str, Path], language: str) -> str:
        """Run OCR on the image at image_path using the given language code."""
        raise NotImplementedError

    def is_available(self) -> bool:
        """Return True if the engine can be used on this system."""
        return True
