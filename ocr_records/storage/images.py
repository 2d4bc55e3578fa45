"""
Image file storage for uploads and preprocessing temp files.
"""

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import structlog

from ocr_records.config import get_settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StoredImage:
    """A raw upload written to the upload directory."""
    path: Path
    url: str

    @property
    def filename(self) -> str:
        return self.path.name


class ImageStorage:
    """
    Writes uploads under unique names and maps them to public URLs.

    Uploads live in upload_dir and are served under static_url_prefix.
    Preprocessed images are written to processing_dir, which is never served.
    """

    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        self.upload_dir = Path(self.settings.upload_dir).resolve()
        self.processing_dir = Path(self.settings.processing_dir).resolve()
        self.url_prefix = self.settings.static_url_prefix

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.processing_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _unique_name(extension: str) -> str:
        extension = extension.lower()
        if extension and not extension.startswith("."):
            extension = "." + extension
        return f"{uuid.uuid4().hex}{extension}"

    def save_upload(self, content: bytes, extension: str) -> StoredImage:
        """
        Write raw upload bytes under a new unique filename.

        Args:
            content: Image bytes
            extension: Original file extension, kept on the stored file

        Returns:
            StoredImage with filesystem path and public URL
        """
        path = self.upload_dir / self._unique_name(extension)
        # "xb" refuses to overwrite an existing file
        with open(path, "xb") as f:
            f.write(content)

        stored = StoredImage(path=path, url=f"{self.url_prefix}/{path.name}")
        logger.debug("upload_saved", path=str(path), size_bytes=len(content))
        return stored

    def temp_path(self, suffix: str = ".png") -> Path:
        """Unique path for a preprocessed image."""
        return self.processing_dir / f"processed-{self._unique_name(suffix)}"

    def path_for_url(self, url: str) -> Optional[Path]:
        """
        Resolve a public image URL back to its file in the upload directory.

        Returns None for URLs outside the static prefix or paths that would
        escape the upload directory.
        """
        prefix = self.url_prefix + "/"
        if not url.startswith(prefix):
            return None

        path = (self.upload_dir / url[len(prefix):]).resolve()
        if path.parent != self.upload_dir:
            return None
        return path

    def remove(self, path: Union[str, Path, None]) -> bool:
        """
        Best-effort delete. A missing file is not an error.

        Returns:
            True if a file was deleted
        """
        if path is None:
            return False

        path = Path(path)
        try:
            path.unlink()
            logger.debug("file_removed", path=str(path))
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("cleanup_failed", path=str(path), error=str(e))
            return False
