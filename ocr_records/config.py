"""
Configuration management using Pydantic Settings.
Supports environment variables and .env files.
"""

from functools import lru_cache
from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PreprocessingSettings(BaseSettings):
    """Image preprocessing configuration."""

    model_config = SettingsConfigDict(env_prefix="PREPROCESSING_")

    enabled: bool = True
    grayscale: bool = True
    threshold: int = Field(default=150, ge=0, le=255)
    normalize: bool = True


class StoreSettings(BaseSettings):
    """Record store configuration."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "ocr_records"
    socket_timeout: float = 5.0


class RecognitionSettings(BaseSettings):
    """OCR engine configuration."""

    model_config = SettingsConfigDict(env_prefix="RECOGNITION_")

    engine: Literal["tesseract", "vision"] = "tesseract"
    tesseract_cmd: Optional[str] = None
    timeout_seconds: float = 0  # 0 disables the timeout

    # Google Cloud (vision engine only)
    google_application_credentials: str = Field(
        default="",
        description="Path to Google Cloud service account JSON"
    )
    google_credentials_json: str = Field(
        default="",
        description="Raw Google Cloud service account JSON content"
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    api_debug: bool = False
    api_cors_origins: List[str] = ["http://localhost:8501", "http://localhost:3000"]

    # Files
    upload_dir: str = "uploads"
    processing_dir: str = "tmp/processing"
    static_url_prefix: str = "/uploads"

    # Uploads
    max_upload_size_mb: int = 10
    allowed_extensions: List[str] = ["png", "jpg", "jpeg", "gif", "bmp", "tiff", "webp"]
    default_language: str = "eng"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Nested settings
    preprocessing: PreprocessingSettings = Field(default_factory=PreprocessingSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    recognition: RecognitionSettings = Field(default_factory=RecognitionSettings)

    @field_validator("api_cors_origins", "allowed_extensions", mode="before")
    @classmethod
    def parse_list(cls, v):
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("allowed_extensions")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        return [ext.lower().lstrip(".") for ext in v]

    @field_validator("static_url_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        return "/" + v.strip("/")

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
