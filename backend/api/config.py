"""Global configuration for DocSplit."""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "DocSplit"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Logging
    log_dir: Path = Path("./logs")
    log_to_file: bool = False
    log_rotation: str = "1 day"
    log_retention: str = "7 days"

    # Intake
    max_upload_size: int = 104857600  # 100MB
    allowed_extensions: List[str] = ["pdf"]

    # Rendering
    preview_zoom: float = Field(default=1.0, gt=0)
    pdf_garbage_level: int = Field(default=3, ge=0, le=4)

    # Naming
    unknown_identifier: str = "unknown"
    output_extension: str = ".pdf"
    batch_archive_name: str = "todos_los_documentos.zip"

    # Packaging
    zip_compression_level: int = Field(default=6, ge=0, le=9)

    model_config = SettingsConfigDict(
        env_prefix="DOCSPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
