"""Configuration management for dxfnest."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DXFNEST_",
        extra="ignore",
    )

    # Sheet
    sheet_width: float = Field(default=1000.0, gt=0, description="Sheet width in drawing units")
    sheet_height: float = Field(default=1000.0, gt=0, description="Sheet height in drawing units")

    # Search discretization
    rotation_step: float = Field(default=1.0, gt=0, le=360, description="Rotation step in degrees")
    translation_step: float = Field(default=10.0, gt=0, description="Grid step in drawing units")

    # Behaviour
    overlap_mode: Literal["bbox", "sat"] = Field(default="bbox", description="Overlap test used by the search")
    export_order: Literal["source", "placement"] = Field(
        default="source",
        description="Entity order of the exported drawing",
    )

    # Output
    output_dir: Path = Field(default=Path("output"), description="Default directory for nested drawings")
    preview_scale: float = Field(default=1.0, gt=0, description="Pixels per drawing unit in previews")
    log_level: str = Field(default="WARNING", description="Log level for the CLI")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Override global settings (``None`` reloads from the environment)."""
    global _settings
    _settings = settings
