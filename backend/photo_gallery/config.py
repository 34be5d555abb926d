"""
Photo Gallery — Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and freezes the result.
Who:   Built once by the application factory and handed to every service.
When:  Loaded at process start; never mutated afterwards.

Design Decision:
    Settings are an explicit, immutable object passed into create_app() and
    from there into PathGuard, GalleryService and UploadService constructors.
    There is no module-level settings instance: tests build their own
    Settings(photo_dir=tmp_path) and get a fully isolated application.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# 50 MiB, the documented default upload limit
DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for a single-user NAS deployment.
    Attributes are grouped by concern for readability.
    """

    # ── Storage ───────────────────────────────────────────────────────────
    # What: Root directory under which every folder and photo lives
    # Why relative default: Works in both Docker (mounted volume) and local runs
    photo_dir: str = Field(default="./uploads", description="Photo root directory")

    # Folder used when an upload does not name one
    default_folder: str = Field(default="temp")

    # ── Upload Limits ─────────────────────────────────────────────────────
    max_file_size: int = Field(default=DEFAULT_MAX_FILE_SIZE, ge=1)
    max_files: int = Field(default=10, ge=1, le=100)

    # What: Comma-separated upload extensions (parsed by property below)
    # Listing uses its own fixed set; this only governs what may be uploaded.
    allowed_extensions: str = Field(default="jpg,jpeg,png,gif,bmp,webp")

    @property
    def allowed_extensions_list(self) -> List[str]:
        """Lowercased extensions without leading dots, empty entries dropped."""
        extensions = []
        for ext in self.allowed_extensions.split(","):
            ext = ext.strip().lower().lstrip(".")
            if ext and ext not in extensions:
                extensions.append(ext)
        return extensions

    # ── Pagination ────────────────────────────────────────────────────────
    default_page_size: int = Field(default=12, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: "*" or comma-separated origins
    cors_origin: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    environment: str = Field(default="production")

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("default_folder")
    @classmethod
    def validate_default_folder(cls, v: str) -> str:
        v = v.strip()
        if not v or "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"Invalid default_folder '{v}'. Must be a single folder name.")
        return v

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "frozen": True,  # Read once at startup, immutable afterwards
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """
    Load settings from the environment exactly once per process.

    Used by the module-level application in main.py; tests bypass it and pass
    their own Settings instance to create_app().
    """
    return Settings()
