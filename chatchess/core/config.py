"""
Process configuration, read from the environment (a .env file is picked up if present).
"""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from chatchess.core.exceptions import ConfigError

MEGABYTE = 1024 * 1024
DEFAULT_CACHE_SIZE_MB = 100
DEFAULT_RENDER_SCALE = 3
MAX_RENDER_SCALE = 8

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    database_url: str = "sqlite:///chatchess.db"
    image_cache_bytes: int = DEFAULT_CACHE_SIZE_MB * MEGABYTE
    render_scale: int = DEFAULT_RENDER_SCALE
    flip_for_black: bool = True
    log_level: str = "INFO"

    @field_validator("image_cache_bytes")
    @classmethod
    def validate_cache_size(cls, value: int) -> int:
        if value < 0:
            raise ValueError("image cache size cannot be negative")
        return value

    @field_validator("render_scale")
    @classmethod
    def validate_render_scale(cls, value: int) -> int:
        if not 1 <= value <= MAX_RENDER_SCALE:
            raise ValueError(f"render scale must be between 1 and {MAX_RENDER_SCALE}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level


def _env_flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    """Build Settings from environment variables. Unset variables keep their defaults."""
    load_dotenv()

    raw: dict[str, object] = {}
    if url := os.getenv("CHATCHESS_DATABASE_URL"):
        raw["database_url"] = url

    try:
        if size_mb := os.getenv("IMAGE_CACHE_SIZE_MB"):
            raw["image_cache_bytes"] = int(size_mb) * MEGABYTE
        if scale := os.getenv("RENDER_SCALE"):
            raw["render_scale"] = int(scale)
    except ValueError as exc:
        raise ConfigError(f"Invalid numeric setting: {exc}") from exc

    if flip := os.getenv("FLIP_FOR_BLACK"):
        raw["flip_for_black"] = _env_flag(flip)
    if level := os.getenv("LOG_LEVEL"):
        raw["log_level"] = level

    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
