"""Unit tests for chatchess/core/config.py"""

import logging

import pytest

from chatchess.core.config import MEGABYTE, Settings, configure_logging, load_settings
from chatchess.core.exceptions import ConfigError

ENV_VARS = [
    "CHATCHESS_DATABASE_URL",
    "IMAGE_CACHE_SIZE_MB",
    "RENDER_SCALE",
    "FLIP_FOR_BLACK",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_settings()
    assert settings == Settings()
    assert settings.image_cache_bytes == 100 * MEGABYTE
    assert settings.render_scale == 3
    assert settings.flip_for_black
    assert settings.log_level == "INFO"


def test_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHATCHESS_DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("IMAGE_CACHE_SIZE_MB", "5")
    monkeypatch.setenv("RENDER_SCALE", "2")
    monkeypatch.setenv("FLIP_FOR_BLACK", "no")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()
    assert settings.database_url == "sqlite:///:memory:"
    assert settings.image_cache_bytes == 5 * MEGABYTE
    assert settings.render_scale == 2
    assert not settings.flip_for_black
    assert settings.log_level == "DEBUG"


def test_zero_cache_size_is_allowed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IMAGE_CACHE_SIZE_MB", "0")
    assert load_settings().image_cache_bytes == 0


@pytest.mark.parametrize(
    "name, value",
    [
        ("IMAGE_CACHE_SIZE_MB", "lots"),
        ("IMAGE_CACHE_SIZE_MB", "-1"),
        ("RENDER_SCALE", "0"),
        ("RENDER_SCALE", "9"),
        ("RENDER_SCALE", "2.5"),
        ("LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_settings(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigError):
        load_settings()


def test_configure_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging(Settings(log_level="WARNING"))
    assert calls[0]["level"] == "WARNING"
