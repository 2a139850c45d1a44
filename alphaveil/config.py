"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass

DEFAULT_MAX_UPLOAD_BYTES = 8 * 1024 * 1024  # 8MB


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    log_level: str = "WARNING"
    default_format: str = "png"


def get_settings() -> Settings:
    return Settings(
        max_upload_bytes=_int_env("ALPHAVEIL_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
        log_level=(os.getenv("ALPHAVEIL_LOG_LEVEL") or "WARNING").strip().upper(),
        default_format=(os.getenv("ALPHAVEIL_DEFAULT_FORMAT") or "png").strip().lower(),
    )
