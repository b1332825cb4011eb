"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from cloudmap.models.config import (
    DEFAULT_MAX_CONCURRENT_FETCHES,
    CloudMapConfig,
    LogConfig,
    LookupMode,
    StoreConfig,
    SyncConfig,
)
from cloudmap.observability.logging import LOG_FORMATS
from cloudmap.store.graph_store import is_valid_service_name


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"CLOUDMAP_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_list(key: str) -> list[str]:
    return [item.strip() for item in _env(key).split(",") if item.strip()]


def _env_path(key: str) -> Path | None:
    val = _env(key)
    return Path(val).expanduser() if val else None


def _validate_lookup_mode(value: str) -> LookupMode:
    try:
        return LookupMode(value.lower())
    except ValueError:
        valid = {m.value for m in LookupMode}
        raise ValueError(f"Invalid lookup mode: {value}. Must be one of {valid}") from None


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ValueError(f"Invalid log format: {value}. Must be one of {set(LOG_FORMATS)}")
    return value.lower()


def _validate_services(names: list[str]) -> list[str]:
    seen: set[str] = set()
    for name in names:
        if not is_valid_service_name(name):
            raise ValueError(f"Invalid service name: {name!r}. Use letters, digits, '.', '_' or '-'")
        if name in seen:
            raise ValueError(f"Duplicate service name: {name}")
        seen.add(name)
    return names


def load_config() -> CloudMapConfig:
    """Load configuration from CLOUDMAP_* environment variables."""
    store_dir = _env_path("STORE_DIR")
    return CloudMapConfig(
        store=StoreConfig(directory=store_dir) if store_dir else StoreConfig(),
        sync=SyncConfig(
            services=_validate_services(_env_list("SERVICES")),
            source_dir=_env_path("SOURCE_DIR"),
            max_concurrent_fetches=_env_int(
                "MAX_CONCURRENT_FETCHES", DEFAULT_MAX_CONCURRENT_FETCHES, min_val=1, max_val=32
            ),
            lookup_mode=_validate_lookup_mode(_env("LOOKUP_MODE", "fresh")),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "warning")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
