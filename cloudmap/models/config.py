"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

DEFAULT_MAX_CONCURRENT_FETCHES = 8


class LookupMode(StrEnum):
    """How much network access a lookup-by-id may use.

    LOCAL  -- answer purely from persisted snapshots, never sync.
    CACHED -- sync all services once on a miss, trust cached hits.
    FRESH  -- like CACHED, and resync the owning service of a hit.
    """

    LOCAL = "local"
    CACHED = "cached"
    FRESH = "fresh"


@dataclass
class StoreConfig:
    """Snapshot storage configuration."""

    directory: Path = field(default_factory=lambda: Path.home() / ".cloudmap" / "graphs")


@dataclass
class SyncConfig:
    """Synchronization coordinator configuration."""

    services: list[str] = field(default_factory=list)
    source_dir: Path | None = None
    max_concurrent_fetches: int = DEFAULT_MAX_CONCURRENT_FETCHES
    lookup_mode: LookupMode = LookupMode.FRESH


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "warning"
    format: str = "json"


@dataclass
class CloudMapConfig:
    """Top-level cloudmap configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    log: LogConfig = field(default_factory=LogConfig)
