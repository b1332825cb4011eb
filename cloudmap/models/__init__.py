"""Core data structures for cloudmap."""

from cloudmap.models.config import CloudMapConfig, LogConfig, LookupMode, StoreConfig, SyncConfig
from cloudmap.models.resources import FetchResult, Relation, RelationKind, Resource, ResourceKey

__all__ = [
    "CloudMapConfig",
    "FetchResult",
    "LogConfig",
    "LookupMode",
    "Relation",
    "RelationKind",
    "Resource",
    "ResourceKey",
    "StoreConfig",
    "SyncConfig",
]
