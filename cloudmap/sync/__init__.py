"""Sync package: service fetch capability and the coordinator."""

from cloudmap.sync.coordinator import LookupResult, SyncCoordinator, build_graph
from cloudmap.sync.service import CloudService, JsonFileService, parse_fetch_result

__all__ = [
    "CloudService",
    "JsonFileService",
    "LookupResult",
    "SyncCoordinator",
    "build_graph",
    "parse_fetch_result",
]
