"""Service fetch capability.

CloudService     -- ABC every provider integration must implement.
JsonFileService  -- Reads a provider export file instead of calling an API.
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from cloudmap.models.resources import FetchResult, Relation, RelationKind, Resource, ResourceKey


class CloudService(ABC):
    """A named source of resources and relations for one cloud service.

    ``fetch`` is responsible for its own timeouts: it must either return or
    raise within a bounded time. Any exception it raises is treated as a
    fetch failure for this service.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name, unique within one coordinator (e.g. ``"ec2"``)."""

    @abstractmethod
    async def fetch(self) -> FetchResult:
        """Enumerate every resource and relation this service reports."""


def _parse_endpoint(raw: Any) -> ResourceKey:
    if isinstance(raw, dict):
        return (str(raw["type"]), str(raw["id"]))
    resource_type, resource_id = raw
    return (str(resource_type), str(resource_id))


def parse_fetch_result(data: dict[str, Any]) -> FetchResult:
    """Build a FetchResult from an export document.

    Endpoints may be written as ``["type", "id"]`` or
    ``{"type": ..., "id": ...}``.
    """
    resources = [
        Resource(type=str(item["type"]), id=str(item["id"]), properties=dict(item.get("properties", {})))
        for item in data.get("resources", [])
    ]
    relations = [
        Relation(
            kind=RelationKind(item["kind"]),
            source=_parse_endpoint(item["source"]),
            target=_parse_endpoint(item["target"]),
        )
        for item in data.get("relations", [])
    ]
    return FetchResult(resources=resources, relations=relations)


class JsonFileService(CloudService):
    """Serves a service's resources from ``<source_dir>/<name>.json``.

    Useful for inventories exported by another tool and for offline demos;
    the file is re-read on every fetch.
    """

    def __init__(self, name: str, source_dir: Path) -> None:
        if not name:
            raise ValueError("Service name must not be empty")
        self._name = name
        self._path = Path(source_dir) / f"{name}.json"

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    async def fetch(self) -> FetchResult:
        return await asyncio.to_thread(self._read)

    def _read(self) -> FetchResult:
        with self._path.open("r", encoding="utf-8") as fh:
            return parse_fetch_result(json.load(fh))
