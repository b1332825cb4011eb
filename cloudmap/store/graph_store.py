"""Durable per-service graph snapshots.

Each service owns one JSON file ``<directory>/<service>.json``. Saves write
a sibling temp file, fsync it and ``os.replace`` it over the snapshot, so
a concurrent ``load`` sees either the previous snapshot or the new one,
never a partial write.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
import threading
from pathlib import Path

from cloudmap.errors import PersistenceError
from cloudmap.graph.resource_graph import ResourceGraph
from cloudmap.observability.logging import get_logger

_log = get_logger("store.graph_store")

_SERVICE_NAME_RE = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")
_SUFFIX = ".json"


def is_valid_service_name(service: str) -> bool:
    """Return True if *service* can name a snapshot file."""
    return _SERVICE_NAME_RE.match(service) is not None


def _validate_service_name(service: str) -> str:
    if not is_valid_service_name(service):
        raise ValueError(f"Invalid service name for snapshot storage: {service!r}")
    return service


class GraphStore:
    """File-backed store holding the last synced graph of every service.

    Writers of the same service are serialised by a per-service lock;
    different services never contend.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def directory(self) -> Path:
        return self._directory

    def snapshot_path(self, service: str) -> Path:
        return self._directory / f"{_validate_service_name(service)}{_SUFFIX}"

    def exists(self, service: str) -> bool:
        return self.snapshot_path(service).is_file()

    def _lock_for(self, service: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(service, threading.Lock())

    def load(self, service: str) -> ResourceGraph:
        """Return the persisted graph for *service*.

        A service that was never synced yields an empty graph. An
        unreadable or corrupt snapshot raises PersistenceError.
        """
        path = self.snapshot_path(service)
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            _log.debug("snapshot_missing", service=service, path=str(path))
            return ResourceGraph(service=service)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(service, path, exc) from exc

        try:
            graph = ResourceGraph.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise PersistenceError(service, path, exc) from exc
        if graph.service != service:
            raise PersistenceError(service, path, f"snapshot belongs to service '{graph.service}'")
        return graph

    def save(self, service: str, graph: ResourceGraph) -> Path:
        """Atomically replace the snapshot of *service* with *graph*."""
        if graph.service != service:
            raise ValueError(f"Graph of service '{graph.service}' cannot be saved as '{service}'")
        path = self.snapshot_path(service)
        payload = graph.to_dict()

        with self._lock_for(service):
            tmp_name: str | None = None
            try:
                self._directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=f".{service}.", suffix=".tmp", dir=self._directory)
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, ensure_ascii=False, separators=(",", ":"))
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
                tmp_name = None
            except (OSError, TypeError, ValueError) as exc:
                raise PersistenceError(service, path, exc) from exc
            finally:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)

        _log.info(
            "snapshot_saved",
            service=service,
            path=str(path),
            nodes=graph.node_count,
            edges=graph.edge_count,
        )
        return path
