"""Synchronization coordinator.

Decides when the persisted per-service graphs can answer a question and
when they must be refreshed from the services themselves:

* targeted sync  -- refetch one service and replace its snapshot.
* full sync      -- refetch every service concurrently; any failure fails
                    the whole call, but each service that succeeded keeps
                    its freshly saved snapshot.
* lookup         -- search the snapshots offline; on a miss escalate to
                    exactly one full sync and search once more.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from cloudmap.errors import FetchError, UnknownServiceError
from cloudmap.graph.resource_graph import ResourceGraph
from cloudmap.models.config import DEFAULT_MAX_CONCURRENT_FETCHES, LookupMode
from cloudmap.models.resources import FetchResult, Resource
from cloudmap.observability.logging import get_logger
from cloudmap.store.graph_store import GraphStore
from cloudmap.sync.service import CloudService

_log = get_logger("sync.coordinator")


@dataclass(frozen=True)
class LookupResult:
    """A resource together with the graph it was found in."""

    resource: Resource
    graph: ResourceGraph
    refreshed: bool = False

    @property
    def service(self) -> str:
        return self.graph.service


def build_graph(service: str, result: FetchResult) -> ResourceGraph:
    """Assemble a fresh graph for *service* from one fetch generation."""
    graph = ResourceGraph(service=service, synced_at=datetime.now(tz=UTC))
    for resource in result.resources:
        graph.add_resource(resource)
    for relation in result.relations:
        graph.add_relation(relation.kind, relation.source, relation.target)
    return graph


class SyncCoordinator:
    """Owns the ordered set of services and the store of their snapshots.

    Registration order matters: local lookups search services in that
    order and the first match wins.
    """

    def __init__(
        self,
        services: Sequence[CloudService],
        store: GraphStore,
        max_concurrent_fetches: int = DEFAULT_MAX_CONCURRENT_FETCHES,
    ) -> None:
        if max_concurrent_fetches < 1:
            raise ValueError("max_concurrent_fetches must be at least 1")
        self._services: dict[str, CloudService] = {}
        for service in services:
            if service.name in self._services:
                raise ValueError(f"Duplicate service name: {service.name}")
            self._services[service.name] = service
        self._store = store
        self._max_concurrent_fetches = max_concurrent_fetches

    @property
    def service_names(self) -> list[str]:
        return list(self._services)

    @property
    def store(self) -> GraphStore:
        return self._store

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def targeted_sync(self, service_name: str) -> ResourceGraph:
        """Refetch *service_name*, persist and return its new graph.

        Raises UnknownServiceError, FetchError or PersistenceError.
        """
        service = self._services.get(service_name)
        if service is None:
            raise UnknownServiceError(service_name)
        return await self._sync_one(service)

    async def full_sync(self) -> dict[str, ResourceGraph]:
        """Refetch every service and return the new graphs by service name.

        Services are fetched concurrently. If any fails, FetchError is
        raised for the first failing service in registration order, with
        every failure listed in ``FetchError.failures``. When the first failure
        is a PersistenceError it is raised as is, with the later failures
        attached as exception notes. Snapshots saved by the services that
        succeeded are kept.
        """
        names = self.service_names
        _log.info("full_sync_started", services=names)
        semaphore = asyncio.Semaphore(self._max_concurrent_fetches)
        outcomes = await asyncio.gather(
            *(self._sync_one(self._services[name], semaphore) for name in names),
            return_exceptions=True,
        )

        graphs: dict[str, ResourceGraph] = {}
        errors: list[tuple[str, BaseException]] = []
        for name, outcome in zip(names, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                errors.append((name, outcome))
            else:
                graphs[name] = outcome

        if errors:
            _log.error(
                "full_sync_failed",
                failed=[name for name, _ in errors],
                succeeded=list(graphs),
                errors={name: f"{type(exc).__name__}: {exc}" for name, exc in errors},
            )
            first = errors[0][1]
            if isinstance(first, FetchError):
                failures = {name: exc.cause for name, exc in errors if isinstance(exc, FetchError)}
                raise FetchError(first.service, first.cause, failures=failures) from first.cause
            for name, exc in errors[1:]:
                first.add_note(f"service '{name}' also failed: {type(exc).__name__}: {exc}")
            raise first

        _log.info("full_sync_completed", services=names)
        return graphs

    async def _sync_one(
        self,
        service: CloudService,
        semaphore: asyncio.Semaphore | None = None,
    ) -> ResourceGraph:
        name = service.name
        _log.debug("sync_started", service=name)
        try:
            if semaphore is None:
                result = await service.fetch()
            else:
                async with semaphore:
                    result = await service.fetch()
        except Exception as exc:  # noqa: BLE001
            _log.warning("sync_failed", service=name, error=str(exc))
            raise FetchError(name, exc) from exc

        graph = build_graph(name, result)
        await asyncio.to_thread(self._store.save, name, graph)
        _log.info("sync_completed", service=name, nodes=graph.node_count, edges=graph.edge_count)
        return graph

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_resource_in_local_graphs(self, resource_id: str) -> LookupResult | None:
        """Search the persisted graphs, in service order, without any fetch.

        Raises PersistenceError when a snapshot exists but cannot be read.
        """
        for name in self._services:
            graph = self._store.load(name)
            matches = graph.find_resources(resource_id)
            if not matches:
                continue
            if len(matches) > 1:
                _log.warning(
                    "ambiguous_resource_id",
                    resource_id=resource_id,
                    service=name,
                    types=[m.type for m in matches],
                    chosen=matches[0].type,
                )
            return LookupResult(resource=matches[0], graph=graph)
        return None

    async def lookup(self, resource_id: str, mode: LookupMode = LookupMode.FRESH) -> LookupResult | None:
        """Resolve *resource_id* following the cache-miss policy.

        Returns None when the resource is unknown, which is a legitimate
        answer rather than an error. Sync failures propagate.
        """
        hit = await asyncio.to_thread(self.find_resource_in_local_graphs, resource_id)

        if hit is None:
            if mode == LookupMode.LOCAL:
                return None
            _log.info("resource_cache_miss", resource_id=resource_id)
            await self.full_sync()
            hit = await asyncio.to_thread(self.find_resource_in_local_graphs, resource_id)
            if hit is None:
                return None
            return LookupResult(resource=hit.resource, graph=hit.graph, refreshed=True)

        if mode != LookupMode.FRESH:
            return hit

        graph = await self.targeted_sync(hit.service)
        resource = graph.get(hit.resource.key)
        if resource is None:
            _log.info("resource_gone_after_resync", resource_id=resource_id, service=graph.service)
            return None
        return LookupResult(resource=resource, graph=graph, refreshed=True)
