"""In-memory relationship graph of one service's cloud resources.

Nodes are keyed by ``(type, id)``. Containment is stored once, canonically
as ``parent_of``; a ``child_of`` relation is normalised to the inverse
``parent_of`` edge, so the two directions can never disagree.

The graph has no node or edge deletion: a resync builds a new graph and
the store replaces the old snapshot wholesale.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from typing import Any

from cloudmap.models.resources import Relation, RelationKind, Resource, ResourceKey

SNAPSHOT_FORMAT_VERSION = 1


def _as_key(endpoint: Resource | ResourceKey) -> ResourceKey:
    if isinstance(endpoint, Resource):
        return endpoint.key
    resource_type, resource_id = endpoint
    return (str(resource_type), str(resource_id))


def _canonical(kind: RelationKind, source: ResourceKey, target: ResourceKey) -> Relation:
    if kind == RelationKind.CHILD_OF:
        return Relation(kind=RelationKind.PARENT_OF, source=target, target=source)
    return Relation(kind=kind, source=source, target=target)


class ResourceGraph:
    """Directed, typed relationship graph owned by a single service."""

    def __init__(self, service: str, synced_at: datetime | None = None) -> None:
        self.service = service
        self.synced_at = synced_at
        self._nodes: dict[ResourceKey, Resource] = {}
        self._relations: list[Relation] = []
        self._relation_set: set[Relation] = set()
        # kind -> node key -> adjacent keys, in edge insertion order
        self._outgoing: dict[RelationKind, dict[ResourceKey, list[ResourceKey]]] = {}
        self._incoming: dict[RelationKind, dict[ResourceKey, list[ResourceKey]]] = {}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_resource(self, resource: Resource) -> None:
        """Insert *resource*, or replace the properties of an existing node.

        A replaced node keeps its position in scan order.
        """
        self._nodes[resource.key] = resource

    def add_relation(
        self,
        kind: RelationKind | str,
        source: Resource | ResourceKey,
        target: Resource | ResourceKey,
    ) -> Relation:
        """Insert a directed edge and return its canonical form.

        Adding an edge that already exists (in either containment
        direction) is a no-op.
        """
        relation = _canonical(RelationKind(kind), _as_key(source), _as_key(target))
        if relation in self._relation_set:
            return relation
        self._relation_set.add(relation)
        self._relations.append(relation)
        self._outgoing.setdefault(relation.kind, {}).setdefault(relation.source, []).append(relation.target)
        self._incoming.setdefault(relation.kind, {}).setdefault(relation.target, []).append(relation.source)
        return relation

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, key: ResourceKey) -> Resource | None:
        return self._nodes.get(key)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Resource):
            return item.key in self._nodes
        return item in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def find_resource(self, resource_id: str) -> Resource | None:
        """Return the first node whose id matches, regardless of type.

        Nodes are scanned in insertion order; when several types share the
        id, the earliest inserted one wins.
        """
        for resource in self._nodes.values():
            if resource.id == resource_id:
                return resource
        return None

    def find_resources(self, resource_id: str) -> list[Resource]:
        """Return every node whose id matches, in insertion order."""
        return [r for r in self._nodes.values() if r.id == resource_id]

    def resources(self) -> list[Resource]:
        return list(self._nodes.values())

    def relations(self) -> list[Relation]:
        return list(self._relations)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._relations)

    # ------------------------------------------------------------------
    # Adjacency (keys only; endpoints may be absent from this graph)
    # ------------------------------------------------------------------

    def outgoing(self, kind: RelationKind, key: ResourceKey) -> list[ResourceKey]:
        """Targets of *kind* edges leaving *key*, in insertion order."""
        return list(self._outgoing.get(kind, {}).get(key, ()))

    def incoming(self, kind: RelationKind, key: ResourceKey) -> list[ResourceKey]:
        """Sources of *kind* edges arriving at *key*, in insertion order."""
        return list(self._incoming.get(kind, {}).get(key, ()))

    def parents_of(self, key: ResourceKey) -> list[ResourceKey]:
        return self.incoming(RelationKind.PARENT_OF, key)

    def children_of(self, key: ResourceKey) -> list[ResourceKey]:
        return self.outgoing(RelationKind.PARENT_OF, key)

    def resolve(self, keys: list[ResourceKey]) -> Iterator[Resource]:
        """Yield the nodes behind *keys*, silently skipping dangling ones."""
        for key in keys:
            resource = self._nodes.get(key)
            if resource is not None:
                yield resource

    # ------------------------------------------------------------------
    # Snapshot serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible snapshot of nodes and edges."""
        return {
            "format_version": SNAPSHOT_FORMAT_VERSION,
            "service": self.service,
            "synced_at": self.synced_at.isoformat() if self.synced_at else None,
            "resources": [
                {"type": r.type, "id": r.id, "properties": dict(r.properties)} for r in self._nodes.values()
            ],
            "relations": [
                {"kind": rel.kind.value, "source": list(rel.source), "target": list(rel.target)}
                for rel in self._relations
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceGraph:
        """Rebuild a graph from :meth:`to_dict` output.

        Raises ValueError for an unsupported format version or malformed
        entries.
        """
        version = data.get("format_version")
        if version != SNAPSHOT_FORMAT_VERSION:
            raise ValueError(f"Unsupported snapshot format version: {version!r}")

        synced_at_raw = data.get("synced_at")
        graph = cls(
            service=str(data["service"]),
            synced_at=datetime.fromisoformat(synced_at_raw) if synced_at_raw else None,
        )
        try:
            for entry in data.get("resources", []):
                graph.add_resource(
                    Resource(type=str(entry["type"]), id=str(entry["id"]), properties=dict(entry.get("properties", {})))
                )
            for entry in data.get("relations", []):
                graph.add_relation(entry["kind"], tuple(entry["source"]), tuple(entry["target"]))
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed snapshot entry: {exc}") from exc
        return graph

    def __repr__(self) -> str:
        return f"ResourceGraph(service={self.service!r}, nodes={self.node_count}, edges={self.edge_count})"
