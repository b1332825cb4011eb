"""Resource and relation data structures for the relationship graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

ResourceKey = tuple[str, str]


class RelationKind(StrEnum):
    """Types of directed relationships between cloud resources.

    Siblinghood is derived from shared parents and is never stored.
    """

    PARENT_OF = "parent_of"
    CHILD_OF = "child_of"
    APPLIED_ON = "applied_on"
    DEPENDS_ON = "depends_on"


@dataclass(frozen=True)
class Resource:
    """A cloud resource as reported by its provider.

    Identity is ``(type, id)``; ``properties`` carries provider attributes
    (strings, numbers, lists) and is replaced wholesale on resync.
    """

    type: str
    id: str
    properties: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def key(self) -> ResourceKey:
        """Return the unique key for this resource."""
        return (self.type, self.id)

    def __str__(self) -> str:
        return f"{self.type}[{self.id}]"


@dataclass(frozen=True)
class Relation:
    """A typed, directed edge between two resource keys.

    Either endpoint may name a resource owned by another service's graph.
    """

    kind: RelationKind
    source: ResourceKey
    target: ResourceKey


@dataclass
class FetchResult:
    """Everything one service reported during a single enumeration."""

    resources: list[Resource] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)
