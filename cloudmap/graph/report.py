"""Relationship report assembled for a single resource."""

from __future__ import annotations

from dataclasses import dataclass, field

from cloudmap.graph.resource_graph import ResourceGraph
from cloudmap.graph.traversal import (
    iter_children,
    iter_parents,
    iter_siblings,
    list_resources_applied_on,
    list_resources_depending_on,
)
from cloudmap.models.resources import Resource


@dataclass
class RelationshipReport:
    """Everything known about how *resource* relates to its graph.

    ``parents`` and ``children`` keep walk order and hop distance so they
    can be rendered as indented trees.
    """

    resource: Resource
    service: str
    parents: list[tuple[Resource, int]] = field(default_factory=list)
    children: list[tuple[Resource, int]] = field(default_factory=list)
    siblings: list[Resource] = field(default_factory=list)
    applied_on: list[Resource] = field(default_factory=list)
    depending_on: list[Resource] = field(default_factory=list)


def build_report(graph: ResourceGraph, resource: Resource) -> RelationshipReport:
    return RelationshipReport(
        resource=resource,
        service=graph.service,
        parents=list(iter_parents(graph, resource)),
        children=list(iter_children(graph, resource)),
        siblings=[sibling for sibling, _ in iter_siblings(graph, resource)],
        applied_on=list_resources_applied_on(graph, resource),
        depending_on=list_resources_depending_on(graph, resource),
    )
