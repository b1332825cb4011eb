"""Relationship walks over an assembled ResourceGraph.

Walks are generators of ``(resource, distance)`` pairs so callers can
render hierarchies lazily; the ``visit_*`` wrappers drive a generator into
a callback for callers that prefer the visitor style.

Every walk is read-only, excludes the root, and skips edges whose far end
is not a node of the graph (partial knowledge is expected when only some
services have been synced).
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from cloudmap.graph.resource_graph import ResourceGraph
from cloudmap.models.resources import RelationKind, Resource, ResourceKey

Visitor = Callable[[Resource, int], None]

# Siblings sit on the root's own level of the hierarchy.
SIBLING_DISTANCE = 0


def _walk(
    graph: ResourceGraph,
    key: ResourceKey,
    step: Callable[[ResourceKey], list[ResourceKey]],
    distance: int,
    path: set[ResourceKey],
) -> Iterator[tuple[Resource, int]]:
    """Depth-first, pre-order walk following *step* away from *key*.

    A node reachable along several paths is yielded once per path; a node
    already on the current path is not descended into again.
    """
    for node in graph.resolve(step(key)):
        if node.key in path:
            continue
        yield node, distance
        path.add(node.key)
        yield from _walk(graph, node.key, step, distance + 1, path)
        path.discard(node.key)


def iter_parents(graph: ResourceGraph, root: Resource) -> Iterator[tuple[Resource, int]]:
    """Yield every ancestor of *root* with its hop count (1 = immediate parent)."""
    return _walk(graph, root.key, graph.parents_of, 1, {root.key})


def iter_children(graph: ResourceGraph, root: Resource) -> Iterator[tuple[Resource, int]]:
    """Yield every descendant of *root* with its hop count (1 = immediate child)."""
    return _walk(graph, root.key, graph.children_of, 1, {root.key})


def iter_siblings(graph: ResourceGraph, root: Resource) -> Iterator[tuple[Resource, int]]:
    """Yield resources sharing at least one immediate parent with *root*.

    Siblings come out parent by parent, each child in edge order, and each
    sibling only once even when it shares several parents with *root*.
    """
    seen: set[ResourceKey] = {root.key}
    for parent_key in graph.parents_of(root.key):
        if parent_key not in graph:
            continue
        for sibling in graph.resolve(graph.children_of(parent_key)):
            if sibling.key in seen:
                continue
            seen.add(sibling.key)
            yield sibling, SIBLING_DISTANCE


def visit_parents(graph: ResourceGraph, root: Resource, visit: Visitor) -> None:
    for resource, distance in iter_parents(graph, root):
        visit(resource, distance)


def visit_children(graph: ResourceGraph, root: Resource, visit: Visitor) -> None:
    for resource, distance in iter_children(graph, root):
        visit(resource, distance)


def visit_siblings(graph: ResourceGraph, root: Resource, visit: Visitor) -> None:
    for resource, distance in iter_siblings(graph, root):
        visit(resource, distance)


def list_resources_applied_on(graph: ResourceGraph, root: Resource) -> list[Resource]:
    """Return the resources *root* is applied on, in edge insertion order."""
    return [r for r in graph.resolve(graph.outgoing(RelationKind.APPLIED_ON, root.key)) if r.key != root.key]


def list_resources_depending_on(graph: ResourceGraph, root: Resource) -> list[Resource]:
    """Return the resources that depend on *root*, in edge insertion order."""
    return [r for r in graph.resolve(graph.incoming(RelationKind.DEPENDS_ON, root.key)) if r.key != root.key]
