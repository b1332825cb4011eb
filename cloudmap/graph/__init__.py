"""Resource relationship graph for cross-resource traversal.

Provides the per-service in-memory graph (containment, applied-on and
depends-on edges) and the walks used to answer parent, child, sibling
and dependency questions about a resource.
"""

from cloudmap.graph.report import RelationshipReport, build_report
from cloudmap.graph.resource_graph import ResourceGraph
from cloudmap.graph.traversal import (
    iter_children,
    iter_parents,
    iter_siblings,
    list_resources_applied_on,
    list_resources_depending_on,
    visit_children,
    visit_parents,
    visit_siblings,
)

__all__ = [
    "RelationshipReport",
    "ResourceGraph",
    "build_report",
    "iter_children",
    "iter_parents",
    "iter_siblings",
    "list_resources_applied_on",
    "list_resources_depending_on",
    "visit_children",
    "visit_parents",
    "visit_siblings",
]
