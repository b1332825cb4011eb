"""Snapshot storage for cloudmap.

Submodules:
    graph_store -- Per-service JSON snapshots with atomic replace.
"""

from cloudmap.store.graph_store import GraphStore

__all__ = ["GraphStore"]
