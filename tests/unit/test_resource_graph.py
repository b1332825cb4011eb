"""Tests for ResourceGraph: node identity, edge invariants, snapshots."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from cloudmap.graph.resource_graph import ResourceGraph
from cloudmap.models.resources import Relation, RelationKind, Resource

# ---------------------------------------------------------------------------
# Helper factories
# ---------------------------------------------------------------------------


def _res(resource_type: str, resource_id: str, **properties: object) -> Resource:
    return Resource(type=resource_type, id=resource_id, properties=dict(properties))


_ident = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-", min_size=1, max_size=12)
_prop_value = st.one_of(
    st.text(max_size=10),
    st.integers(min_value=-1000, max_value=1000),
    st.lists(st.text(max_size=5), max_size=3),
)
_resources = st.lists(
    st.builds(
        Resource,
        type=st.sampled_from(["instance", "subnet", "vpc", "policy", "group"]),
        id=_ident,
        properties=st.dictionaries(_ident, _prop_value, max_size=3),
    ),
    max_size=15,
    unique_by=lambda r: r.id,
)


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class TestAddResource:
    def test_new_resource_is_findable(self) -> None:
        graph = ResourceGraph(service="ec2")
        inst = _res("instance", "i-1", state="running")
        graph.add_resource(inst)
        assert graph.find_resource("i-1") == inst
        assert inst in graph
        assert len(graph) == 1

    def test_replace_overwrites_properties_and_keeps_identity(self) -> None:
        """Re-adding the same (type, id) replaces properties, never duplicates."""
        graph = ResourceGraph(service="ec2")
        graph.add_resource(_res("instance", "i-1", state="running"))
        graph.add_resource(_res("subnet", "s-1"))
        graph.add_resource(_res("instance", "i-1", state="stopped"))

        assert graph.node_count == 2
        assert graph.get(("instance", "i-1")).properties == {"state": "stopped"}
        # scan order unchanged by the replacement
        assert [r.id for r in graph.resources()] == ["i-1", "s-1"]

    def test_same_id_different_type_are_distinct_nodes(self) -> None:
        graph = ResourceGraph(service="iam")
        graph.add_resource(_res("user", "alice"))
        graph.add_resource(_res("role", "alice"))
        assert graph.node_count == 2

    def test_find_resource_missing_returns_none(self) -> None:
        graph = ResourceGraph(service="ec2")
        assert graph.find_resource("i-404") is None

    def test_ambiguous_id_returns_first_inserted(self) -> None:
        """Lookup by id ignores type; the earliest inserted node wins."""
        graph = ResourceGraph(service="iam")
        graph.add_resource(_res("user", "alice"))
        graph.add_resource(_res("role", "alice"))
        assert graph.find_resource("alice").type == "user"
        assert [r.type for r in graph.find_resources("alice")] == ["user", "role"]

    @given(resources=_resources)
    @settings(max_examples=50)
    def test_every_added_resource_is_found_by_id(self, resources: list[Resource]) -> None:
        graph = ResourceGraph(service="ec2")
        for resource in resources:
            graph.add_resource(resource)
        for resource in resources:
            assert graph.find_resource(resource.id) == resource


# ---------------------------------------------------------------------------
# Edges
# ---------------------------------------------------------------------------


class TestAddRelation:
    def test_add_relation_is_idempotent(self) -> None:
        graph = ResourceGraph(service="ec2")
        vpc, subnet = _res("vpc", "vpc-1"), _res("subnet", "s-1")
        graph.add_relation(RelationKind.PARENT_OF, vpc, subnet)
        graph.add_relation(RelationKind.PARENT_OF, vpc, subnet)
        assert graph.edge_count == 1
        assert graph.children_of(vpc.key) == [subnet.key]

    def test_child_of_is_stored_as_inverse_parent_of(self) -> None:
        """child_of(a, b) and parent_of(b, a) are the same edge."""
        graph = ResourceGraph(service="ec2")
        vpc, subnet = _res("vpc", "vpc-1"), _res("subnet", "s-1")
        relation = graph.add_relation(RelationKind.CHILD_OF, subnet, vpc)
        graph.add_relation(RelationKind.PARENT_OF, vpc, subnet)

        assert relation == Relation(RelationKind.PARENT_OF, vpc.key, subnet.key)
        assert graph.edge_count == 1
        assert graph.parents_of(subnet.key) == [vpc.key]
        assert graph.children_of(vpc.key) == [subnet.key]

    def test_relation_accepts_keys_and_string_kinds(self) -> None:
        graph = ResourceGraph(service="iam")
        graph.add_relation("applied_on", ("policy", "p-1"), ("group", "g-1"))
        assert graph.outgoing(RelationKind.APPLIED_ON, ("policy", "p-1")) == [("group", "g-1")]
        assert graph.incoming(RelationKind.APPLIED_ON, ("group", "g-1")) == [("policy", "p-1")]

    def test_unknown_kind_rejected(self) -> None:
        graph = ResourceGraph(service="iam")
        with pytest.raises(ValueError):
            graph.add_relation("sibling", ("user", "a"), ("user", "b"))

    def test_edges_to_foreign_nodes_are_kept(self) -> None:
        """Cross-service edges reference nodes this graph does not hold."""
        graph = ResourceGraph(service="iam")
        policy = _res("policy", "p-1")
        graph.add_resource(policy)
        graph.add_relation(RelationKind.APPLIED_ON, policy, ("instance", "i-foreign"))
        assert graph.edge_count == 1
        assert ("instance", "i-foreign") not in graph
        assert list(graph.resolve(graph.outgoing(RelationKind.APPLIED_ON, policy.key))) == []


# ---------------------------------------------------------------------------
# Snapshot round trip
# ---------------------------------------------------------------------------


class TestSnapshotDict:
    def _sample(self) -> ResourceGraph:
        graph = ResourceGraph(service="ec2", synced_at=datetime(2026, 10, 1, 12, 0, tzinfo=UTC))
        vpc = _res("vpc", "vpc-1", cidr="10.0.0.0/16")
        s1 = _res("subnet", "s-1", zones=["a", "b"])
        s2 = _res("subnet", "s-2", size=24)
        for r in (vpc, s1, s2):
            graph.add_resource(r)
        graph.add_relation(RelationKind.PARENT_OF, vpc, s2)
        graph.add_relation(RelationKind.PARENT_OF, vpc, s1)
        graph.add_relation(RelationKind.DEPENDS_ON, s1, ("vpc", "vpc-gone"))
        return graph

    def test_round_trip_preserves_nodes_edges_and_order(self) -> None:
        original = self._sample()
        restored = ResourceGraph.from_dict(original.to_dict())

        assert restored.service == "ec2"
        assert restored.synced_at == original.synced_at
        assert restored.resources() == original.resources()
        assert restored.relations() == original.relations()
        assert restored.children_of(("vpc", "vpc-1")) == [("subnet", "s-2"), ("subnet", "s-1")]

    def test_unsupported_version_rejected(self) -> None:
        data = self._sample().to_dict()
        data["format_version"] = 99
        with pytest.raises(ValueError, match="format version"):
            ResourceGraph.from_dict(data)

    def test_malformed_entry_rejected(self) -> None:
        data = self._sample().to_dict()
        data["resources"].append({"type": "vpc"})
        with pytest.raises(ValueError, match="Malformed"):
            ResourceGraph.from_dict(data)
