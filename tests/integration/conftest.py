"""Shared fixtures for cloudmap integration tests.

Provides fake services with canned inventories and a coordinator wired to
a temporary snapshot store, so the sync policy can be exercised without
any cloud provider.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cloudmap.models.resources import FetchResult, Relation, RelationKind, Resource
from cloudmap.store.graph_store import GraphStore
from cloudmap.sync.coordinator import SyncCoordinator
from cloudmap.sync.service import CloudService

# ---------------------------------------------------------------------------
# Fake services
# ---------------------------------------------------------------------------


class FakeService(CloudService):
    """Service returning a settable FetchResult and counting its fetches."""

    def __init__(self, name: str, result: FetchResult | None = None, error: Exception | None = None) -> None:
        self._name = name
        self.result = result or FetchResult()
        self.error = error
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def fetch(self) -> FetchResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


# ---------------------------------------------------------------------------
# Inventories
# ---------------------------------------------------------------------------


def ec2_inventory() -> FetchResult:
    """vpc-1 -> subnet-1 -> i-1, vpc-1 -> subnet-2 -> i-2."""
    vpc = Resource("vpc", "vpc-1", {"cidr": "10.0.0.0/16"})
    s1 = Resource("subnet", "subnet-1", {"cidr": "10.0.1.0/24"})
    s2 = Resource("subnet", "subnet-2", {"cidr": "10.0.2.0/24"})
    i1 = Resource("instance", "i-1", {"state": "running"})
    i2 = Resource("instance", "i-2", {"state": "stopped"})
    return FetchResult(
        resources=[vpc, s1, s2, i1, i2],
        relations=[
            Relation(RelationKind.PARENT_OF, vpc.key, s1.key),
            Relation(RelationKind.PARENT_OF, vpc.key, s2.key),
            Relation(RelationKind.CHILD_OF, i1.key, s1.key),
            Relation(RelationKind.CHILD_OF, i2.key, s2.key),
        ],
    )


def iam_inventory() -> FetchResult:
    """A policy applied on a group and on an ec2 instance owned elsewhere."""
    policy = Resource("policy", "p-admin", {"arn": "arn:aws:iam::1:policy/admin"})
    group = Resource("group", "g-ops")
    user = Resource("user", "alice")
    return FetchResult(
        resources=[policy, group, user],
        relations=[
            Relation(RelationKind.APPLIED_ON, policy.key, group.key),
            Relation(RelationKind.APPLIED_ON, policy.key, ("instance", "i-1")),
            Relation(RelationKind.PARENT_OF, group.key, user.key),
            Relation(RelationKind.DEPENDS_ON, user.key, policy.key),
        ],
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def store(tmp_path: Path) -> GraphStore:
    return GraphStore(tmp_path / "graphs")


@pytest.fixture()
def ec2() -> FakeService:
    return FakeService("ec2", ec2_inventory())


@pytest.fixture()
def iam() -> FakeService:
    return FakeService("iam", iam_inventory())


@pytest.fixture()
def coordinator(ec2: FakeService, iam: FakeService, store: GraphStore) -> SyncCoordinator:
    return SyncCoordinator([ec2, iam], store)
