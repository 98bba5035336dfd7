from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..domain.message import utc_now


@dataclass(frozen=True)
class Snapshot:
    """Materialised aggregate state at a known version.

    Attributes:
        aggregate_type: Type discriminator of the aggregate.
        aggregate_id: Identifier of the aggregate.
        aggregate_root: The stored state mapping.
        last_version: Aggregate version the state was taken at.
        created_at: When the snapshot was taken (UTC timezone).
    """

    aggregate_type: str
    aggregate_id: str
    aggregate_root: Mapping[str, Any]
    last_version: int
    created_at: datetime = field(default_factory=utc_now)


class SnapshotStore(ABC):
    """Storage for the latest snapshot of each aggregate."""

    @abstractmethod
    def get(self, aggregate_type: str, aggregate_id: str) -> Snapshot | None:
        """Load the latest snapshot of an aggregate.

        Returns:
            The snapshot if one exists, None otherwise. A missing snapshot is
            the normal case for new aggregates and is never an error.
        """
        ...

    @abstractmethod
    def save(self, *snapshots: Snapshot) -> None:
        """Save snapshots, replacing any earlier snapshot of the same aggregate."""
        ...


class InMemorySnapshotStore(SnapshotStore):
    """A snapshot store that keeps the latest snapshot per aggregate in memory.

    This is not intended for production use. It is intended for testing
    purposes and examples only.
    """

    def __init__(self) -> None:
        self.snapshots: dict[tuple[str, str], Snapshot] = {}

    def get(self, aggregate_type: str, aggregate_id: str) -> Snapshot | None:
        return self.snapshots.get((aggregate_type, aggregate_id))

    def save(self, *snapshots: Snapshot) -> None:
        for snapshot in snapshots:
            self.snapshots[(snapshot.aggregate_type, snapshot.aggregate_id)] = snapshot
