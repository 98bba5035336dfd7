"""Store contracts consumed by the kernel, with in-memory implementations.

- EventStore: named append-only event streams
- SnapshotStore: latest materialised state per aggregate
"""

from .events import EventStore, InMemoryEventStore, Stream
from .snapshots import InMemorySnapshotStore, Snapshot, SnapshotStore

__all__ = [
    "EventStore",
    "InMemoryEventStore",
    "Stream",
    "SnapshotStore",
    "InMemorySnapshotStore",
    "Snapshot",
]
