"""Factories for the store collaborators and the checks applied to what they return."""

from collections.abc import Callable

from ..domain.exceptions import BadCollaboratorFactory
from ..stores import EventStore, SnapshotStore

EventStoreFactory = Callable[[], EventStore]
SnapshotStoreFactory = Callable[[], SnapshotStore]


def event_store_from(factory: EventStoreFactory) -> EventStore:
    event_store = factory()
    if not isinstance(event_store, EventStore):
        raise BadCollaboratorFactory("Event store factory", EventStore, event_store)
    return event_store


def snapshot_store_from(factory: SnapshotStoreFactory) -> SnapshotStore:
    snapshot_store = factory()
    if not isinstance(snapshot_store, SnapshotStore):
        raise BadCollaboratorFactory("Snapshot store factory", SnapshotStore, snapshot_store)
    return snapshot_store
