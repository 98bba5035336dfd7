"""Loading aggregate state: snapshot lookup and event replay."""

import logging
from collections.abc import Iterator

from ..domain.definition import AGGREGATE_VERSION, AggregateDefinition, State
from ..domain.message import Message
from ..domain.metadata import MetadataMatcher, Operator, StreamName
from ..stores import SnapshotStore
from .collaborators import EventStoreFactory, event_store_from

LOGGER = logging.getLogger(__name__)


def load_state(
    snapshot_store: SnapshotStore,
    message: Message,
    definition: AggregateDefinition,
) -> State:
    """Load the latest snapshotted state of the aggregate a message targets.

    Args:
        snapshot_store: Where snapshots are kept.
        message: The command being dispatched; its payload names the aggregate.
        definition: The aggregate's definition.

    Returns:
        A copy of the snapshotted state, or an empty state when the aggregate
        has no snapshot yet.
    """
    aggregate_type = definition.aggregate_type()
    aggregate_id = definition.extract_aggregate_id(message)
    snapshot = snapshot_store.get(aggregate_type, aggregate_id)

    if snapshot is None:
        LOGGER.debug(
            "No snapshot found",
            extra={"aggregate_type": aggregate_type, "aggregate_id": aggregate_id},
        )
        return {}

    LOGGER.debug(
        "Loaded snapshot",
        extra={
            "aggregate_type": aggregate_type,
            "aggregate_id": aggregate_id,
            "version": snapshot.last_version,
        },
    )
    return dict(snapshot.aggregate_root)


def next_version(state: State, definition: AggregateDefinition) -> int:
    """First aggregate version not yet folded into `state`."""
    if not state:
        return 1
    return definition.extract_aggregate_version(state) + 1


def load_events(
    stream_name: StreamName,
    metadata_matcher: MetadataMatcher | None,
    event_store_factory: EventStoreFactory,
    from_number: int = 1,
) -> Iterator[Message]:
    """Read a stream forward, treating a missing stream as an empty one.

    Returns:
        The store's lazy iterator over the selected events, or an empty
        iterator when the stream does not exist.

    Raises:
        BadCollaboratorFactory: If the factory does not return an EventStore.
    """
    event_store = event_store_from(event_store_factory)

    if not event_store.has_stream(stream_name):
        LOGGER.debug("Stream not found, nothing to replay", extra={"stream": str(stream_name)})
        return iter(())

    return event_store.load(stream_name, from_number, None, metadata_matcher)


def replay_from_start(
    state: State,
    aggregate_id: str,
    definition: AggregateDefinition,
    event_store_factory: EventStoreFactory,
) -> State:
    """Fold the aggregate's whole history onto `state`.

    Used when there is no snapshot, so every event of the aggregate is read
    from the first stream position.
    """
    events = load_events(
        definition.stream_name(aggregate_id),
        definition.metadata_matcher(aggregate_id, 1),
        event_store_factory,
    )
    return definition.reconstitute_state(state, events)


def replay_after_snapshot(
    state: State,
    aggregate_id: str,
    definition: AggregateDefinition,
    event_store_factory: EventStoreFactory,
) -> State:
    """Fold only the events recorded after the snapshotted version onto `state`.

    The stream is always read from its start and filtered on aggregate
    version. Without a definition matcher the stream belongs to this
    aggregate alone, so filtering on `_aggregate_version` is enough. Stream
    positions cannot stand in for versions: every event raised by one
    command carries the same version.
    """
    version = next_version(state, definition)
    metadata_matcher = definition.metadata_matcher(aggregate_id, version)
    if metadata_matcher is None:
        metadata_matcher = MetadataMatcher().with_metadata_match(
            AGGREGATE_VERSION, Operator.GREATER_THAN_EQUALS, version
        )

    events = load_events(
        definition.stream_name(aggregate_id),
        metadata_matcher,
        event_store_factory,
    )
    return definition.reconstitute_state(state, events)


def reconstitute(
    state: State,
    message: Message,
    definition: AggregateDefinition,
    event_store_factory: EventStoreFactory,
) -> State:
    aggregate_id = definition.extract_aggregate_id(message)
    if not state:
        return replay_from_start(state, aggregate_id, definition, event_store_factory)
    return replay_after_snapshot(state, aggregate_id, definition, event_store_factory)
