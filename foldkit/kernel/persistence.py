import logging

from ..domain.definition import AggregateDefinition
from ..domain.message import Message
from ..domain.result import AggregateResult
from ..stores import Stream
from .collaborators import EventStoreFactory, event_store_from

LOGGER = logging.getLogger(__name__)


def persist_events(
    aggregate_result: AggregateResult,
    event_store_factory: EventStoreFactory,
    definition: AggregateDefinition,
    aggregate_id: str,
    causation: Message | None = None,
) -> AggregateResult:
    """Enrich the events a handler raised and write them to the aggregate's stream.

    Every raised event is stamped by the definition's metadata enricher for
    the aggregate version found in the new state, in the order the handler
    raised them. The events are appended when the aggregate's stream exists
    and otherwise become the initial contents of a newly created stream.

    Args:
        aggregate_result: The handler's result.
        event_store_factory: Zero-argument factory returning the event store.
        definition: The aggregate's definition.
        aggregate_id: Identifier of the aggregate the command targeted.
        causation: Optional message to record as the cause of the events.

    Returns:
        A new AggregateResult with the same state and the enriched events,
        that is the events exactly as they were written.

    Raises:
        MissingRequiredField: If the new state carries no version.
        BadCollaboratorFactory: If the factory does not return an EventStore.
        StoreError: Whatever the store raises when it rejects the write, for
            example ConcurrencyError.
    """
    aggregate_version = definition.extract_aggregate_version(aggregate_result.state)
    if causation is None:
        enricher = definition.metadata_enricher(aggregate_id, aggregate_version)
    else:
        enricher = definition.metadata_enricher(aggregate_id, aggregate_version, causation)

    events = list(aggregate_result.raised_events)
    if enricher is not None:
        events = [enricher.enrich(event) for event in events]

    stream_name = definition.stream_name(aggregate_id)
    event_store = event_store_from(event_store_factory)

    if event_store.has_stream(stream_name):
        event_store.append_to(stream_name, events)
        action = "Appended events"
    else:
        event_store.create(Stream.of(stream_name, events))
        action = "Created stream"

    LOGGER.debug(
        action,
        extra={
            "stream": str(stream_name),
            "aggregate_id": aggregate_id,
            "aggregate_version": aggregate_version,
            "event_count": len(events),
        },
    )
    return aggregate_result.with_events(*events)
