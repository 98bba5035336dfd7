import logging
from typing import Any

from ..domain.definition import AggregateDefinition, State
from ..domain.exceptions import UnsupportedOperation
from ..domain.message import Message, utc_now
from ..stores import Snapshot, SnapshotStore
from .read_model import ReadModel

LOGGER = logging.getLogger(__name__)


class SnapshotReadModel(ReadModel):
    """Read model that keeps aggregate snapshots up to date.

    Fed with the events of one aggregate type, it folds each event onto
    the latest known state of its aggregate using the aggregate's
    definition, and on `persist` writes one snapshot per touched aggregate.
    Running it as a projection over the event streams keeps the snapshot
    store close to the head of each stream, so dispatching only has to
    replay the few events recorded since the last persist.

    States are buffered in memory between `persist` calls. The first event
    of an aggregate in a batch starts from the aggregate's stored snapshot,
    or from empty state when there is none.

    Examples:
        >>> read_model = SnapshotReadModel(snapshot_store, UserDefinition())
        >>> read_model.stack("apply", user_registered, user_name_changed)
        >>> read_model.persist()
        >>> snapshot_store.get("user", "1").last_version
        2
    """

    def __init__(self, snapshot_store: SnapshotStore, definition: AggregateDefinition):
        self.snapshot_store = snapshot_store
        self.definition = definition
        self._cache: dict[str, State] = {}

    def stack(self, operation: str, *events: Any) -> None:
        """Fold events onto the cached state of their aggregates.

        Args:
            operation: Name of the read-model operation. Every operation is
                handled as folding the given events.
            *events: The events to fold, in order.

        Raises:
            TypeError: If an argument is not a Message.
        """
        for event in events:
            if not isinstance(event, Message):
                raise TypeError(
                    f"{type(self).__name__} can only handle events of type {Message.__name__}"
                )

            aggregate_id = self.definition.extract_aggregate_id(event)
            if aggregate_id in self._cache:
                state = self._cache[aggregate_id]
            else:
                state = self._stored_state(aggregate_id)

            self._cache[aggregate_id] = self.definition.apply(state, event)

    def persist(self) -> None:
        snapshots = [
            Snapshot(
                aggregate_type=self.definition.aggregate_type(),
                aggregate_id=aggregate_id,
                aggregate_root=state,
                last_version=self.definition.extract_aggregate_version(state),
                created_at=utc_now(),
            )
            for aggregate_id, state in self._cache.items()
        ]

        self.snapshot_store.save(*snapshots)
        LOGGER.debug(
            "Persisted snapshots",
            extra={
                "aggregate_type": self.definition.aggregate_type(),
                "snapshot_count": len(snapshots),
            },
        )
        self._cache = {}

    def init(self) -> None:
        raise UnsupportedOperation(type(self).__name__, "init")

    def is_initialized(self) -> bool:
        return True

    def reset(self) -> None:
        raise UnsupportedOperation(type(self).__name__, "reset")

    def delete(self) -> None:
        raise UnsupportedOperation(type(self).__name__, "delete")

    def _stored_state(self, aggregate_id: str) -> State:
        snapshot = self.snapshot_store.get(self.definition.aggregate_type(), aggregate_id)
        if snapshot is None:
            return {}
        return dict(snapshot.aggregate_root)
