from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from ..config import KernelSettings
from .exceptions import MissingRequiredField
from .message import Message
from .metadata import MetadataEnricher, MetadataMatcher, Operator, StreamName

State = dict[str, Any]

AGGREGATE_ID = "_aggregate_id"
AGGREGATE_TYPE = "_aggregate_type"
AGGREGATE_VERSION = "_aggregate_version"
CAUSATION_ID = "_causation_id"
CAUSATION_NAME = "_causation_name"


class AggregateDefinition(ABC):
    """Describes how the kernel identifies, locates and folds one aggregate type.

    A definition is a stateless strategy object. The dispatcher constructs
    one per command name and reuses it for every dispatch, so implementations
    must not keep per-aggregate state on the instance.

    Most definitions should extend `AbstractAggregateDefinition`, which
    supplies the conventional behaviour for everything except the aggregate
    type and the fold step.
    """

    @abstractmethod
    def identifier_name(self) -> str: ...

    @abstractmethod
    def version_name(self) -> str: ...

    @abstractmethod
    def aggregate_type(self) -> str:
        """Stable type discriminator used in snapshot keys and event metadata."""
        ...

    @abstractmethod
    def extract_aggregate_id(self, message: Message) -> str: ...

    @abstractmethod
    def extract_aggregate_version(self, source: Message | Mapping[str, Any]) -> int: ...

    @abstractmethod
    def stream_name(self, aggregate_id: str) -> StreamName: ...

    @abstractmethod
    def has_one_stream_per_aggregate(self) -> bool: ...

    @abstractmethod
    def metadata_matcher(self, aggregate_id: str, from_version: int) -> MetadataMatcher | None:
        """Filter selecting this aggregate's events with a version >= from_version.

        Returning None means the stream holds nothing but this aggregate's
        events, so no filtering is required.
        """
        ...

    @abstractmethod
    def metadata_enricher(
        self,
        aggregate_id: str,
        aggregate_version: int,
        causation: Message | None = None,
    ) -> MetadataEnricher | None: ...

    @abstractmethod
    def reconstitute_state(self, state: State, events: Iterable[Message]) -> State: ...

    @abstractmethod
    def apply(self, state: State, *events: Message) -> State:
        """Fold events onto state and return the new state.

        Implementations must be pure: return a new mapping rather than
        mutating the one passed in.
        """
        ...


class AbstractAggregateDefinition(AggregateDefinition):
    """Aggregate definition with the conventional defaults filled in.

    Subclasses only need to provide `aggregate_type` and `apply`. By default
    all aggregates of the type share a single stream named after the type
    and are told apart by `_aggregate_id` metadata; override
    `has_one_stream_per_aggregate` to give each aggregate its own stream.

    Examples:
        >>> class UserDefinition(AbstractAggregateDefinition):
        ...     def aggregate_type(self) -> str:
        ...         return "user"
        ...
        ...     def has_one_stream_per_aggregate(self) -> bool:
        ...         return True
        ...
        ...     def apply(self, state, *events):
        ...         for event in events:
        ...             state = {**state, **event.payload}
        ...         return state
        >>>
        >>> definition = UserDefinition()
        >>> str(definition.stream_name("1"))
        'user-1'
    """

    def __init__(self, settings: KernelSettings | None = None):
        self.settings = settings or KernelSettings()

    def identifier_name(self) -> str:
        return "id"

    def version_name(self) -> str:
        return "version"

    def extract_aggregate_id(self, message: Message) -> str:
        return str(self._extract(self.identifier_name(), message))

    def extract_aggregate_version(self, source: Message | Mapping[str, Any]) -> int:
        return int(self._extract(self.version_name(), source))

    def has_one_stream_per_aggregate(self) -> bool:
        return False

    def stream_name(self, aggregate_id: str) -> StreamName:
        if self.has_one_stream_per_aggregate():
            separator = self.settings.stream_name_separator
            return StreamName(f"{self.aggregate_type()}{separator}{aggregate_id}")
        return StreamName(self.aggregate_type())

    def metadata_matcher(self, aggregate_id: str, from_version: int) -> MetadataMatcher | None:
        if self.has_one_stream_per_aggregate():
            return None
        return (
            MetadataMatcher()
            .with_metadata_match(AGGREGATE_ID, Operator.EQUALS, aggregate_id)
            .with_metadata_match(AGGREGATE_TYPE, Operator.EQUALS, self.aggregate_type())
            .with_metadata_match(AGGREGATE_VERSION, Operator.GREATER_THAN_EQUALS, from_version)
        )

    def metadata_enricher(
        self,
        aggregate_id: str,
        aggregate_version: int,
        causation: Message | None = None,
    ) -> MetadataEnricher | None:
        return _AggregateMetadataEnricher(self, aggregate_id, aggregate_version, causation)

    def enrich_aggregate_metadata(self, message: Message, aggregate_version: int) -> Message:
        """Stamp aggregate type and version; runs after the id has been stamped.

        Override to change or extend the metadata written on every event
        without having to re-implement id stamping.
        """
        return message.with_added_metadata(
            AGGREGATE_TYPE, self.aggregate_type()
        ).with_added_metadata(AGGREGATE_VERSION, aggregate_version)

    def reconstitute_state(self, state: State, events: Iterable[Message]) -> State:
        for event in events:
            state = self.apply(state, event)
        return state

    @staticmethod
    def _extract(field_name: str, source: Message | Mapping[str, Any]) -> Any:
        if isinstance(source, Message):
            values: Mapping[str, Any] = source.payload
            description = f'payload of message "{source.name}"'
        else:
            values = source
            description = "aggregate state"
        if field_name not in values:
            raise MissingRequiredField(field_name, description)
        return values[field_name]


class _AggregateMetadataEnricher(MetadataEnricher):
    __slots__ = ("definition", "aggregate_id", "aggregate_version", "causation")

    def __init__(
        self,
        definition: AbstractAggregateDefinition,
        aggregate_id: str,
        aggregate_version: int,
        causation: Message | None,
    ):
        self.definition = definition
        self.aggregate_id = aggregate_id
        self.aggregate_version = aggregate_version
        self.causation = causation

    def enrich(self, message: Message) -> Message:
        message = message.with_added_metadata(AGGREGATE_ID, self.aggregate_id)
        message = self.definition.enrich_aggregate_metadata(message, self.aggregate_version)
        if self.causation is not None:
            message = message.with_added_metadata(
                CAUSATION_ID, str(self.causation.id)
            ).with_added_metadata(CAUSATION_NAME, self.causation.name)
        return message
