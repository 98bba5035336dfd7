"""Stream names and the metadata filters and enrichers applied to events."""

import operator
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .message import Message, MetadataValue


@dataclass(frozen=True)
class StreamName:
    """Name of an event stream.

    Examples:
        >>> StreamName("user-1")
        StreamName(value='user-1')
        >>> str(StreamName("user"))
        'user'
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Stream name must not be empty")

    def __str__(self) -> str:
        return self.value


class Operator(str, Enum):
    EQUALS = "="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_THAN_EQUALS = ">="
    LOWER_THAN = "<"
    LOWER_THAN_EQUALS = "<="
    IN = "in"
    NOT_IN = "nin"
    REGEX = "regex"


class FieldType(str, Enum):
    METADATA = "metadata"
    MESSAGE_PROPERTY = "message_property"


_COMPARISONS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQUALS: operator.eq,
    Operator.NOT_EQUALS: operator.ne,
    Operator.GREATER_THAN: operator.gt,
    Operator.GREATER_THAN_EQUALS: operator.ge,
    Operator.LOWER_THAN: operator.lt,
    Operator.LOWER_THAN_EQUALS: operator.le,
    Operator.IN: lambda actual, expected: actual in expected,
    Operator.NOT_IN: lambda actual, expected: actual not in expected,
    Operator.REGEX: lambda actual, expected: re.search(expected, str(actual)) is not None,
}

_MESSAGE_PROPERTIES = frozenset({"id", "name", "message_type", "created_at"})


@dataclass(frozen=True)
class MetadataCondition:
    field: str
    operator: Operator
    value: Any
    field_type: FieldType = FieldType.METADATA

    def __post_init__(self) -> None:
        if self.operator in (Operator.IN, Operator.NOT_IN) and not isinstance(
            self.value, (list, tuple, set, frozenset)
        ):
            raise ValueError(f"Operator {self.operator.name} requires a collection value")
        if self.field_type is FieldType.MESSAGE_PROPERTY and self.field not in _MESSAGE_PROPERTIES:
            raise ValueError(f'Unknown message property "{self.field}"')

    def matches(self, message: Message) -> bool:
        if self.field_type is FieldType.METADATA:
            if self.field not in message.metadata:
                return False
            actual = message.metadata[self.field]
        else:
            actual = getattr(message, self.field)
        try:
            return _COMPARISONS[self.operator](actual, self.value)
        except TypeError:
            # Values of incomparable types never match
            return False


@dataclass(frozen=True)
class MetadataMatcher:
    """Immutable conjunction of conditions on event metadata.

    Each call to `with_metadata_match` returns a new matcher with one more
    condition. A message matches when every condition holds; a condition on
    a metadata key the message does not carry never holds.

    Examples:
        >>> matcher = (
        ...     MetadataMatcher()
        ...     .with_metadata_match("_aggregate_id", Operator.EQUALS, "1")
        ...     .with_metadata_match("_aggregate_version", Operator.GREATER_THAN_EQUALS, 2)
        ... )
        >>> matcher.matches(event.with_added_metadata("_aggregate_id", "1"))
        False
    """

    conditions: tuple[MetadataCondition, ...] = field(default_factory=tuple)

    def with_metadata_match(
        self,
        field: str,
        operator: Operator,
        value: Any,
        field_type: FieldType = FieldType.METADATA,
    ) -> "MetadataMatcher":
        condition = MetadataCondition(field, operator, value, field_type)
        return MetadataMatcher(self.conditions + (condition,))

    def matches(self, message: Message) -> bool:
        return all(condition.matches(message) for condition in self.conditions)

    def data(self) -> list[dict[str, Any]]:
        """Describe the conditions as plain dictionaries, in insertion order."""
        return [
            {
                "field": condition.field,
                "operator": condition.operator,
                "value": condition.value,
                "field_type": condition.field_type,
            }
            for condition in self.conditions
        ]


class MetadataEnricher(ABC):
    """Transforms a message by adding metadata to it."""

    @abstractmethod
    def enrich(self, message: Message) -> Message: ...

    def __call__(self, message: Message) -> Message:
        return self.enrich(message)


class AddMetadata(MetadataEnricher):
    __slots__ = ("key", "value")

    def __init__(self, key: str, value: MetadataValue):
        self.key = key
        self.value = value

    def enrich(self, message: Message) -> Message:
        return message.with_added_metadata(self.key, self.value)


class MetadataEnricherChain(MetadataEnricher):
    """Applies several enrichers in order, each to the previous one's output."""

    __slots__ = ("enrichers",)

    def __init__(self, *enrichers: MetadataEnricher):
        self.enrichers = enrichers

    def enrich(self, message: Message) -> Message:
        for enricher in self.enrichers:
            message = enricher.enrich(message)
        return message
