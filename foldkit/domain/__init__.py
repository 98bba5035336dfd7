"""Domain primitives for the dispatch kernel.

This module contains the building blocks applications work with:

- Message, Command, DomainEvent: immutable message envelopes
- AggregateResult: state and raised events returned by command handlers
- Ok, Err: the discriminated result returned by a dispatcher
- AggregateDefinition, AbstractAggregateDefinition: per-aggregate strategies
- StreamName, MetadataMatcher, MetadataEnricher: stream location and metadata
- KernelError and its subclasses, StoreError and its subclasses
"""

from .definition import (
    AGGREGATE_ID,
    AGGREGATE_TYPE,
    AGGREGATE_VERSION,
    CAUSATION_ID,
    CAUSATION_NAME,
    AbstractAggregateDefinition,
    AggregateDefinition,
    State,
)
from .exceptions import (
    BadCollaboratorFactory,
    ConcurrencyError,
    InvalidHandlerResult,
    KernelError,
    MissingRequiredField,
    StoreError,
    StreamExistsAlready,
    StreamNotFound,
    UnknownCommand,
    UnsupportedOperation,
)
from .message import Command, DomainEvent, Message, MessageType, MetadataValue, utc_now
from .metadata import (
    AddMetadata,
    FieldType,
    MetadataCondition,
    MetadataEnricher,
    MetadataEnricherChain,
    MetadataMatcher,
    Operator,
    StreamName,
)
from .result import AggregateResult, Err, Ok, Result

__all__ = [
    # Messages
    "Message",
    "Command",
    "DomainEvent",
    "MessageType",
    "MetadataValue",
    "utc_now",
    # Results
    "AggregateResult",
    "Ok",
    "Err",
    "Result",
    # Definitions
    "AggregateDefinition",
    "AbstractAggregateDefinition",
    "State",
    "AGGREGATE_ID",
    "AGGREGATE_TYPE",
    "AGGREGATE_VERSION",
    "CAUSATION_ID",
    "CAUSATION_NAME",
    # Streams and metadata
    "StreamName",
    "MetadataMatcher",
    "MetadataCondition",
    "Operator",
    "FieldType",
    "MetadataEnricher",
    "MetadataEnricherChain",
    "AddMetadata",
    # Errors
    "KernelError",
    "UnknownCommand",
    "MissingRequiredField",
    "InvalidHandlerResult",
    "BadCollaboratorFactory",
    "UnsupportedOperation",
    "StoreError",
    "ConcurrencyError",
    "StreamExistsAlready",
    "StreamNotFound",
]
