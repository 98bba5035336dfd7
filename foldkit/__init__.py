"""foldkit - a command dispatch kernel for event-sourced aggregates.

This module provides the public API: build a dispatcher from a command map
and store factories, then dispatch command messages to it.
"""

from .config import KernelSettings
from .domain import (
    AbstractAggregateDefinition,
    AggregateDefinition,
    AggregateResult,
    Command,
    DomainEvent,
    Err,
    Message,
    Ok,
    StreamName,
)
from .kernel import CommandDispatcher, CommandMap, DefinitionCache, build_command_dispatcher, pipeline

__all__ = [
    # Dispatch
    "build_command_dispatcher",
    "CommandDispatcher",
    "CommandMap",
    "DefinitionCache",
    "pipeline",
    # Domain primitives
    "Message",
    "Command",
    "DomainEvent",
    "AggregateResult",
    "AggregateDefinition",
    "AbstractAggregateDefinition",
    "StreamName",
    "Ok",
    "Err",
    # Configuration
    "KernelSettings",
]
