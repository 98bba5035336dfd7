"""Kernel configuration using pydantic-settings."""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings


class KernelSettings(BaseSettings):
    """Settings shared by the command dispatcher and aggregate definitions.

    All settings can be configured via environment variables with the
    FOLDKIT_ prefix. For example:
    - FOLDKIT_LOG_LEVEL=DEBUG
    - FOLDKIT_STREAM_NAME_SEPARATOR=:
    - FOLDKIT_ENRICH_WITH_CAUSATION=true

    Attributes:
        log_level: Level at which received commands and persisted events are
            logged. Failures are always logged at WARNING.
        stream_name_separator: Separator between aggregate type and aggregate
            id in per-aggregate stream names ("user-1").
        enrich_with_causation: When enabled, the dispatched command is handed
            to the metadata enricher as the causation of the raised events.

    Example:
        >>> settings = KernelSettings(log_level="debug")
        >>> settings.log_level
        'DEBUG'
        >>> settings.level
        10
    """

    log_level: str = "INFO"
    stream_name_separator: str = "-"
    enrich_with_causation: bool = False

    model_config = {"env_prefix": "FOLDKIT_"}

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("stream_name_separator")
    @classmethod
    def _non_empty_separator(cls, value: str) -> str:
        if not value:
            raise ValueError("Stream name separator must not be empty")
        return value

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level)
