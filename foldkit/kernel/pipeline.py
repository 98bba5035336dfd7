import logging
from collections.abc import Callable
from functools import reduce
from typing import Any

from ..domain.result import Err, Ok, Result

LOGGER = logging.getLogger(__name__)

Stage = Callable[[Any], Any]


def pipeline(*stages: Stage) -> Callable[[Any], Result[Any, Exception]]:
    """Compose one-argument stages into a single function returning a result.

    The composed function threads its argument through the stages in order,
    each stage receiving the previous stage's output. A stage may return a
    plain value, an `Ok` or an `Err`, or raise. The first `Err` returned or
    exception raised ends composition: later stages are not called and the
    composed function returns `Err(error)` instead of raising.

    Args:
        *stages: The stages to run, in order. At least one is required.

    Returns:
        A function of one argument returning `Ok(final_value)` or
        `Err(first_error)`.

    Raises:
        TypeError: If no stages are given.

    Examples:
        >>> pipeline(str.lower, str.capitalize)("aBC")
        Ok('Abc')
        >>> def fail(_):
        ...     raise ValueError("Exception there!")
        >>> pipeline(fail, str.capitalize)("aBC")
        Err(ValueError('Exception there!'))
    """
    if not stages:
        raise TypeError("pipeline() requires at least one stage")

    def run(value: Any = None) -> Result[Any, Exception]:
        return reduce(
            lambda result, stage: result.flat_map(_guarded(stage)),
            stages,
            Ok(value),
        )

    return run


def _guarded(stage: Stage) -> Callable[[Any], Result[Any, Exception]]:
    def call(value: Any) -> Result[Any, Exception]:
        try:
            outcome = stage(value)
        except Exception as error:
            LOGGER.debug(
                "Pipeline stage failed",
                extra={
                    "stage": getattr(stage, "__name__", repr(stage)),
                    "error_type": type(error).__name__,
                },
            )
            return Err(error)
        if isinstance(outcome, (Ok, Err)):
            return outcome
        return Ok(outcome)

    return call
