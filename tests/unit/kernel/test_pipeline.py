"""Tests for the short-circuiting pipeline composer."""

import logging
from unittest.mock import Mock

import pytest

from foldkit.domain import Err, Ok
from foldkit.kernel import pipeline


def test_stages_run_in_order():
    assert pipeline(str.lower, str.capitalize)("aBC") == Ok("Abc")


def test_single_stage():
    assert pipeline(lambda value: value + 1)(1) == Ok(2)


def test_stage_output_feeds_next_stage():
    calls = []

    def first(value):
        calls.append(("first", value))
        return value * 2

    def second(value):
        calls.append(("second", value))
        return value + 1

    assert pipeline(first, second)(3) == Ok(7)
    assert calls == [("first", 3), ("second", 6)]


def test_exception_short_circuits_and_becomes_err():
    error = ValueError("Exception there!")
    later = Mock()

    def fail(_):
        raise error

    result = pipeline(fail, later)("aBC")

    assert result == Err(error)
    later.assert_not_called()


def test_returned_err_short_circuits():
    error = RuntimeError("stop")
    later = Mock()

    result = pipeline(lambda _: Err(error), later)(1)

    assert result.is_err()
    assert result.error is error
    later.assert_not_called()


def test_returned_ok_is_unwrapped_for_next_stage():
    assert pipeline(lambda value: Ok(value + 1), lambda value: value * 10)(1) == Ok(20)


def test_composed_function_never_raises():
    def fail(_):
        raise KeyError("missing")

    assert pipeline(fail)(None).is_err()


def test_value_defaults_to_none():
    assert pipeline(lambda value: value is None)() == Ok(True)


def test_pipeline_needs_a_stage():
    with pytest.raises(TypeError):
        pipeline()


def test_failing_stage_is_logged_at_debug(caplog):
    def explode(_):
        raise ValueError("boom")

    with caplog.at_level(logging.DEBUG, logger="foldkit.kernel.pipeline"):
        pipeline(explode)(1)

    record = caplog.records[-1]
    assert record.message == "Pipeline stage failed"
    assert record.stage == "explode"
    assert record.error_type == "ValueError"
