"""
Unit tests for tagged results and the returns_result boundary.
"""

from __future__ import annotations

import pytest

from booking_engine.domain.errors import BookingError, NotFoundError
from booking_engine.domain.result import Err, Ok, returns_result


@returns_result
def lookup(key: str) -> str:
    if key == "missing":
        raise NotFoundError("Thing", key)
    if key == "boom":
        raise RuntimeError("unexpected")
    return key.upper()


@pytest.mark.unit
def test_value_is_wrapped_in_ok() -> None:
    result = lookup("abc")

    assert result == Ok("ABC")
    assert result.is_ok()
    assert result.unwrap() == "ABC"


@pytest.mark.unit
def test_booking_error_becomes_err() -> None:
    result = lookup("missing")

    assert isinstance(result, Err)
    assert not result.is_ok()
    assert result.error.message == "Thing missing not found"


@pytest.mark.unit
def test_err_unwrap_reraises() -> None:
    with pytest.raises(BookingError):
        lookup("missing").unwrap()


@pytest.mark.unit
def test_unexpected_errors_propagate() -> None:
    with pytest.raises(RuntimeError):
        lookup("boom")


@pytest.mark.unit
def test_wrapper_keeps_function_metadata() -> None:
    assert lookup.__name__ == "lookup"
