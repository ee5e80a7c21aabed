"""Tests for the Result type used by batch items.

Validates:
- Accessors and equality
- Error accumulation
"""

from __future__ import annotations

import pytest

from webtools.foundation.errors import Err, Ok, Result, collect_results


# ═════════════════════════════════════════════════════════════════════════════
# Accessors
# ═════════════════════════════════════════════════════════════════════════════


def test_ok_accessors() -> None:
    result: Result[str, str] = Ok("page")
    assert result.is_ok() and not result.is_err()
    assert result.unwrap() == "page"
    assert result.ok() == "page"
    assert result.err() is None
    assert list(result) == ["page"]
    assert result


def test_err_accessors() -> None:
    result: Result[str, str] = Err("timeout")
    assert result.is_err()
    assert result.unwrap_err() == "timeout"
    assert result.ok() is None
    assert list(result) == []
    assert not result
    with pytest.raises(RuntimeError, match="unwrap"):
        result.unwrap()


def test_unwrap_err_on_ok_raises() -> None:
    with pytest.raises(RuntimeError, match="unwrap_err"):
        Ok(1).unwrap_err()


def test_ok_and_err_are_distinct() -> None:
    assert Ok("same") != Err("same")
    assert Ok(1) == Ok(1)
    assert repr(Err("x")) == "Err('x')"


# ═════════════════════════════════════════════════════════════════════════════
# Accumulation
# ═════════════════════════════════════════════════════════════════════════════


def test_collect_all_ok() -> None:
    assert collect_results([Ok(1), Ok(2)]) == Ok([1, 2])


def test_collect_accumulates_every_error() -> None:
    assert collect_results([Ok(1), Err("a"), Ok(3), Err("b")]) == Err(["a", "b"])


def test_collect_empty() -> None:
    assert collect_results([]) == Ok([])
