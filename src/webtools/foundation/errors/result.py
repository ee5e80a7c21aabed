"""Result/Either type for per-item success or failure.

A discriminated union for success/failure, with the accessors the batch
layer needs and error-accumulating collection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterator

T = TypeVar("T")
E = TypeVar("E")

# Sentinel for faster Ok/Err construction
_OK = True
_ERR = False


class Result(Generic[T, E]):
    """Discriminated union representing success (Ok) or failure (Err).

    Examples:
        >>> Ok(42).unwrap()
        42
        >>> Err("fail").unwrap_err()
        'fail'
    """

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | E, is_ok: bool) -> None:
        self._value = value
        self._is_ok = is_ok

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    def unwrap(self) -> T:
        """Extract Ok value. Raises RuntimeError on Err."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"unwrap() on Err: {self._value}")

    def unwrap_err(self) -> E:
        """Extract Err value. Raises RuntimeError on Ok."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"unwrap_err() on Ok: {self._value}")

    def ok(self) -> T | None:
        return self._value if self._is_ok else None  # type: ignore[return-value]

    def err(self) -> E | None:
        return self._value if not self._is_ok else None  # type: ignore[return-value]

    __bool__ = lambda self: self._is_ok  # noqa: E731
    __repr__ = lambda self: f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"  # noqa: E731
    __str__ = __repr__

    def __hash__(self) -> int:
        return hash((self._is_ok, self._value))

    def __eq__(self, other: object) -> bool:
        return self._is_ok == other._is_ok and self._value == other._value if isinstance(other, Result) else NotImplemented

    def __iter__(self) -> Iterator[T]:
        """Iterate: yields value if Ok, nothing if Err."""
        if self._is_ok:
            yield self._value  # type: ignore[misc]


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    """Construct Ok variant (success)."""
    return Result(value, _OK)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    """Construct Err variant (failure)."""
    return Result(error, _ERR)


def collect_results(results: list[Result[T, E]]) -> Result[list[T], list[E]]:
    """Collect all Results, accumulating ALL errors (not fail-fast)."""
    values: list[T] = []
    errors: list[E] = []
    for r in results:
        (values if r._is_ok else errors).append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK) if not errors else Result(errors, _ERR)
