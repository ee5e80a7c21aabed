"""Normalization of per-item outcomes into an ordered batch result.

Call sites signal failure two ways: by raising (a rejected outcome) or by
returning a payload with an ``error`` field. Both become an ``Err`` holding
an ``ItemFailure``; everything else is passed through untouched as ``Ok``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, Iterator, TypeVar

from webtools.foundation.errors import Err, Ok, Result, collect_results, status_code_of

if TYPE_CHECKING:
    from collections.abc import Sequence

    from webtools.runtime.concurrency import Settled

U = TypeVar("U")
T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ItemFailure:
    """Failure record for one batch item.

    Attributes:
        input: The unit of work that failed (e.g. the URL)
        error_message: Human-readable message
        error_type: Exception class name, when the failure was raised
        status_code: HTTP status carried by the error, if any
    """

    input: object
    error_message: str
    error_type: str | None = None
    status_code: int | None = None

    @classmethod
    def from_exception(cls, input: object, exc: BaseException) -> ItemFailure:  # noqa: A002
        return cls(input, str(exc) or type(exc).__name__, type(exc).__name__, status_code_of(exc))

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"input": self.input, "error": self.error_message}
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


@dataclass(frozen=True, slots=True)
class BatchItem(Generic[U, T]):
    """Single item result from batch execution."""
    index: int
    input: U
    result: Result[T, ItemFailure]
    elapsed_ms: float = 0.0

    @property
    def is_ok(self) -> bool: return self.result.is_ok()

    @property
    def is_err(self) -> bool: return self.result.is_err()

    @property
    def value(self) -> T | None: return self.result.ok()

    @property
    def error(self) -> ItemFailure | None: return self.result.err()


@dataclass(slots=True)
class BatchResult(Generic[U, T]):
    """Aggregated results from batch execution, one item per input, in input order."""
    items: list[BatchItem[U, T]]
    total_ms: float = 0.0
    concurrency: int = 0

    @property
    def successes(self) -> list[BatchItem[U, T]]: return [i for i in self.items if i.is_ok]

    @property
    def failures(self) -> list[BatchItem[U, T]]: return [i for i in self.items if i.is_err]

    @property
    def success_rate(self) -> float: return len(self.successes) / len(self.items) if self.items else 0.0

    @property
    def all_ok(self) -> bool: return all(i.is_ok for i in self.items)

    @property
    def all_err(self) -> bool: return all(i.is_err for i in self.items)

    def values(self) -> list[T]: return [i.result.unwrap() for i in self.items if i.is_ok]

    def errors(self) -> list[ItemFailure]: return [i.result.unwrap_err() for i in self.items if i.is_err]

    def results(self) -> list[Result[T, ItemFailure]]: return [i.result for i in self.items]

    def collect(self) -> Result[list[T], list[ItemFailure]]:
        """Ok(all values) if every item succeeded, else Err(every failure)."""
        return collect_results(self.results())

    def __len__(self) -> int: return len(self.items)

    def __iter__(self) -> Iterator[BatchItem[U, T]]: return iter(self.items)

    def __getitem__(self, index: int) -> BatchItem[U, T]: return self.items[index]


def embedded_error(value: object) -> str | None:
    """Default detector for errors carried inside a returned payload.

    Recognizes a non-empty string under a mapping's ``"error"`` key or in a
    plain ``error`` attribute. Methods and other non-string values are not
    errors, so objects such as loggers pass through untouched.
    """
    err = value.get("error") if isinstance(value, Mapping) else getattr(value, "error", None)
    return err if isinstance(err, str) and err else None


def aggregate(
    inputs: Sequence[U],
    outcomes: Sequence[Settled[T]],
    *,
    elapsed_ms: Sequence[float] | None = None,
    error_of: Callable[[T], str | None] | None = embedded_error,
) -> list[BatchItem[U, T]]:
    """Turn settled outcomes into ordered batch items.

    Args:
        inputs: The batch inputs, in submission order
        outcomes: One settled outcome per input, same order
        elapsed_ms: Optional per-item durations
        error_of: Extracts an embedded error message from a fulfilled value;
            None disables embedded-error detection

    Returns:
        One BatchItem per input; never raises for item failures
    """
    if len(inputs) != len(outcomes):
        raise ValueError(f"Got {len(outcomes)} outcomes for {len(inputs)} inputs")

    items: list[BatchItem[U, T]] = []
    for idx, (inp, outcome) in enumerate(zip(inputs, outcomes)):
        ms = elapsed_ms[idx] if elapsed_ms is not None else 0.0
        if outcome.is_rejected:
            result: Result[T, ItemFailure] = Err(ItemFailure.from_exception(inp, outcome.error))  # type: ignore[arg-type]
        elif error_of is not None and (msg := error_of(outcome.value)) is not None:  # type: ignore[arg-type]
            result = Err(ItemFailure(inp, msg))
        else:
            result = Ok(outcome.value)
        items.append(BatchItem(idx, inp, result, ms))
    return items
