"""Structured logging with context propagation.

Provides context-aware structured logging for tool execution:
- Tool context binding (name, category)
- Human-readable console output, JSON Lines for log aggregation
- Scoped context that follows async calls

All renderers write to stderr by default: stdout carries the MCP stdio
channel and must only contain protocol frames.

Quick Start:
    >>> from webtools.runtime.observability import get_logger, configure_logging
    >>> configure_logging(format="console")  # or "json"
    >>> log = get_logger("webtools.server")
    >>> log.info("tool invoked", tool="web_search")
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

import orjson

if TYPE_CHECKING:
    from types import TracebackType

JsonDict = dict[str, Any]

# Context var for bound context (persists across async calls)
_log_context: ContextVar[JsonDict] = ContextVar("log_context", default={})


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class BoundLogger:
    """Structured logger with bound context. bind() returns a new logger with merged context.

    Example:
        >>> log = BoundLogger(context={"service": "webtools"})
        >>> log.info("request received", tool="web_page")
        # => 10:30:45.120 [info] request received service="webtools" tool="web_page"
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int | None = None

    def bind(self, **kw: object) -> BoundLogger:
        """Create new logger with additional bound context."""
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def bind_tool(self, name: str, category: str, **kw: object) -> BoundLogger:
        """Bind tool execution context."""
        return self.bind(tool=name, category=category, **kw)

    def _log(self, level: int, event: str, **kw: object) -> None:
        threshold = self._level if self._level is not None else _default_level
        if level < threshold:
            return
        merged = {**_log_context.get(), **self.context, **kw}
        (self._renderer or _get_renderer()).render(LogEntry(time.time(), _level_name(level), event, merged))

    def debug(self, event: str, **kw: object) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: object) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: object) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: object) -> None: self._log(logging.ERROR, event, **kw)

    def exception(self, event: str, **kw: object) -> None:
        """Log error with exception info."""
        import traceback
        self._log(logging.ERROR, event, exc_info=traceback.format_exc(), **kw)


@dataclass(slots=True)
class LogEntry:
    """Log entry with all context."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """Human-readable timestamp (HH:MM:SS.mmm)."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    """Protocol for log output renderers."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """Human-readable colored console output. Format: timestamp [level] event key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = auto-detect

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = getattr(self.output, "isatty", lambda: False)()

    def render(self, entry: LogEntry) -> None:
        c = _COLORS if self.colors else _NO_COLORS
        parts = [f"{c['dim']}{entry.ts_human}{c['reset']}",
                 f"{_LEVEL_COLORS.get(entry.level, c['dim']) if self.colors else ''}[{entry.level}]{c['reset']}",
                 f"{c['bold']}{entry.event}{c['reset']}"]
        parts += [f"{c['cyan']}{k}{c['reset']}={_format_value(v, c)}"
                  for k, v in sorted(entry.context.items()) if k != "exc_info"]
        print(" ".join(parts), file=self.output)
        if "exc_info" in entry.context:
            print(f"{c['red']}{entry.context['exc_info']}{c['reset']}", file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stderr)

    def render(self, entry: LogEntry) -> None:
        line = orjson.dumps(
            {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context},
            option=orjson.OPT_NON_STR_KEYS,
            default=str,
        )
        print(line.decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer for testing."""

    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class CaptureRenderer:
    """Collects entries in memory, for assertions in tests."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level is None or e.level == level]


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


_renderer: LogRenderer | None = None
_default_level: int = logging.INFO


def configure_logging(
    format: str = "console",  # noqa: A002 - shadows builtin but matches stdlib
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
    renderer: LogRenderer | None = None,
) -> LogRenderer:
    """Configure process-wide structured logging. Format: "console", "json", "none"."""
    global _renderer, _default_level
    _default_level = getattr(logging, level.upper(), logging.INFO)
    if renderer is None:
        match format:
            case "console": renderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
            case "json": renderer = JsonRenderer(output=output or sys.stderr)
            case "none": renderer = NoOpRenderer()
            case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _renderer = renderer
    return renderer


def get_logger(name: str | None = None, **initial_context: object) -> BoundLogger:
    """Get a structured logger with optional initial context. Name is added to context as 'logger'."""
    ctx = {**initial_context, **({"logger": name} if name else {})}
    return BoundLogger(context=ctx)


def _get_renderer() -> LogRenderer:
    """Get configured renderer or create default."""
    global _renderer
    if _renderer is None:
        _renderer = ConsoleRenderer()
    return _renderer


class log_context:
    """Context manager for scoped logging context. Adds key-value pairs to all log entries within the scope."""

    __slots__ = ("_ctx", "_token")

    def __init__(self, **kw: object) -> None:
        self._ctx: JsonDict = dict(kw)
        self._token: object | None = None

    def __enter__(self) -> log_context:
        self._token = _log_context.set({**_log_context.get(), **self._ctx})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _log_context.reset(self._token)  # type: ignore[arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


_COLORS = {"reset": "\033[0m", "bold": "\033[1m", "dim": "\033[2m", "red": "\033[31m",
           "green": "\033[32m", "yellow": "\033[33m", "blue": "\033[34m", "cyan": "\033[36m", "white": "\033[37m"}
_NO_COLORS = {k: "" for k in _COLORS}
_LEVEL_COLORS = {"debug": _COLORS["dim"], "info": _COLORS["green"], "warning": _COLORS["yellow"], "error": _COLORS["red"]}


def _level_name(level: int) -> str:
    """Convert logging level int to lowercase name."""
    return logging.getLevelName(level).lower()


def _format_value(v: object, c: dict[str, str]) -> str:
    """Format a value for console output."""
    match v:
        case str(): return f'{c["yellow"]}"{v}"{c["reset"]}'
        case bool(): return f'{c["blue"]}{str(v).lower()}{c["reset"]}'
        case int() | float(): return f'{c["blue"]}{v}{c["reset"]}'
        case dict(): return f'{c["dim"]}{{{len(v)} items}}{c["reset"]}'
        case list() | tuple(): return f'{c["dim"]}[{len(v)} items]{c["reset"]}'
        case _: return f'{c["white"]}{v!r}{c["reset"]}'
