"""Core tool abstractions: BaseTool, ToolMetadata, and parameter types.

Tools are defined by subclassing BaseTool with a typed parameter schema.
Each tool turns validated parameters into a JSON-serializable payload;
the base class renders it for the agent and converts unexpected failures
into ToolException.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Generic, TypeVar

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from webtools.foundation.config import WebToolsSettings, get_settings
from webtools.foundation.errors import ErrorCode, ToolError, ToolException
from webtools.runtime.observability import BoundLogger, get_logger
from webtools.runtime.retry import RetryPolicy


class ToolMetadata(BaseModel):
    """Metadata describing a tool's capabilities.

    Attributes:
        name: Unique identifier (snake_case, e.g., "web_search")
        description: What the tool does (shown to the agent for selection)
        category: Grouping category (e.g., "web", "files")
        enabled: Whether tool is currently active
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=10)
    category: str = Field(default="general")
    enabled: bool = Field(default=True)


class ToolParams(BaseModel):
    """Base schema for tool parameters.

    Accepts camelCase keys on the wire (``maxRetries``) and snake_case in Python.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )


class RetryParams(ToolParams):
    """Per-call retry overrides. None falls back to the configured defaults."""

    max_retries: Annotated[int | None, Field(
        default=None, ge=1, le=10,
        description="Maximum number of attempts for failed requests (default 3)",
    )]
    retry_delay: Annotated[int | None, Field(
        default=None, ge=0, le=60_000,
        description="Base delay in milliseconds between retry attempts (default 1000)",
    )]


class BatchParams(RetryParams):
    """Retry overrides plus the fan-out bound for multi-URL tools."""

    concurrency: Annotated[int | None, Field(
        default=None, ge=1, le=50,
        description="Maximum number of URLs processed in parallel (default 5)",
    )]


class Payload(BaseModel):
    """Base for tool output models, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


TParams = TypeVar("TParams", bound=ToolParams)


def to_json(payload: Any) -> str:
    """Render a tool payload as indented JSON text."""
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2, default=_encode).decode()


def _encode(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


class BaseTool(ABC, Generic[TParams]):
    """Abstract base class for all tools.

    Subclasses must:
    - Define `metadata` class variable with ToolMetadata
    - Define `params_schema` class variable with the Pydantic model type
    - Implement `_async_run(params)` returning a JSON-serializable payload

    Example:
        >>> class EchoParams(ToolParams):
        ...     text: str
        ...
        >>> class EchoTool(BaseTool[EchoParams]):
        ...     metadata = ToolMetadata(name="echo", description="Echo the input back")
        ...     params_schema = EchoParams
        ...
        ...     async def _async_run(self, params: EchoParams) -> dict[str, str]:
        ...         return {"text": params.text}
    """

    metadata: ClassVar[ToolMetadata]
    params_schema: ClassVar[type[ToolParams]]

    __slots__ = ("_settings", "_log")

    def __init__(self, settings: WebToolsSettings | None = None) -> None:
        self._settings = settings or get_settings()
        self._log: BoundLogger = get_logger("webtools.tools").bind_tool(self.metadata.name, self.metadata.category)

    @property
    def settings(self) -> WebToolsSettings:
        return self._settings

    # ─────────────────────────────────────────────────────────────────
    # Parameter handling
    # ─────────────────────────────────────────────────────────────────

    @classmethod
    def input_schema(cls) -> dict[str, Any]:
        """JSON schema of the wire-format (camelCase) parameters."""
        return cls.params_schema.model_json_schema(by_alias=True)

    def validate(self, arguments: Mapping[str, Any] | None) -> TParams:
        """Validate raw arguments, raising ToolException(INVALID_PARAMS) on failure."""
        try:
            return self.params_schema.model_validate(dict(arguments or {}))  # type: ignore[return-value]
        except ValidationError as e:
            issues = ", ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in e.errors()
            )
            raise ToolException(ToolError.create(
                self.metadata.name, f"Invalid input: {issues}", ErrorCode.INVALID_PARAMS, recoverable=False,
            )) from e

    def retry_policy(self, params: RetryParams) -> RetryPolicy:
        """Per-call retry policy: parameter overrides on top of configured defaults."""
        return RetryPolicy.from_settings(
            self._settings.retry, max_attempts=params.max_retries, base_delay_ms=params.retry_delay,
        )

    def concurrency(self, params: BatchParams) -> int:
        return params.concurrency if params.concurrency is not None else self._settings.batch.concurrency

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    @abstractmethod
    async def _async_run(self, params: TParams) -> Any:
        """Execute the tool and return a JSON-serializable payload.

        Raise ToolException for whole-call failures. Per-item failures of
        batch tools belong in the payload, not in an exception.
        """
        ...

    async def arun(self, params: TParams) -> str:
        """Execute and render the payload as JSON text.

        Raises:
            ToolException: On whole-call failure (unexpected errors are wrapped).
        """
        self._log.debug("executing")
        try:
            payload = await self._async_run(params)
        except ToolException:
            raise
        except Exception as e:
            self._log.error("execution failed", error=str(e) or type(e).__name__)
            raise ToolException.from_exc(self.metadata.name, e, "Execution failed") from e
        return to_json(payload)

    async def acall(self, **kwargs: Any) -> str:
        """Validate keyword arguments and execute.

        Example:
            >>> await WebPageTool().acall(urls=["https://example.com"], maxLength=2000)
        """
        return await self.arun(self.validate(kwargs))
