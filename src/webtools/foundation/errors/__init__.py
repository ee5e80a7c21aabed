"""Unified error handling for webtools.

- ErrorCode: Standard error codes for tool failures
- ToolError/ToolException: Structured errors and exceptions
- ConfigurationError: Invalid retry/batch parameters
- HttpStatusError/status_code_of: Status-carrying transport failures
- Result/Ok/Err: Per-item success or failure
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    HttpStatusError,
    ToolError,
    ToolException,
    classify_exception,
    status_code_of,
)
from .result import Err, Ok, Result, collect_results

__all__ = [
    # Core errors
    "ErrorCode", "ToolError", "ToolException", "classify_exception",
    "ConfigurationError", "HttpStatusError", "status_code_of",
    # Result
    "Result", "Ok", "Err", "collect_results",
]
