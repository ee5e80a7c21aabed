"""Fatal-error classification for the retry loop."""

from __future__ import annotations

from webtools.foundation.errors import status_code_of

RATE_LIMITED_STATUS = 429


def is_fatal(error: BaseException) -> bool:
    """Whether an error must never be retried.

    Fatal iff the error carries a status code in ``[400, 500)`` other than 429.
    Server errors, rate limiting, timeouts and network errors without a
    status code are all retriable.

    Example:
        >>> is_fatal(HttpStatusError(404))
        True
        >>> is_fatal(HttpStatusError(429)), is_fatal(HttpStatusError(503))
        (False, False)
    """
    code = status_code_of(error)
    return code is not None and 400 <= code < 500 and code != RATE_LIMITED_STATUS
