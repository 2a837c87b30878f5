"""Error taxonomy for the analysis engine."""

from __future__ import annotations

import re

# Status-anchored, so ids inside a request URL never match.
_RATE_LIMIT_MESSAGE = re.compile(r"\bError:?\s*429\b|\b429 Too Many Requests\b", re.IGNORECASE)


class ProviderError(Exception):
    """Non-2xx, transport failure, or malformed response from the event-data provider."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(ProviderError):
    """The provider answered 429 Too Many Requests."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=429)


class PersistenceError(Exception):
    """A per-event transactional write failed and was rolled back."""


def is_rate_limited(error: BaseException) -> bool:
    """Whether an error signals provider throttling.

    An error carrying an HTTP status is judged by that status alone; the
    message is only consulted for errors without one.
    """
    if isinstance(error, RateLimitedError):
        return True
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        return status_code == 429
    return _RATE_LIMIT_MESSAGE.search(str(error)) is not None


__all__ = ["PersistenceError", "ProviderError", "RateLimitedError", "is_rate_limited"]
