"""Team performance analysis domain modules."""

from domain.common import Alliance, EventRef, Match
from domain.errors import PersistenceError, ProviderError, RateLimitedError

__all__ = [
    "Alliance",
    "EventRef",
    "Match",
    "PersistenceError",
    "ProviderError",
    "RateLimitedError",
]
