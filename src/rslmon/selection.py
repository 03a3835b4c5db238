"""Request tokens for discarding stale fetches.

When a caller fetches readings over a slow backend and the selection (year,
tower, month) changes before the fetch completes, only the result of the
most recent request may be applied. Each request takes a token from
RequestTracker.begin(); results carrying an older token are dropped.
"""

from typing import Generic, Optional, TypeVar

from . import log

T = TypeVar("T")


class RequestTracker(Generic[T]):
    """Keep only the result of the newest request."""

    def __init__(self, name: str = "request"):
        self.name = name
        self._latest = 0
        self._result: Optional[T] = None
        self._result_token = 0

    def begin(self) -> int:
        """Issue a new token, superseding all earlier ones."""
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        """Return True if no newer request has been started."""
        return token == self._latest

    def accept(self, token: int, result: T) -> bool:
        """Store a result if its token is still current.

        Returns:
            True if stored, False if the result was stale and dropped
        """
        if not self.is_current(token):
            log.debug(f"{self.name}: dropping stale result (token {token}, latest {self._latest})")
            return False
        self._result = result
        self._result_token = token
        return True

    @property
    def result(self) -> Optional[T]:
        """Most recently accepted result."""
        return self._result

    def to_dict(self) -> dict:
        return {
            "latest_token": self._latest,
            "result_token": self._result_token,
            "has_result": self._result_token > 0,
        }
