import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_in: float


class TokenCache:
    """
    Access token cached with its expiry, refreshed single-flight.

    Concurrent callers that find the token missing or about to expire queue on one
    lock; the first one fetches, the others reuse its result.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[AccessToken]],
        skew_seconds: float = 5.0,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._skew = skew_seconds
        self._monotonic = monotonic
        self._value: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()
        self.fetch_count = 0

    def _is_fresh(self) -> bool:
        return self._value is not None and self._expires_at > self._monotonic() + self._skew

    async def get(self) -> str:
        if self._is_fresh():
            return self._value
        async with self._lock:
            if self._is_fresh():
                return self._value
            token = await self._fetch()
            self.fetch_count += 1
            self._value = token.value
            self._expires_at = self._monotonic() + token.expires_in
            logger.info("Access token refreshed", extra={"expires_in": token.expires_in})
            return self._value

    def invalidate(self) -> None:
        self._value = None
        self._expires_at = 0.0
