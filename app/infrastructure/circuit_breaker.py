"""
Circuit Breaker configuration for external service calls.

One breaker per upstream (hotel supplier, installment provider, card gateway) so a
failing provider never blocks calls to the others.

Circuit Breaker Pattern:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Testing if service recovered, limited requests allowed

Only transport failures (timeouts, connection errors) are recorded: the HTTP call is
wrapped with ``breaker.calling()`` and business errors are raised after it returns.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

from app.domain.errors import UpstreamError

logger = logging.getLogger(__name__)


class StateChangeLogger(CircuitBreakerListener):
    """Logs circuit breaker state changes for monitoring and alerting."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        logger.warning(
            "Circuit breaker state changed",
            extra={
                "breaker_name": self.name,
                "old_state": old_state.name if old_state else None,
                "new_state": new_state.name,
            },
        )


def _build_breaker(provider: str) -> CircuitBreaker:
    return CircuitBreaker(
        fail_max=5,  # Open circuit after 5 consecutive failures
        reset_timeout=60,  # Wait 60 seconds before attempting recovery
        name=f"{provider}_circuit_breaker",
        listeners=[StateChangeLogger(provider)],
    )


etg_breaker = _build_breaker("etg")
floa_breaker = _build_breaker("floa")
systempay_breaker = _build_breaker("systempay")


@asynccontextmanager
async def guarded(breaker: CircuitBreaker, provider: str) -> AsyncIterator[None]:
    """Runs the wrapped upstream call under ``breaker``; an open circuit is a 503."""
    try:
        with breaker.calling():
            yield
    except CircuitBreakerError as exc:
        logger.error("Circuit open, upstream call rejected", extra={"provider": provider})
        raise UpstreamError(
            provider=provider,
            reason=f"{provider}_unavailable",
            http_status=503,
            debug={"error": "circuit_open"},
        ) from exc


__all__ = [
    "etg_breaker",
    "floa_breaker",
    "systempay_breaker",
    "guarded",
    "CircuitBreakerError",
]
