from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol


class TransactionManager(Protocol):
    """Unit of work around repository calls; upstream HTTP calls stay outside."""

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
