from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.application.interfaces.transaction_manager import TransactionManager


class NoopTransactionManager(TransactionManager):
    """In-memory repositories apply writes immediately; there is nothing to commit."""

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
