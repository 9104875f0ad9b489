from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.errors import PersistenceError


class SQLAlchemyTransactionManager(TransactionManager):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        """Commits on exit; database errors surface as ``PersistenceError``."""
        try:
            if self._session.in_transaction():
                yield
            else:
                async with self._session.begin():
                    yield
        except SQLAlchemyError as exc:
            raise PersistenceError("transaction", str(exc)) from exc
