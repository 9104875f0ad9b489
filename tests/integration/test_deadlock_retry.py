"""
Integration tests for deadlock retry

Verifica que el retry automático de deadlocks funciona correctamente:
- Detecta errores MySQL 1213 (Deadlock) y 1205 (Lock wait timeout)
- Detecta el deadlock aunque venga envuelto en PersistenceError
- Reintenta con exponential backoff y se rinde después de max_attempts
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.domain.errors import PersistenceError
from app.infrastructure.db.retry import is_deadlock_error, retry_on_deadlock


def _operational_error(message: str) -> OperationalError:
    return OperationalError("UPDATE payments", {}, Exception(message), connection_invalidated=False)


def _wrapped(error: Exception) -> PersistenceError:
    try:
        raise PersistenceError("transaction", str(error)) from error
    except PersistenceError as wrapped:
        return wrapped


class TestDeadlockDetection:
    def test_detect_mysql_deadlock_error_1213(self):
        assert is_deadlock_error(_operational_error("(1213, 'Deadlock found')"))

    def test_detect_mysql_lock_timeout_error_1205(self):
        assert is_deadlock_error(_operational_error("(1205, 'Lock wait timeout exceeded')"))

    def test_detect_deadlock_behind_persistence_error(self):
        assert is_deadlock_error(_wrapped(_operational_error("(1213, 'Deadlock found')")))

    def test_ignore_non_deadlock_errors(self):
        assert not is_deadlock_error(_operational_error("(1146, \"Table doesn't exist\")"))
        assert not is_deadlock_error(ValueError("1213"))


class TestDeadlockRetry:
    async def test_retries_until_success(self):
        func = AsyncMock(side_effect=[_operational_error("(1213, 'Deadlock')"), "done"])

        with patch("app.infrastructure.db.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await retry_on_deadlock(func, max_attempts=3, base_delay=0.1)

        assert result == "done"
        assert func.await_count == 2
        sleep.assert_awaited_once_with(0.1)

    async def test_gives_up_after_max_attempts(self):
        error = _wrapped(_operational_error("(1213, 'Deadlock')"))
        func = AsyncMock(side_effect=error)

        with patch("app.infrastructure.db.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(PersistenceError):
                await retry_on_deadlock(func, max_attempts=3, base_delay=0.1)

        assert func.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == [0.1, 0.2]

    async def test_non_deadlock_error_is_not_retried(self):
        func = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await retry_on_deadlock(func)

        assert func.await_count == 1
