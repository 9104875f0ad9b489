"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Repositorios in-memory y gateways stub (sin red ni base de datos)
- Cliente HTTP de prueba (FastAPI TestClient) con casos de uso inyectados
- Base de datos SQLite in-memory para los repositorios SQL
- Reset de circuit breakers entre tests
"""

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.dependencies import build_use_cases, get_use_cases
from app.application.interfaces.clock import FakeClock
from app.application.interfaces.uuid_generator import FakeUUIDGenerator
from app.config import Settings, get_settings
from app.infrastructure.db.tables import metadata
from app.infrastructure.in_memory import (
    InMemoryBookingFormRepo,
    InMemoryBookingRepo,
    InMemoryPaymentRepo,
    InMemoryPrebookRepo,
    NoopTransactionManager,
    StubFloaGateway,
    StubHotelSupplierGateway,
    StubSystempayGateway,
)
from app.main import app

TEST_HMAC_KEY = "test-hmac-key"
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# FIXTURES DE DOMINIO / APLICACIÓN
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def uuid_generator() -> FakeUUIDGenerator:
    return FakeUUIDGenerator()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, systempay_hmac_key=TEST_HMAC_KEY)


@pytest.fixture
def repos() -> dict:
    return {
        "prebook_repo": InMemoryPrebookRepo(),
        "booking_form_repo": InMemoryBookingFormRepo(),
        "payment_repo": InMemoryPaymentRepo(),
        "booking_repo": InMemoryBookingRepo(),
        "tx_manager": NoopTransactionManager(),
    }


@pytest.fixture
def gateways(clock, uuid_generator) -> dict:
    """
    Gateways stub por defecto.
    Los tests pueden reemplazar una entrada (ej. por un AsyncMock) antes de llamar al API.
    """
    return {
        "supplier_gateway": StubHotelSupplierGateway(),
        "floa_gateway": StubFloaGateway(),
        "systempay_gateway": StubSystempayGateway(),
        "clock": clock,
        "uuid_generator": uuid_generator,
    }


@pytest.fixture
def use_cases(settings, repos, gateways) -> dict:
    return build_use_cases(settings, repos, gateways)


# ============================================================================
# FIXTURES DE CLIENTE HTTP
# ============================================================================

@pytest.fixture
def client(settings, repos, gateways) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient con casos de uso in-memory.
    Los casos de uso se construyen por request para reflejar cambios en ``gateways``.
    """
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_use_cases] = lambda: build_use_cases(settings, repos, gateways)

    with TestClient(app) as test_client:
        yield test_client

    # Limpiar overrides
    app.dependency_overrides.clear()


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """
    Engine SQLite in-memory; StaticPool mantiene una sola conexión
    para que todas las sesiones vean las mismas tablas.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,  # Cambiar a True para debug SQL
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


# ============================================================================
# MARKERS DE PYTEST
# ============================================================================

def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: Tests de integración contra SQLite in-memory"
    )


# ============================================================================
# HOOKS DE PYTEST
# ============================================================================

@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """
    Reset circuit breakers antes de cada test.
    Evita que tests fallen por breakers abiertos de tests anteriores.
    """
    from app.infrastructure.circuit_breaker import etg_breaker, floa_breaker, systempay_breaker

    breakers = (etg_breaker, floa_breaker, systempay_breaker)
    for breaker in breakers:
        breaker.close()

    yield

    for breaker in breakers:
        breaker.close()
