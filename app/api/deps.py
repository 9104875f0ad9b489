from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.infrastructure.db.mysql_engine import build_engine, build_sessionmaker

settings = get_settings()

# Without DATABASE_URL the service runs in-memory; the engine only backs /health/db.
DB_URL = settings.database_url or "sqlite+aiosqlite:///:memory:"

engine = build_engine(settings.model_copy(update={"database_url": DB_URL}))
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
