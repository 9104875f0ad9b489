from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.prebook_repo import PrebookRecord, PrebookRepo
from app.infrastructure.db.tables import prebooks


class PrebookRepoSQL(PrebookRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, record: PrebookRecord) -> PrebookRecord:
        stmt = insert(prebooks).values(
            offer_hash=record.offer_hash,
            token=record.token,
            request_id=record.request_id,
            summary=record.summary,
            raw_supplier_response=record.raw_supplier_response,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )
        result = await self._session.execute(stmt)
        record.id = result.inserted_primary_key[0]
        return record

    async def get_latest_by_token(self, token: str) -> PrebookRecord | None:
        stmt = (
            select(prebooks)
            .where(prebooks.c.token == token)
            .order_by(prebooks.c.created_at.desc(), prebooks.c.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return PrebookRecord(
            id=row["id"],
            offer_hash=row["offer_hash"],
            token=row["token"],
            request_id=row["request_id"],
            summary=row["summary"],
            raw_supplier_response=row["raw_supplier_response"],
            created_at=row["created_at"],
            expires_at=row["expires_at"],
        )
