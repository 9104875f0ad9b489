from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.booking_repo import BookingRecord, BookingRepo
from app.infrastructure.db.tables import bookings


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, record: BookingRecord) -> BookingRecord:
        stmt = insert(bookings).values(
            partner_order_id=record.partner_order_id,
            supplier_order_id=record.supplier_order_id,
            status=record.status,
            user_email=record.user_email,
            user_phone=record.user_phone,
            user_name=record.user_name,
            amount=record.amount,
            currency_code=record.currency_code,
            raw=record.raw,
            created_at=record.created_at,
        )
        result = await self._session.execute(stmt)
        record.id = result.inserted_primary_key[0]
        return record

    async def get_latest(self, partner_order_id: str) -> BookingRecord | None:
        stmt = (
            select(bookings)
            .where(bookings.c.partner_order_id == partner_order_id)
            .order_by(bookings.c.created_at.desc(), bookings.c.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return BookingRecord(
            id=row["id"],
            partner_order_id=row["partner_order_id"],
            supplier_order_id=row["supplier_order_id"],
            status=row["status"],
            user_email=row["user_email"],
            user_phone=row["user_phone"],
            user_name=row["user_name"],
            amount=row["amount"],
            currency_code=row["currency_code"],
            raw=row["raw"],
            created_at=row["created_at"],
        )

    async def update_status(self, partner_order_id: str, status: str) -> int:
        stmt = (
            update(bookings)
            .where(bookings.c.partner_order_id == partner_order_id)
            .values(status=status)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
