from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.booking_form_repo import BookingFormRecord, BookingFormRepo
from app.infrastructure.db.tables import booking_forms


class BookingFormRepoSQL(BookingFormRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, record: BookingFormRecord) -> BookingFormRecord:
        stmt = insert(booking_forms).values(
            partner_order_id=record.partner_order_id,
            prebook_token=record.prebook_token,
            supplier_order_id=record.supplier_order_id,
            item_id=record.item_id,
            amount=record.amount,
            currency_code=record.currency_code,
            form=record.form,
            created_at=record.created_at,
        )
        result = await self._session.execute(stmt)
        record.id = result.inserted_primary_key[0]
        return record

    async def get_latest(self, partner_order_id: str) -> BookingFormRecord | None:
        stmt = (
            select(booking_forms)
            .where(booking_forms.c.partner_order_id == partner_order_id)
            .order_by(booking_forms.c.created_at.desc(), booking_forms.c.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return BookingFormRecord(
            id=row["id"],
            partner_order_id=row["partner_order_id"],
            prebook_token=row["prebook_token"],
            supplier_order_id=row["supplier_order_id"],
            item_id=row["item_id"],
            amount=row["amount"],
            currency_code=row["currency_code"],
            form=row["form"] or {},
            created_at=row["created_at"],
        )
