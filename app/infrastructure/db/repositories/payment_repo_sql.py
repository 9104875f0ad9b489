from datetime import datetime
from typing import Sequence

from sqlalchemy import insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.payment_repo import PaymentRecord, PaymentRepo
from app.domain.entities.payment import TERMINAL_STATUSES
from app.infrastructure.db.tables import payments


class PaymentRepoSQL(PaymentRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_pending(self, record: PaymentRecord) -> PaymentRecord:
        stmt = insert(payments).values(
            provider=record.provider,
            status=record.status,
            partner_order_id=record.partner_order_id,
            prebook_token=record.prebook_token,
            supplier_order_id=record.supplier_order_id,
            item_id=record.item_id,
            amount=record.amount,
            currency_code=record.currency_code,
            external_reference=record.external_reference,
            payload=record.payload,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
        result = await self._session.execute(stmt)
        record.id = result.inserted_primary_key[0]
        return record

    async def get_latest_by_partner_order(self, partner_order_id: str) -> PaymentRecord | None:
        stmt = (
            select(payments)
            .where(payments.c.partner_order_id == partner_order_id)
            .order_by(payments.c.created_at.desc(), payments.c.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_payment(row) if row else None

    async def find_by_external_reference(
        self,
        provider: str,
        external_reference: str,
    ) -> PaymentRecord | None:
        stmt = select(payments).where(
            payments.c.provider == provider,
            payments.c.external_reference == external_reference,
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_payment(row) if row else None

    async def apply_status(
        self,
        provider: str,
        reference: str,
        partner_order_id: str,
        status: str,
        updated_at: datetime,
    ) -> Sequence[PaymentRecord]:
        conditions = [
            payments.c.provider == provider,
            or_(
                payments.c.external_reference == reference,
                payments.c.partner_order_id == partner_order_id,
            ),
            payments.c.status != status,
        ]
        if status not in TERMINAL_STATUSES:
            conditions.append(payments.c.status.not_in(sorted(TERMINAL_STATUSES)))

        result = await self._session.execute(select(payments.c.id).where(*conditions))
        ids = [row[0] for row in result.all()]
        if not ids:
            return []

        await self._session.execute(
            update(payments)
            .where(payments.c.id.in_(ids), *conditions)
            .values(status=status, updated_at=updated_at)
        )
        result = await self._session.execute(
            select(payments).where(payments.c.id.in_(ids), payments.c.status == status)
        )
        return [self._map_payment(row) for row in result.mappings().all()]

    def _map_payment(self, row) -> PaymentRecord:
        return PaymentRecord(
            id=row["id"],
            provider=row["provider"],
            status=row["status"],
            partner_order_id=row["partner_order_id"],
            prebook_token=row["prebook_token"],
            supplier_order_id=row["supplier_order_id"],
            item_id=row["item_id"],
            amount=row["amount"],
            currency_code=row["currency_code"],
            external_reference=row["external_reference"],
            payload=row["payload"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
