from dataclasses import replace
from datetime import datetime
from typing import Sequence

from app.application.interfaces.payment_repo import PaymentRecord, PaymentRepo
from app.domain.entities.payment import TERMINAL_STATUSES
from app.domain.errors import PersistenceError


class InMemoryPaymentRepo(PaymentRepo):
    def __init__(self) -> None:
        self.records: list[PaymentRecord] = []
        self._next_id = 1

    async def create_pending(self, record: PaymentRecord) -> PaymentRecord:
        if record.external_reference and await self.find_by_external_reference(
            record.provider, record.external_reference
        ):
            raise PersistenceError("payment", "duplicate (provider, external_reference)")
        stored = replace(record, id=self._next_id)
        self._next_id += 1
        self.records.append(stored)
        return stored

    async def get_latest_by_partner_order(self, partner_order_id: str) -> PaymentRecord | None:
        matches = [r for r in self.records if r.partner_order_id == partner_order_id]
        if not matches:
            return None
        return max(matches, key=lambda r: (r.created_at, r.id))

    async def find_by_external_reference(
        self,
        provider: str,
        external_reference: str,
    ) -> PaymentRecord | None:
        for record in self.records:
            if record.provider == provider and record.external_reference == external_reference:
                return record
        return None

    async def apply_status(
        self,
        provider: str,
        reference: str,
        partner_order_id: str,
        status: str,
        updated_at: datetime,
    ) -> Sequence[PaymentRecord]:
        changed = []
        for record in self.records:
            if record.provider != provider:
                continue
            if record.external_reference != reference and record.partner_order_id != partner_order_id:
                continue
            if record.status == status:
                continue
            if status not in TERMINAL_STATUSES and record.status in TERMINAL_STATUSES:
                continue
            record.status = status
            record.updated_at = updated_at
            changed.append(replace(record))
        return changed
