from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Sequence


@dataclass
class PaymentRecord:
    provider: str
    status: str
    partner_order_id: str
    amount: Decimal
    currency_code: str
    created_at: datetime
    updated_at: datetime
    prebook_token: str | None = None
    supplier_order_id: str | None = None
    item_id: str | None = None
    external_reference: str | None = None
    payload: dict[str, Any] | None = None
    id: int | None = None


class PaymentRepo:
    async def create_pending(self, record: PaymentRecord) -> PaymentRecord:
        raise NotImplementedError

    async def get_latest_by_partner_order(self, partner_order_id: str) -> PaymentRecord | None:
        raise NotImplementedError

    async def find_by_external_reference(
        self,
        provider: str,
        external_reference: str,
    ) -> PaymentRecord | None:
        raise NotImplementedError

    async def apply_status(
        self,
        provider: str,
        reference: str,
        partner_order_id: str,
        status: str,
        updated_at: datetime,
    ) -> Sequence[PaymentRecord]:
        """
        Set-based status update for rows of ``provider`` whose external reference
        equals ``reference`` or whose partner order id equals ``partner_order_id``.

        Rows already holding ``status`` are left untouched, and a pending status never
        overwrites a terminal one. Returns the rows that changed.
        """
        raise NotImplementedError
