from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass
class BookingFormRecord:
    partner_order_id: str
    prebook_token: str
    form: dict[str, Any]
    created_at: datetime
    supplier_order_id: str | None = None
    item_id: str | None = None
    amount: Decimal | None = None
    currency_code: str | None = None
    id: int | None = None


class BookingFormRepo:
    async def save(self, record: BookingFormRecord) -> BookingFormRecord:
        raise NotImplementedError

    async def get_latest(self, partner_order_id: str) -> BookingFormRecord | None:
        """The most recent row for an order is authoritative."""
        raise NotImplementedError
