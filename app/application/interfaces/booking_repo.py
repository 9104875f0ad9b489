from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass
class BookingRecord:
    partner_order_id: str
    status: str
    created_at: datetime
    supplier_order_id: str | None = None
    user_email: str | None = None
    user_phone: str | None = None
    user_name: str | None = None
    amount: Decimal | None = None
    currency_code: str | None = None
    raw: Any = None
    id: int | None = None


class BookingRepo:
    async def save(self, record: BookingRecord) -> BookingRecord:
        raise NotImplementedError

    async def get_latest(self, partner_order_id: str) -> BookingRecord | None:
        raise NotImplementedError

    async def update_status(self, partner_order_id: str, status: str) -> int:
        """Returns the number of rows updated."""
        raise NotImplementedError
