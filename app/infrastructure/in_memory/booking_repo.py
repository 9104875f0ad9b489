from dataclasses import replace

from app.application.interfaces.booking_repo import BookingRecord, BookingRepo


class InMemoryBookingRepo(BookingRepo):
    def __init__(self) -> None:
        self.records: list[BookingRecord] = []
        self._next_id = 1

    async def save(self, record: BookingRecord) -> BookingRecord:
        stored = replace(record, id=self._next_id)
        self._next_id += 1
        self.records.append(stored)
        return stored

    async def get_latest(self, partner_order_id: str) -> BookingRecord | None:
        matches = [r for r in self.records if r.partner_order_id == partner_order_id]
        if not matches:
            return None
        return max(matches, key=lambda r: (r.created_at, r.id))

    async def update_status(self, partner_order_id: str, status: str) -> int:
        updated = 0
        for record in self.records:
            if record.partner_order_id == partner_order_id:
                record.status = status
                updated += 1
        return updated
