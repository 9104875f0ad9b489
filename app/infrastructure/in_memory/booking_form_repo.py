from dataclasses import replace

from app.application.interfaces.booking_form_repo import BookingFormRecord, BookingFormRepo


class InMemoryBookingFormRepo(BookingFormRepo):
    def __init__(self) -> None:
        self.records: list[BookingFormRecord] = []
        self._next_id = 1

    async def save(self, record: BookingFormRecord) -> BookingFormRecord:
        stored = replace(record, id=self._next_id)
        self._next_id += 1
        self.records.append(stored)
        return stored

    async def get_latest(self, partner_order_id: str) -> BookingFormRecord | None:
        matches = [r for r in self.records if r.partner_order_id == partner_order_id]
        if not matches:
            return None
        return max(matches, key=lambda r: (r.created_at, r.id))
