from typing import Any

from app.application.interfaces.supplier_gateway import HotelSupplierGateway


class StubHotelSupplierGateway(HotelSupplierGateway):
    """Deterministic supplier used when no ETG credentials are configured."""

    def __init__(self) -> None:
        self._next_order_id = 1000

    async def prebook(self, rate_hash: str, price_increase_percent: float = 0) -> Any:
        suffix = rate_hash.split("-", 1)[-1]
        return {
            "hotels": [
                {
                    "id": "stub_hotel",
                    "name": "Stub Hotel",
                    "rates": [
                        {
                            "book_hash": f"p-{suffix}",
                            "room_name": "Standard Double",
                            "meal": "breakfast",
                            "payment_options": {
                                "payment_types": [
                                    {"amount": "120.00", "currency_code": "EUR", "type": "deposit"}
                                ]
                            },
                        }
                    ],
                }
            ]
        }

    async def fetch_hotel_page(self, body: dict[str, Any]) -> dict[str, Any]:
        return {
            "hotels": [
                {
                    "id": body.get("id"),
                    "rates": [
                        {"hash": "h-stub-refreshed", "room_name": "Standard Double", "meal": "breakfast"}
                    ],
                }
            ]
        }

    async def request_booking_form(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._next_order_id += 1
        return {
            "order_id": self._next_order_id,
            "item_id": self._next_order_id * 10,
            "partner_order_id": payload.get("partner_order_id"),
            "payment_types": [{"type": "deposit", "amount": "120.00", "currency_code": "EUR"}],
        }

    async def finish_booking(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def finish_status(self, partner_order_id: str) -> dict[str, Any]:
        return {"partner_order_id": partner_order_id, "percent": 100}
