from abc import ABC, abstractmethod
from typing import Any


class HotelSupplierGateway(ABC):
    """
    Hotel-booking supplier API. Every method raises ``UpstreamError`` with the
    supplier's status, error and debug payload when the call fails.
    """

    @abstractmethod
    async def prebook(self, rate_hash: str, price_increase_percent: float = 0) -> Any:
        """Holds a rate and returns the supplier payload carrying the prebook token."""
        pass

    @abstractmethod
    async def fetch_hotel_page(self, body: dict[str, Any]) -> dict[str, Any]:
        """Current rates for one hotel and stay."""
        pass

    @abstractmethod
    async def request_booking_form(self, payload: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    async def finish_booking(self, payload: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    async def finish_status(self, partner_order_id: str) -> dict[str, Any]:
        pass
