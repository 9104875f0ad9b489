from dataclasses import dataclass
from typing import Any

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.errors import ValidationError


@dataclass
class BookingStatusView:
    partner_order_id: str
    payment_status: str | None
    payment_provider: str | None
    payment_reference: str | None
    booking_status: str | None
    supplier_order_id: str | None


class CheckBookingUseCase:
    def __init__(
        self,
        supplier_gateway: HotelSupplierGateway,
        payment_repo: PaymentRepo,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
    ) -> None:
        self._supplier_gateway = supplier_gateway
        self._payment_repo = payment_repo
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager

    async def check_supplier(self, partner_order_id: str | None) -> dict[str, Any]:
        """Polls the supplier for the finish status of an order."""
        if not partner_order_id:
            raise ValidationError("partner_order_id", "is required")
        return await self._supplier_gateway.finish_status(partner_order_id)

    async def local_status(self, partner_order_id: str | None) -> BookingStatusView:
        """Locally tracked state, read from the same store the webhook writes to."""
        if not partner_order_id:
            raise ValidationError("partner_order_id", "is required")
        async with self._transaction_manager.start():
            payment = await self._payment_repo.get_latest_by_partner_order(partner_order_id)
            booking = await self._booking_repo.get_latest(partner_order_id)
        return BookingStatusView(
            partner_order_id=partner_order_id,
            payment_status=payment.status if payment else None,
            payment_provider=payment.provider if payment else None,
            payment_reference=payment.external_reference if payment else None,
            booking_status=booking.status if booking else None,
            supplier_order_id=(
                booking.supplier_order_id if booking else payment.supplier_order_id if payment else None
            ),
        )
