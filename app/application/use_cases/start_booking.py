import logging
from dataclasses import dataclass
from typing import Any

from app.application.interfaces.booking_repo import BookingRecord, BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.constants import (
    BOOKING_STATUS_STARTED,
    DEFAULT_BOOKING_LANGUAGE,
    DEFAULT_PAYMENT_TYPE,
)
from app.domain.entities.payment import PaymentStatus
from app.domain.errors import (
    PaymentRequiredBeforeBookingFinishError,
    PersistenceError,
    ValidationError,
)
from app.domain.services.amount import parse_positive_amount


@dataclass
class StartBookingResult:
    partner_order_id: str
    start: dict[str, Any]


def build_booking_start_payload(body: dict[str, Any]) -> dict[str, Any]:
    partner_order_id = body.get("partner_order_id")
    if not partner_order_id:
        raise ValidationError("partner_order_id", "is required")
    user = body.get("user")
    if not isinstance(user, dict) or not user.get("email") or not user.get("phone"):
        raise ValidationError("user", "user.email and user.phone are required")
    rooms = body.get("rooms")
    if not isinstance(rooms, list) or not rooms:
        raise ValidationError("rooms", "rooms (with guests[]) is required")
    payment_type = body.get("payment_type")
    if not isinstance(payment_type, dict) or not payment_type.get("currency_code"):
        raise ValidationError(
            "payment_type.currency_code", "is required (e.g., 'EUR')"
        )
    payment_type = dict(payment_type)
    payment_type.setdefault("type", DEFAULT_PAYMENT_TYPE)
    if not payment_type["type"]:
        payment_type["type"] = DEFAULT_PAYMENT_TYPE

    return {
        "partner": {
            "partner_order_id": partner_order_id,
            "comment": None,
            "amount_sell_b2b2c": None,
        },
        "language": body.get("language") or DEFAULT_BOOKING_LANGUAGE,
        "user": user,
        "supplier_data": body.get("supplier_data"),
        "rooms": rooms,
        "upsell_data": body.get("upsell_data"),
        "payment_type": payment_type,
        "return_path": body.get("return_path"),
        "arrival_datetime": body.get("arrival_datetime"),
    }


def _lead_guest_name(rooms: list[Any]) -> str | None:
    first_room = rooms[0] if rooms and isinstance(rooms[0], dict) else {}
    guests = first_room.get("guests")
    guest = guests[0] if isinstance(guests, list) and guests and isinstance(guests[0], dict) else {}
    name = " ".join(
        part for part in (guest.get("first_name"), guest.get("last_name")) if part
    )
    return name or None


class StartBookingUseCase:
    """Finishes the supplier booking, only for orders with a confirmed payment."""

    def __init__(
        self,
        supplier_gateway: HotelSupplierGateway,
        payment_repo: PaymentRepo,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._supplier_gateway = supplier_gateway
        self._payment_repo = payment_repo
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, body: dict[str, Any]) -> StartBookingResult:
        payload = build_booking_start_payload(body)
        partner_order_id = payload["partner"]["partner_order_id"]

        async with self._transaction_manager.start():
            payment = await self._payment_repo.get_latest_by_partner_order(partner_order_id)
        if payment is None or payment.status != PaymentStatus.PAID.value:
            self._logger.warning(
                "Booking finish blocked: payment not confirmed",
                extra={
                    "partner_order_id": partner_order_id,
                    "status": payment.status if payment else None,
                },
            )
            raise PaymentRequiredBeforeBookingFinishError(
                partner_order_id,
                payment_status=payment.status if payment else None,
                provider=payment.provider if payment else None,
            )

        start = await self._supplier_gateway.finish_booking(payload)
        start = start if isinstance(start, dict) else {}

        user = payload["user"]
        payment_type = payload["payment_type"]
        record = BookingRecord(
            partner_order_id=partner_order_id,
            status=BOOKING_STATUS_STARTED,
            created_at=self._clock.now(),
            supplier_order_id=(
                str(start["order_id"]) if start.get("order_id") else payment.supplier_order_id
            ),
            user_email=user.get("email"),
            user_phone=user.get("phone"),
            user_name=_lead_guest_name(payload["rooms"]),
            amount=parse_positive_amount(payment_type.get("amount")) or payment.amount,
            currency_code=payment_type.get("currency_code"),
            raw={"request": payload, "response": start},
        )
        try:
            async with self._transaction_manager.start():
                await self._booking_repo.save(record)
        except PersistenceError as exc:
            self._logger.warning(
                "Booking persistence failed",
                exc_info=exc,
                extra={"partner_order_id": partner_order_id},
            )

        self._logger.info(
            "Booking finish requested",
            extra={"partner_order_id": partner_order_id, "provider": payment.provider},
        )
        return StartBookingResult(partner_order_id=partner_order_id, start=start)
