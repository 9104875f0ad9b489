import logging
from dataclasses import dataclass
from typing import Any

from app.application.interfaces.booking_form_repo import BookingFormRecord, BookingFormRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import UUIDGenerator
from app.domain.constants import DEFAULT_FORM_LANGUAGE
from app.domain.errors import PersistenceError
from app.domain.services.amount import first_payment_type, parse_positive_amount
from app.domain.services.hashes import ensure_prebook_hash


@dataclass
class BookingFormResult:
    partner_order_id: str
    form: dict[str, Any]


class RequestBookingFormUseCase:
    """Binds a prebook token to a freshly generated partner order id."""

    def __init__(
        self,
        supplier_gateway: HotelSupplierGateway,
        booking_form_repo: BookingFormRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        uuid_generator: UUIDGenerator,
    ) -> None:
        self._supplier_gateway = supplier_gateway
        self._booking_form_repo = booking_form_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._uuid_generator = uuid_generator
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        prebook_token: Any,
        language: str | None = None,
        user_ip: str | None = None,
    ) -> BookingFormResult:
        book_hash = ensure_prebook_hash(prebook_token)
        partner_order_id = self._uuid_generator.generate_partner_order_id()
        payload = {
            "partner_order_id": partner_order_id,
            "book_hash": book_hash,
            "language": language or DEFAULT_FORM_LANGUAGE,
            "user_ip": user_ip or "127.0.0.1",
        }

        form = await self._supplier_gateway.request_booking_form(payload)
        form = form if isinstance(form, dict) else {}

        payment_type = first_payment_type(form)
        record = BookingFormRecord(
            partner_order_id=partner_order_id,
            prebook_token=book_hash,
            form=form,
            created_at=self._clock.now(),
            supplier_order_id=_as_text(form.get("order_id")),
            item_id=_as_text(form.get("item_id")),
            amount=parse_positive_amount(payment_type.get("amount")),
            currency_code=payment_type.get("currency_code"),
        )
        try:
            async with self._transaction_manager.start():
                await self._booking_form_repo.save(record)
        except PersistenceError as exc:
            self._logger.warning(
                "Booking form persistence failed",
                exc_info=exc,
                extra={"partner_order_id": partner_order_id},
            )

        self._logger.info(
            "Booking form created",
            extra={"partner_order_id": partner_order_id, "order_id": record.supplier_order_id},
        )
        return BookingFormResult(partner_order_id=partner_order_id, form=form)


def _as_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
