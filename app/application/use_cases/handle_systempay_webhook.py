import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_repo import PaymentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.constants import BOOKING_STATUS_PAID, BOOKING_STATUS_PAYMENT_FAILED
from app.domain.entities.payment import PaymentProvider, PaymentStatus
from app.domain.errors import SignatureInvalidError
from app.domain.services.payment_status import normalize_status
from app.domain.services.signature import verify_kr_hash

BOOKING_STATUS_BY_PAYMENT = {
    PaymentStatus.PAID: BOOKING_STATUS_PAID,
    PaymentStatus.FAILED: BOOKING_STATUS_PAYMENT_FAILED,
}


@dataclass
class WebhookOutcome:
    applied: bool
    status: PaymentStatus
    reference: str | None = None
    partner_order_id: str | None = None
    payments_updated: int = 0
    bookings_updated: int = 0
    signature: str | None = None


def parse_kr_answer(raw: Any) -> dict[str, Any] | None:
    if not raw:
        return None
    if isinstance(raw, dict):
        return raw
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        logging.getLogger(__name__).warning("Systempay IPN: kr-answer is not valid JSON")
        return None
    return parsed if isinstance(parsed, dict) else None


def _dig(data: Any, *path: Any) -> Any:
    for key in path:
        if isinstance(key, int):
            if not isinstance(data, list) or len(data) <= key:
                return None
        elif not isinstance(data, dict):
            return None
        data = data[key] if isinstance(key, int) else data.get(key)
    return data


def _first_present(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def resolve_raw_status(answer: dict[str, Any] | None, form: Mapping[str, Any]) -> Any:
    return _first_present(
        _dig(answer, "orderStatus"),
        _dig(answer, "transactions", 0, "status"),
        form.get("status"),
        form.get("transactionStatus"),
    )


def resolve_order_id(answer: dict[str, Any] | None, form: Mapping[str, Any]) -> str | None:
    value = _first_present(
        _dig(answer, "orderDetails", "orderId"),
        _dig(answer, "orderId"),
        form.get("orderId"),
        form.get("paymentOrderId"),
        form.get("order_id"),
    )
    return str(value) if value else None


def resolve_partner_order_id(
    answer: dict[str, Any] | None, form: Mapping[str, Any], order_id: str | None
) -> str | None:
    value = _first_present(
        _dig(answer, "orderDetails", "metadata", "partner_order_id"),
        form.get("partner_order_id"),
        form.get("metadata_partner_order_id"),
        order_id,
    )
    return str(value) if value else None


class HandleSystempayWebhookUseCase:
    """
    Reconciles a card-gateway IPN into local payment and booking state.

    Applying the same notification twice changes nothing the second time: rows
    already holding the resolved status are skipped, and a pending notification
    never reverts a paid or failed payment.
    """

    def __init__(
        self,
        payment_repo: PaymentRepo,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        hmac_key: str | None,
    ) -> None:
        self._payment_repo = payment_repo
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._hmac_key = hmac_key
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        form: Mapping[str, Any],
        kr_hash: str | None,
        kr_hash_algorithm: str | None,
    ) -> WebhookOutcome:
        raw_answer = form.get("kr-answer")
        check = verify_kr_hash(raw_answer, kr_hash, kr_hash_algorithm, self._hmac_key)
        if not check.valid:
            raise SignatureInvalidError(check.message)

        answer = parse_kr_answer(raw_answer)
        raw_status = resolve_raw_status(answer, form)
        status = normalize_status(PaymentProvider.SYSTEMPAY, raw_status)
        order_id = resolve_order_id(answer, form)
        partner_order_id = resolve_partner_order_id(answer, form, order_id)

        if not order_id and not partner_order_id:
            self._logger.error(
                "Systempay IPN without order reference",
                extra={"raw_status": raw_status},
            )
            return WebhookOutcome(applied=False, status=status, signature=check.message)

        reference = order_id or partner_order_id
        async with self._transaction_manager.start():
            changed = await self._payment_repo.apply_status(
                provider=PaymentProvider.SYSTEMPAY.value,
                reference=reference,
                partner_order_id=partner_order_id or reference,
                status=status.value,
                updated_at=self._clock.now(),
            )

        bookings_updated = 0
        booking_status = BOOKING_STATUS_BY_PAYMENT.get(status)
        if booking_status:
            partner_ids = {row.partner_order_id for row in changed}
            if partner_order_id:
                partner_ids.add(partner_order_id)
            async with self._transaction_manager.start():
                for partner_id in sorted(partner_ids):
                    bookings_updated += await self._booking_repo.update_status(
                        partner_id, booking_status
                    )

        self._logger.info(
            "Systempay IPN reconciled",
            extra={
                "reference": reference,
                "partner_order_id": partner_order_id,
                "status": status.value,
                "payments_updated": len(changed),
                "bookings_updated": bookings_updated,
            },
        )
        return WebhookOutcome(
            applied=bool(changed),
            status=status,
            reference=reference,
            partner_order_id=partner_order_id,
            payments_updated=len(changed),
            bookings_updated=bookings_updated,
            signature=check.message,
        )
