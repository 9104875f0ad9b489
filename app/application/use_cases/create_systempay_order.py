import logging
from dataclasses import dataclass
from typing import Any

from app.application.interfaces.booking_form_repo import BookingFormRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_repo import PaymentRecord, PaymentRepo
from app.application.interfaces.systempay_gateway import SystempayGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.payment import PaymentProvider, PaymentStatus
from app.domain.errors import (
    InvalidAmountError,
    MissingBookingFormError,
    PersistenceError,
    UpstreamError,
    ValidationError,
)
from app.domain.services.amount import derive_amount
from app.domain.services.references import mint_merchant_reference
from app.domain.value_objects.money import Money


@dataclass
class SystempayOrderResult:
    form_token: str
    public_key: str | None
    order_id: str
    amount: Money


class CreateSystempayOrderUseCase:
    """
    Creates a card-payment order for a bound booking form.

    The amount always comes from the persisted booking form, never from the caller.
    The payment result arrives later through the IPN webhook.
    """

    def __init__(
        self,
        systempay_gateway: SystempayGateway,
        booking_form_repo: BookingFormRepo,
        payment_repo: PaymentRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        ipn_url: str | None = None,
    ) -> None:
        self._systempay_gateway = systempay_gateway
        self._booking_form_repo = booking_form_repo
        self._payment_repo = payment_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._ipn_url = ipn_url
        self._logger = logging.getLogger(__name__)

    async def execute(
        self, partner_order_id: str | None, customer_email: str | None = None
    ) -> SystempayOrderResult:
        if not partner_order_id:
            raise ValidationError("partner_order_id", "is required")

        async with self._transaction_manager.start():
            booking_form = await self._booking_form_repo.get_latest(partner_order_id)
        if booking_form is None:
            raise MissingBookingFormError(partner_order_id)

        derivation = derive_amount(
            booking_form.form, booking_form.amount, booking_form.currency_code
        )
        if derivation.money is None:
            raise InvalidAmountError(partner_order_id, derivation.candidates)
        amount = derivation.money

        order_id = mint_merchant_reference(partner_order_id, self._clock.now())
        payload: dict[str, Any] = {
            "amount": amount.to_cents(),
            "currency": amount.currency_code,
            "orderId": order_id,
            "customer": {"email": customer_email} if customer_email else {},
            "metadata": {"partner_order_id": partner_order_id},
        }
        if self._ipn_url:
            payload["ipnTargetUrl"] = self._ipn_url

        response = await self._systempay_gateway.create_payment(payload)
        response = response if isinstance(response, dict) else {}
        answer = response.get("answer")
        form_token = answer.get("formToken") if isinstance(answer, dict) else None
        if response.get("status") != "SUCCESS" or not form_token:
            raise UpstreamError(
                provider="systempay",
                reason="systempay_create_payment_failed",
                http_status=502,
                debug=response,
            )

        now = self._clock.now()
        payment = PaymentRecord(
            provider=PaymentProvider.SYSTEMPAY.value,
            status=PaymentStatus.PENDING.value,
            partner_order_id=partner_order_id,
            amount=amount.amount,
            currency_code=amount.currency_code,
            created_at=now,
            updated_at=now,
            prebook_token=booking_form.prebook_token,
            supplier_order_id=booking_form.supplier_order_id,
            item_id=booking_form.item_id,
            external_reference=order_id,
            payload={"request": payload, "amount_source": derivation.source},
        )
        try:
            async with self._transaction_manager.start():
                await self._payment_repo.create_pending(payment)
        except PersistenceError as exc:
            self._logger.warning(
                "Systempay payment persistence failed",
                exc_info=exc,
                extra={"partner_order_id": partner_order_id, "reference": order_id},
            )

        self._logger.info(
            "Systempay order created",
            extra={"partner_order_id": partner_order_id, "reference": order_id},
        )
        return SystempayOrderResult(
            form_token=form_token,
            public_key=self._systempay_gateway.public_key,
            order_id=order_id,
            amount=amount,
        )
