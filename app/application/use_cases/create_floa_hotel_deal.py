import logging
from dataclasses import dataclass
from typing import Any

from app.application.interfaces.booking_form_repo import BookingFormRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.floa_gateway import FloaGateway
from app.application.interfaces.payment_repo import PaymentRecord, PaymentRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.payment import PaymentProvider, PaymentStatus
from app.domain.errors import (
    InvalidAmountError,
    MissingBookingFormError,
    NotEligibleError,
    PersistenceError,
    UpstreamError,
    ValidationError,
)
from app.domain.services.amount import derive_amount
from app.domain.services.eligibility import match_eligibility
from app.domain.services.insurance import InsuranceSummary, build_insurance_summary
from app.domain.services.references import mint_merchant_reference
from app.domain.value_objects.money import Money

HOTEL_ITEM_CATEGORY = "Travel"
INSURANCE_ITEM_CATEGORY = "Insurance"
DEAL_REFERENCE_KEYS = ("dealReference", "reference", "id")


@dataclass
class HotelDealResult:
    deal_reference: str
    merchant_reference: str
    eligibility_id: str
    amount: Money
    amount_source: str
    deal: dict[str, Any]
    insurance: InsuranceSummary


def extract_deal_reference(deal: Any) -> str | None:
    if not isinstance(deal, dict):
        return None
    for key in DEAL_REFERENCE_KEYS:
        value = deal.get(key)
        if value:
            return str(value)
    return None


def build_deal_items(
    partner_order_id: str,
    hotel_amount: Money,
    insurance: InsuranceSummary,
    hotel_label: str | None = None,
) -> list[dict[str, Any]]:
    """One line for the stay, one per ancillary product; prices in cents."""
    items = [
        {
            "reference": partner_order_id,
            "name": hotel_label or "Hotel stay",
            "category": HOTEL_ITEM_CATEGORY,
            "quantity": 1,
            "unitPrice": hotel_amount.to_cents(),
            "totalAmount": hotel_amount.to_cents(),
        }
    ]
    for product in insurance.items:
        cents = Money(product.price, hotel_amount.currency_code).to_cents()
        items.append(
            {
                "reference": product.id,
                "name": product.title,
                "category": INSURANCE_ITEM_CATEGORY,
                "quantity": 1,
                "unitPrice": cents,
                "totalAmount": cents,
            }
        )
    return items


class CreateFloaHotelDealUseCase:
    def __init__(
        self,
        floa_gateway: FloaGateway,
        booking_form_repo: BookingFormRepo,
        payment_repo: PaymentRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        default_country_code: str = "FR",
        default_currency: str = "EUR",
    ) -> None:
        self._floa_gateway = floa_gateway
        self._booking_form_repo = booking_form_repo
        self._payment_repo = payment_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._default_country_code = default_country_code
        self._default_currency = default_currency
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        partner_order_id: str | None,
        product_code: str | None,
        customer: dict[str, Any] | None,
        insurance: Any = None,
        device: str | None = None,
        country_code: str | None = None,
        implementation_type: str | None = None,
    ) -> HotelDealResult:
        if not partner_order_id:
            raise ValidationError("partner_order_id", "is required")
        if not product_code:
            raise ValidationError("product_code", "is required")
        if not isinstance(customer, dict) or not customer.get("civility"):
            raise ValidationError("customer.civility", "is required")
        country_code = (country_code or self._default_country_code).upper()

        async with self._transaction_manager.start():
            booking_form = await self._booking_form_repo.get_latest(partner_order_id)
        if booking_form is None:
            raise MissingBookingFormError(partner_order_id)

        derivation = derive_amount(
            booking_form.form, booking_form.amount, booking_form.currency_code
        )
        if derivation.money is None:
            raise InvalidAmountError(partner_order_id, derivation.candidates)
        hotel_amount = derivation.money

        insurance_summary = build_insurance_summary(insurance)
        total = hotel_amount + Money(insurance_summary.total, hotel_amount.currency_code)
        items = build_deal_items(partner_order_id, hotel_amount, insurance_summary)
        merchant_reference = mint_merchant_reference(partner_order_id, self._clock.now())

        eligibility_payload = {
            "customers": [customer],
            "merchantFinancedAmount": total.to_cents(),
            "itemCount": len(items),
            "items": items,
            "device": device or "Desktop",
            "country_code": country_code,
            "currency": self._default_currency,
        }
        eligibility = await self._floa_gateway.check_product_eligibility(eligibility_payload)
        match = match_eligibility(eligibility, product_code, country_code)
        if match is None:
            self._logger.info(
                "Floa eligibility rejected",
                extra={"partner_order_id": partner_order_id, "product_code": product_code},
            )
            raise NotEligibleError(eligibility, product_code, country_code)

        deal_body = {
            "merchantReference": merchant_reference,
            "merchantFinancedAmount": total.to_cents(),
            "productEligibilityId": match.eligibility_id,
            "customers": [customer],
            "itemCount": len(items),
            "items": items,
        }
        deal = await self._floa_gateway.create_deal(
            product_code, deal_body, implementation_type=implementation_type
        )
        deal_reference = extract_deal_reference(deal)
        if not deal_reference:
            raise UpstreamError(
                provider="floa",
                reason="FLOA_DEAL_REFERENCE_MISSING",
                http_status=502,
                debug=deal,
            )

        now = self._clock.now()
        payment = PaymentRecord(
            provider=PaymentProvider.FLOA.value,
            status=PaymentStatus.PENDING.value,
            partner_order_id=partner_order_id,
            amount=total.amount,
            currency_code=total.currency_code,
            created_at=now,
            updated_at=now,
            prebook_token=booking_form.prebook_token,
            supplier_order_id=booking_form.supplier_order_id,
            item_id=booking_form.item_id,
            external_reference=deal_reference,
            payload={"merchant_reference": merchant_reference, "deal": deal},
        )
        try:
            async with self._transaction_manager.start():
                await self._payment_repo.create_pending(payment)
        except PersistenceError as exc:
            self._logger.warning(
                "Floa payment persistence failed",
                exc_info=exc,
                extra={"partner_order_id": partner_order_id, "reference": deal_reference},
            )

        self._logger.info(
            "Floa deal created",
            extra={
                "partner_order_id": partner_order_id,
                "reference": deal_reference,
                "amount_source": derivation.source,
            },
        )
        return HotelDealResult(
            deal_reference=deal_reference,
            merchant_reference=merchant_reference,
            eligibility_id=match.eligibility_id,
            amount=total,
            amount_source=derivation.source,
            deal=deal,
            insurance=insurance_summary,
        )
