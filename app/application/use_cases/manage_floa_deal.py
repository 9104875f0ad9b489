import logging
from typing import Any

from app.application.interfaces.floa_gateway import FloaGateway
from app.domain.errors import MissingDealReferenceError, NotEligibleError, ValidationError
from app.domain.services.amount import parse_positive_amount
from app.domain.services.eligibility import match_eligibility
from app.domain.value_objects.money import Money

DEFAULT_SESSION_MODES = ["WebPage"]
# Root fields consumed here and never forwarded in the deal body.
DEAL_CONTROL_FIELDS = ("productCode", "implementationType", "customer", "customers", "shippingAddress")


def build_finalize_body(
    payload: dict[str, Any] | None, default_notification_url: str | None = None
) -> dict[str, Any]:
    """
    Provider finalize body from a caller payload.

    Root-level shortcuts (``culture``, ``sessionModes``, ``backUrl``, ``returnUrl``,
    ``notificationUrl`` or the legacy ``notificationURL``) are merged into
    ``configuration`` without overriding values already set there. PSP shortcuts
    (``threatPreventionSessionId``, ``pachirapayPaymentRequestId``) end up in
    ``pspDetails``. Any other root field is dropped.
    """
    payload = payload or {}
    body: dict[str, Any] = {}

    if payload.get("merchantReference"):
        body["merchantReference"] = payload["merchantReference"]
    if payload.get("merchantFinancedAmount") is not None:
        body["merchantFinancedAmount"] = payload["merchantFinancedAmount"]
    if payload.get("freeText"):
        body["freeText"] = payload["freeText"]
    if isinstance(payload.get("amountDetails"), dict):
        body["amountDetails"] = payload["amountDetails"]

    configuration = payload.get("configuration")
    configuration = dict(configuration) if isinstance(configuration, dict) else {}
    configuration["sessionModes"] = (
        configuration.get("sessionModes")
        or payload.get("sessionModes")
        or list(DEFAULT_SESSION_MODES)
    )
    shortcuts = {
        "culture": payload.get("culture"),
        "notificationUrl": payload.get("notificationUrl")
        or payload.get("notificationURL")
        or default_notification_url,
        "backUrl": payload.get("backUrl"),
        "returnUrl": payload.get("returnUrl"),
    }
    for key, value in shortcuts.items():
        if value and not configuration.get(key):
            configuration[key] = value
    body["configuration"] = configuration

    psp = payload.get("pspDetails")
    psp = dict(psp) if isinstance(psp, dict) else {}
    threat_id = payload.get("threatPreventionSessionId")
    if threat_id and not psp.get("threatPreventionSessionId"):
        psp["threatPreventionSessionId"] = threat_id
    pachirapay_id = payload.get("pachirapayPaymentRequestId")
    if pachirapay_id:
        pachirapay = dict(psp.get("pachirapay") or {})
        pachirapay.setdefault("paymentRequestId", pachirapay_id)
        psp["pachirapay"] = pachirapay
    if psp:
        body["pspDetails"] = psp
    return body


def _to_cents(value: Any, field: str, currency_code: str) -> int:
    amount = parse_positive_amount(value)
    if amount is None:
        raise ValidationError(field, "must be a positive number")
    return Money(amount, currency_code).to_cents()


def _require_reference(deal_reference: str | None, operation: str) -> str:
    reference = (deal_reference or "").strip()
    if not reference:
        raise MissingDealReferenceError(operation)
    return reference


class ManageFloaDealUseCase:
    """Pass-through lifecycle operations on an existing installment deal."""

    def __init__(
        self,
        floa_gateway: FloaGateway,
        notification_url: str | None = None,
        default_currency: str = "EUR",
        default_country_code: str = "FR",
    ) -> None:
        self._floa_gateway = floa_gateway
        self._notification_url = notification_url
        self._default_currency = default_currency
        self._default_country_code = default_country_code
        self._logger = logging.getLogger(__name__)

    async def simulate(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Simulated installment plans; amounts arrive in major units."""
        currency = payload.get("currency") or self._default_currency
        amount = payload.get("amount")
        if amount is None:
            raise ValidationError("amount", "is required")
        financed = payload.get("merchantFinancedAmount")
        params: dict[str, Any] = {
            "amount": _to_cents(amount, "amount", currency),
            "merchantFinancedAmount": _to_cents(
                financed if financed is not None else amount, "merchantFinancedAmount", currency
            ),
            "currency": currency,
            "country_code": payload.get("country_code") or self._default_country_code,
        }
        products = payload.get("products")
        if isinstance(products, list) and products:
            params["products"] = products
        return await self._floa_gateway.simulate_plan(params)

    async def finalize(
        self, deal_reference: str | None, payload: dict[str, Any] | None
    ) -> dict[str, Any]:
        reference = _require_reference(deal_reference, "finalize")
        body = build_finalize_body(payload, self._notification_url)
        result = await self._floa_gateway.finalize_deal(reference, body)
        self._logger.info("Floa deal finalized", extra={"reference": reference})
        return result

    async def retrieve(self, deal_reference: str | None) -> dict[str, Any]:
        reference = _require_reference(deal_reference, "retrieve")
        return await self._floa_gateway.retrieve_deal(reference)

    async def cancel(
        self, deal_reference: str | None, payload: dict[str, Any] | None
    ) -> dict[str, Any]:
        reference = _require_reference(deal_reference, "cancel")
        result = await self._floa_gateway.cancel_deal(reference, payload or {})
        self._logger.info("Floa deal cancelled", extra={"reference": reference})
        return result

    async def create_deal(self, payload: dict[str, Any] | None) -> dict[str, Any]:
        """
        Deal from caller-supplied items: eligibility first, then the deal itself.

        ``merchantFinancedAmount`` and item prices arrive in cents. Nothing is persisted:
        there is no partner order behind a generic deal.
        """
        payload = payload or {}
        customer = payload.get("customer")
        customers = payload.get("customers")
        if not customer and isinstance(customers, list) and customers:
            customer = customers[0]
        if not isinstance(customer, dict):
            raise ValidationError("customer", "is required")
        items = payload.get("items")
        if not isinstance(items, list) or not items:
            raise ValidationError("items", "must be a non-empty array")
        product_code = payload.get("productCode")
        if not product_code:
            raise ValidationError("productCode", "is required")
        financed = payload.get("merchantFinancedAmount")
        if parse_positive_amount(financed) is None:
            raise ValidationError("merchantFinancedAmount", "must be a positive number")

        item_count = payload.get("itemCount")
        if isinstance(item_count, bool) or not isinstance(item_count, int):
            item_count = len(items)
        shipping = payload.get("shippingAddress")
        country_code = (
            (shipping.get("countryCode") if isinstance(shipping, dict) else None)
            or self._default_country_code
        ).upper()

        eligibility = await self._floa_gateway.check_product_eligibility(
            {
                "customers": [customer],
                "merchantFinancedAmount": financed,
                "itemCount": item_count,
                "items": items,
                "device": payload.get("device") or "Desktop",
                "country_code": country_code,
                "currency": payload.get("currency") or self._default_currency,
            }
        )
        match = match_eligibility(eligibility, product_code, country_code)
        if match is None:
            self._logger.info(
                "Floa eligibility rejected", extra={"product_code": product_code}
            )
            raise NotEligibleError(eligibility, product_code, country_code)

        body = {key: value for key, value in payload.items() if key not in DEAL_CONTROL_FIELDS}
        body.update(
            customers=[customer],
            itemCount=item_count,
            productEligibilityId=match.eligibility_id,
        )
        deal = await self._floa_gateway.create_deal(
            product_code, body, implementation_type=payload.get("implementationType")
        )
        self._logger.info(
            "Floa deal created",
            extra={"product_code": product_code, "merchant_reference": body.get("merchantReference")},
        )
        return deal
