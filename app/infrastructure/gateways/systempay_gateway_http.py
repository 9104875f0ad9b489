import logging
from typing import Any

import httpx

from app.application.interfaces.systempay_gateway import SystempayGateway
from app.domain.errors import UpstreamError
from app.infrastructure.circuit_breaker import guarded, systempay_breaker

logger = logging.getLogger(__name__)

DEFAULT_CREATE_PAYMENT_URL = "https://api.systempay.fr/api-payment/V4/Charge/CreatePayment"


class SystempayGatewayHTTP(SystempayGateway):
    """Systempay REST API (embedded form); answers carry ``status`` and ``answer``."""

    def __init__(
        self,
        username: str,
        password: str,
        public_key: str | None = None,
        create_payment_url: str = DEFAULT_CREATE_PAYMENT_URL,
        timeout_seconds: float = 15.0,
    ) -> None:
        self._auth = httpx.BasicAuth(username, password)
        self.public_key = public_key
        self._create_payment_url = create_payment_url or DEFAULT_CREATE_PAYMENT_URL
        self._timeout = timeout_seconds

    async def create_payment(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with guarded(systempay_breaker, "systempay"):
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(
                        self._create_payment_url, json=payload, auth=self._auth
                    )
        except httpx.HTTPError as exc:
            logger.error("Systempay HTTP error", exc_info=exc)
            raise UpstreamError(
                provider="systempay",
                reason="systempay_unreachable",
                http_status=502,
                debug=str(exc),
            ) from exc

        try:
            body = response.json()
        except ValueError:
            body = None
        if response.status_code >= 400 or not isinstance(body, dict):
            logger.warning(
                "Systempay CreatePayment failed",
                extra={"http_status": response.status_code, "order_id": payload.get("orderId")},
            )
            raise UpstreamError(
                provider="systempay",
                reason="systempay_create_payment_failed",
                http_status=502,
                debug=body if body is not None else response.text,
            )
        return body
