import logging
from typing import Any

import httpx

from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.domain.errors import UpstreamError
from app.infrastructure.circuit_breaker import etg_breaker, guarded

logger = logging.getLogger(__name__)

DEFAULT_ETG_BASE_URL = "https://api.worldota.net/api/b2b/v3"


class ETGGatewayHTTP(HotelSupplierGateway):
    def __init__(
        self,
        partner_id: str,
        api_key: str,
        base_url: str = DEFAULT_ETG_BASE_URL,
        timeout_seconds: float = 12.0,
        user_agent: str = "hotel-booking-api/1.0",
    ) -> None:
        """
        HTTP gateway for the ETG (RateHawk) B2B API v3.

        Args:
            partner_id: Key id used as the Basic auth username
            api_key: API key used as the Basic auth password
            base_url: Base URL of the B2B API
            timeout_seconds: Request timeout in seconds
        """
        self._base_url = (base_url or DEFAULT_ETG_BASE_URL).rstrip("/")
        self._auth = httpx.BasicAuth(partner_id, api_key)
        self._timeout = timeout_seconds
        self._headers = {"Accept": "application/json", "User-Agent": user_agent}

    async def prebook(self, rate_hash: str, price_increase_percent: float = 0) -> Any:
        payload = {"hash": rate_hash, "price_increase_percent": price_increase_percent}
        return await self._post("/hotel/prebook/", payload)

    async def fetch_hotel_page(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._post("/search/hp/", body)

    async def request_booking_form(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._post("/hotel/order/booking/form/", payload)

    async def finish_booking(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._post("/hotel/order/booking/finish/", payload)

    async def finish_status(self, partner_order_id: str) -> dict[str, Any]:
        return await self._post(
            "/hotel/order/booking/finish/status/", {"partner_order_id": partner_order_id}
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        """
        POST to the supplier and unwrap its ``{status, data, error, debug}`` envelope.

        Raises:
            UpstreamError: non-2xx answer, ``status == "error"``, timeout or transport
                failure. The supplier's error string becomes the reason.
        """
        url = f"{self._base_url}{path}"
        try:
            async with guarded(etg_breaker, "etg"):
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(
                        url, json=payload, auth=self._auth, headers=self._headers
                    )
        except httpx.TimeoutException as exc:
            logger.warning("ETG request timeout", extra={"path": path, "timeout": self._timeout})
            raise UpstreamError(
                provider="etg", reason="etg_timeout", http_status=504, debug={"path": path}
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("ETG HTTP error", exc_info=exc, extra={"path": path})
            raise UpstreamError(
                provider="etg", reason="etg_unreachable", http_status=502, debug={"path": path}
            ) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        request_id = response.headers.get("request-id")
        failed = not (200 <= response.status_code < 300)
        if isinstance(body, dict) and body.get("status") == "error":
            failed = True
        if failed:
            reason = body.get("error") if isinstance(body, dict) else None
            debug = body.get("debug") if isinstance(body, dict) else None
            logger.warning(
                "ETG call failed",
                extra={
                    "path": path,
                    "http_status": response.status_code,
                    "error": reason,
                    "request_id": request_id,
                },
            )
            status_code = response.status_code if response.status_code >= 400 else 400
            raise UpstreamError(
                provider="etg",
                reason=reason or f"etg_http_{response.status_code}",
                http_status=status_code,
                debug=debug if reason else (body or response.text),
                request_id=request_id,
            )

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body
