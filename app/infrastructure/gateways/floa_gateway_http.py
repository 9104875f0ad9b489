import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.application.interfaces.floa_gateway import FloaGateway
from app.domain.errors import UpstreamError
from app.infrastructure.circuit_breaker import floa_breaker, guarded
from app.infrastructure.gateways.token_cache import AccessToken, TokenCache

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_SECONDS = 3600


class FloaGatewayHTTP(FloaGateway):
    """
    Floa Pay REST client.

    OAuth2 client-credentials tokens are kept in a ``TokenCache`` owned by this
    instance; the application holds a single instance per process.
    """

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        timeout_seconds: float = 15.0,
        token_timeout_seconds: float = 5.0,
        token_retry_attempts: int = 3,
        token_retry_base_ms: int = 500,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout_seconds
        self._token_timeout = token_timeout_seconds
        self._token_retry_attempts = max(1, token_retry_attempts)
        self._token_retry_base = token_retry_base_ms / 1000
        self.token_cache = TokenCache(self._request_access_token)

    def _ensure_credentials(self) -> None:
        if not self._base_url or not self._client_id or not self._client_secret:
            raise UpstreamError(
                provider="floa",
                reason="FLOA_CREDENTIALS_MISSING",
                http_status=500,
                debug="Missing FLOA_BASE_URL, FLOA_CLIENT_ID, or FLOA_CLIENT_SECRET",
            )

    async def _request_access_token(self) -> AccessToken:
        self._ensure_credentials()
        url = f"{self._base_url}/oauth/token"
        last_status = 500
        last_debug: Any = None

        for attempt in range(1, self._token_retry_attempts + 1):
            try:
                async with httpx.AsyncClient(timeout=self._token_timeout) as client:
                    response = await client.post(
                        url,
                        data={"grant_type": "client_credentials"},
                        auth=httpx.BasicAuth(self._client_id, self._client_secret),
                    )
                if response.status_code >= 400:
                    last_status = response.status_code
                    last_debug = _safe_json(response)
                else:
                    body = _safe_json(response) or {}
                    token = body.get("access_token") if isinstance(body, dict) else None
                    if token:
                        expires_in = _as_seconds(body.get("expires_in"))
                        return AccessToken(value=token, expires_in=expires_in)
                    last_status, last_debug = 500, "Missing access_token field"
            except httpx.HTTPError as exc:
                last_status, last_debug = 500, str(exc)

            if attempt < self._token_retry_attempts:
                delay = self._token_retry_base * (2 ** (attempt - 1))
                logger.warning(
                    "Floa token request failed, retrying",
                    extra={"attempt": attempt, "retry_delay": delay, "http_status": last_status},
                )
                await asyncio.sleep(delay)

        logger.error(
            "Floa token request failed after retries",
            extra={"attempts": self._token_retry_attempts, "http_status": last_status},
        )
        raise UpstreamError(
            provider="floa", reason="FLOA_AUTH_FAILED", http_status=last_status, debug=last_debug
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        self._ensure_credentials()
        token = await self.token_cache.get()
        request_headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        request_headers.update(headers or {})

        try:
            async with guarded(floa_breaker, "floa"):
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(
                        method,
                        f"{self._base_url}{endpoint}",
                        json=body,
                        params=params,
                        headers=request_headers,
                    )
        except httpx.HTTPError as exc:
            logger.error("Floa HTTP error", exc_info=exc, extra={"endpoint": endpoint})
            raise UpstreamError(
                provider="floa", reason="FLOA_API_ERROR", http_status=500, debug=str(exc)
            ) from exc

        data = _safe_json(response)
        if response.status_code >= 400:
            if response.status_code == 401:
                self.token_cache.invalidate()
            logger.warning(
                "Floa call failed",
                extra={"endpoint": endpoint, "http_status": response.status_code},
            )
            raise UpstreamError(
                provider="floa",
                reason="FLOA_API_ERROR",
                http_status=response.status_code,
                debug=data if data is not None else response.text,
            )
        return data if isinstance(data, dict) else {"data": data}

    async def simulate_plan(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self._request("GET", "/api/v1/simulated-installment-plans", params=params)

    async def check_product_eligibility(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/api/v1/product-eligibilities", body=payload)

    async def create_deal(
        self,
        product_code: str,
        body: dict[str, Any],
        implementation_type: str | None = None,
    ) -> dict[str, Any]:
        headers = {"Implementation-type": implementation_type} if implementation_type else None
        return await self._request(
            "POST",
            "/api/v1/deals",
            body=body,
            params={"productCode": product_code},
            headers=headers,
        )

    async def finalize_deal(self, deal_reference: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "POST", f"/api/v1/deals/{quote(deal_reference, safe='')}/finalize", body=body
        )

    async def retrieve_deal(self, deal_reference: str) -> dict[str, Any]:
        return await self._request(
            "GET", f"/api/v1/deals/{quote(deal_reference, safe='')}/installment-plan"
        )

    async def cancel_deal(self, deal_reference: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "POST", f"/api/v1/deals/{quote(deal_reference, safe='')}/cancel", body=body
        )


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _as_seconds(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return DEFAULT_TOKEN_TTL_SECONDS
    return seconds if seconds > 0 else DEFAULT_TOKEN_TTL_SECONDS
