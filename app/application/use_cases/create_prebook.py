import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from app.application.interfaces.clock import Clock
from app.application.interfaces.prebook_repo import PrebookRecord, PrebookRepo
from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.constants import DEFAULT_CURRENCY, PREBOOK_TTL_SECONDS_DEFAULT
from app.domain.errors import NoFreshRatesError, PersistenceError, UpstreamError, ValidationError
from app.domain.services.hashes import ensure_bookable_hash, is_hotel_hash
from app.domain.services.prebook_parsing import (
    TokenNotFound,
    build_prebook_summary,
    extract_prebook_token,
)
from app.domain.services.rate_selection import select_replacement_rate

STALE_RATE_ERROR = "no_available_rates"
SUPPORTED_LANGUAGES = {"ar", "bg", "cs", "da", "de", "el", "en", "es", "fi", "fr", "he", "hu",
                       "it", "ja", "kk", "ko", "nl", "no", "pl", "pt", "pt_PT", "ro", "ru",
                       "sq", "sr", "sv", "th", "tr", "uk", "vi", "zh_CN"}


@dataclass
class PrebookResult:
    token: str
    response: Any
    summary: dict[str, Any] | None
    refreshed: bool = False
    picked: dict[str, Any] | None = None


def build_hotel_page_request(context: dict[str, Any]) -> dict[str, Any]:
    """Hotel-page search body from the refresh context sent along with a prebook."""
    hotel_id = context.get("id") or context.get("hid")
    if not hotel_id:
        raise ValidationError("hp_context.id", "id (hid) is required")
    if not context.get("checkin") or not context.get("checkout"):
        raise ValidationError("hp_context", "checkin/checkout required")
    guests = context.get("guests")
    if not isinstance(guests, list) or not guests:
        raise ValidationError("hp_context.guests", "guests is required (e.g., [{ adults: 2 }])")

    body = dict(context)
    body["id"] = hotel_id
    language = str(body.get("language") or "en").strip()
    body["language"] = language if language in SUPPORTED_LANGUAGES else "en"
    body["currency"] = str(body.get("currency") or DEFAULT_CURRENCY).strip() or DEFAULT_CURRENCY
    if body.get("residency"):
        body["residency"] = str(body["residency"]).lower()
    return body


def is_stale_rate_error(error: UpstreamError) -> bool:
    return error.reason == STALE_RATE_ERROR or error.debug_error == STALE_RATE_ERROR


class CreatePrebookUseCase:
    def __init__(
        self,
        supplier_gateway: HotelSupplierGateway,
        prebook_repo: PrebookRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        prebook_ttl_seconds: int = PREBOOK_TTL_SECONDS_DEFAULT,
    ) -> None:
        self._supplier_gateway = supplier_gateway
        self._prebook_repo = prebook_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._prebook_ttl = timedelta(seconds=prebook_ttl_seconds)
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        rate_hash: Any,
        price_increase_percent: float = 0,
        refresh_context: dict[str, Any] | None = None,
        meal: str | None = None,
        room_name: str | None = None,
    ) -> PrebookResult:
        normalized = ensure_bookable_hash(rate_hash)
        request_meta = {"meal": meal, "room_name": room_name}
        try:
            return await self._prebook(
                normalized, price_increase_percent, refresh_context, request_meta
            )
        except UpstreamError as exc:
            if not self._should_refresh(exc, normalized, refresh_context):
                raise
            self._logger.info(
                "Prebook rate is stale, refreshing hotel page",
                extra={"hash": normalized, "hotel_id": refresh_context.get("id")},
            )
        return await self._refresh(
            refresh_context, price_increase_percent, meal=meal, room_name=room_name
        )

    def _should_refresh(
        self, error: UpstreamError, rate_hash: str, refresh_context: dict[str, Any] | None
    ) -> bool:
        # Search-result hashes (sr-) cannot be re-resolved from a hotel page.
        if not refresh_context:
            return False
        return is_stale_rate_error(error) and is_hotel_hash(rate_hash)

    async def _refresh(
        self,
        refresh_context: dict[str, Any],
        price_increase_percent: float,
        meal: str | None,
        room_name: str | None,
    ) -> PrebookResult:
        body = build_hotel_page_request(refresh_context)
        page = await self._supplier_gateway.fetch_hotel_page(body)
        hotels = page.get("hotels") if isinstance(page, dict) else None
        first_hotel = hotels[0] if isinstance(hotels, list) and hotels else {}
        rates = first_hotel.get("rates") if isinstance(first_hotel, dict) else None
        candidate = select_replacement_rate(rates if isinstance(rates, list) else [], meal, room_name)
        if candidate is None:
            raise NoFreshRatesError(
                "no fresh rates available after refresh", debug={"hotel_id": body["id"]}
            )

        replacement_hash = candidate.get("hash") or candidate.get("book_hash")
        if not isinstance(replacement_hash, str) or not is_hotel_hash(replacement_hash):
            raise NoFreshRatesError(
                "no valid h- hash in refreshed rates",
                debug={"hotel_id": body["id"], "picked": replacement_hash},
            )

        result = await self._prebook(
            replacement_hash,
            price_increase_percent,
            refresh_context,
            {"meal": meal, "room_name": room_name},
        )
        result.refreshed = True
        result.picked = {
            "meal": candidate.get("meal"),
            "room_name": candidate.get("room_name"),
            "hash": replacement_hash,
        }
        return result

    async def _prebook(
        self,
        rate_hash: str,
        price_increase_percent: float,
        refresh_context: dict[str, Any] | None,
        request_meta: dict[str, Any],
    ) -> PrebookResult:
        response = await self._supplier_gateway.prebook(rate_hash, price_increase_percent)
        lookup = extract_prebook_token(response)
        if isinstance(lookup, TokenNotFound):
            raise UpstreamError(
                provider="etg",
                reason="prebook_failed",
                http_status=400,
                debug={"hash": rate_hash, "tried": list(lookup.tried), "response": response},
            )

        now = self._clock.now()
        summary = build_prebook_summary(
            response, lookup.token, refresh_context, request_meta, created_at=now
        )
        await self._save_best_effort(
            PrebookRecord(
                offer_hash=rate_hash,
                token=lookup.token,
                created_at=now,
                expires_at=now + self._prebook_ttl,
                request_id=response.get("request_id") if isinstance(response, dict) else None,
                summary=summary,
                raw_supplier_response=response,
            )
        )
        self._logger.info(
            "Prebook created",
            extra={"hash": rate_hash, "token_source": lookup.source},
        )
        return PrebookResult(token=lookup.token, response=response, summary=summary)

    async def _save_best_effort(self, record: PrebookRecord) -> None:
        try:
            async with self._transaction_manager.start():
                await self._prebook_repo.save(record)
        except PersistenceError as exc:
            self._logger.warning(
                "Prebook persistence failed",
                exc_info=exc,
                extra={"hash": record.offer_hash},
            )
