"""
Extraction of the bookable token and a reusable summary from a prebook response.

The supplier is not consistent about where the prebook token lives. Known shapes,
tried in this order (first match wins):

1. the response itself is the token string
2. ``response["token"]``
3. ``response["prebook_token"]`` as a string
4. ``response["prebook_token"]["hotels"][*]["rates"][*]["book_hash"]`` starting with ``p-``
5. ``response["hotels"][*]["rates"][*]["book_hash"]`` starting with ``p-``
6. ``response["data"]["hotels"][*]["rates"][*]["book_hash"]`` starting with ``p-``
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable

from app.domain.services.hashes import is_prebook_hash


@dataclass(frozen=True)
class TokenFound:
    token: str
    source: str


@dataclass(frozen=True)
class TokenNotFound:
    tried: tuple[str, ...]


TokenLookup = TokenFound | TokenNotFound


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _first_prebook_rate_hash(hotels: Iterable[Any]) -> str | None:
    for hotel in hotels:
        if not isinstance(hotel, dict):
            continue
        for rate in _as_list(hotel.get("rates")):
            book_hash = rate.get("book_hash") if isinstance(rate, dict) else None
            if isinstance(book_hash, str) and is_prebook_hash(book_hash):
                return book_hash
    return None


def _from_plain_string(response: Any) -> str | None:
    return response if isinstance(response, str) and response else None


def _from_token_field(response: Any) -> str | None:
    if isinstance(response, dict) and isinstance(response.get("token"), str):
        return response["token"]
    return None


def _from_prebook_token_field(response: Any) -> str | None:
    if isinstance(response, dict) and isinstance(response.get("prebook_token"), str):
        return response["prebook_token"]
    return None


def _from_nested_prebook_token(response: Any) -> str | None:
    if not isinstance(response, dict) or not isinstance(response.get("prebook_token"), dict):
        return None
    return _first_prebook_rate_hash(_as_list(response["prebook_token"].get("hotels")))


def _from_hotels(response: Any) -> str | None:
    if not isinstance(response, dict):
        return None
    return _first_prebook_rate_hash(_as_list(response.get("hotels")))


def _from_data_hotels(response: Any) -> str | None:
    if not isinstance(response, dict) or not isinstance(response.get("data"), dict):
        return None
    return _first_prebook_rate_hash(_as_list(response["data"].get("hotels")))


TOKEN_SHAPES: tuple[tuple[str, Callable[[Any], str | None]], ...] = (
    ("plain_string", _from_plain_string),
    ("token", _from_token_field),
    ("prebook_token", _from_prebook_token_field),
    ("prebook_token.hotels.rates", _from_nested_prebook_token),
    ("hotels.rates", _from_hotels),
    ("data.hotels.rates", _from_data_hotels),
)


def extract_prebook_token(response: Any) -> TokenLookup:
    tried: list[str] = []
    for name, extractor in TOKEN_SHAPES:
        token = extractor(response)
        if token:
            return TokenFound(token=token, source=name)
        tried.append(name)
    return TokenNotFound(tried=tuple(tried))


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _first_text(*values: Any) -> str | None:
    for value in values:
        text = _text(value)
        if text:
            return text
    return None


def _response_hotels(response: Any) -> list:
    if not isinstance(response, dict):
        return []
    data = response.get("data")
    if isinstance(data, dict) and isinstance(data.get("hotels"), list):
        return data["hotels"]
    return _as_list(response.get("hotels"))


def _pick_hotel_and_rate(hotels: list, token: str | None) -> tuple[dict, dict]:
    for hotel in hotels:
        if not isinstance(hotel, dict):
            continue
        for rate in _as_list(hotel.get("rates")):
            if not isinstance(rate, dict) or not isinstance(rate.get("book_hash"), str):
                continue
            if not token or rate["book_hash"] == token:
                return hotel, rate
    if hotels and isinstance(hotels[0], dict):
        hotel = hotels[0]
        rates = [rate for rate in _as_list(hotel.get("rates")) if isinstance(rate, dict)]
        with_hash = [rate for rate in rates if isinstance(rate.get("book_hash"), str)]
        rate = with_hash[0] if with_hash else (rates[0] if rates else {})
        return hotel, rate
    return {}, {}


def build_prebook_summary(
    response: Any,
    token: str | None,
    hp_context: dict[str, Any] | None = None,
    request_meta: dict[str, Any] | None = None,
    created_at: datetime | None = None,
) -> dict[str, Any] | None:
    """Best-effort snapshot of hotel, stay and chosen room for later pages."""
    if not response:
        return None
    hp_context = hp_context or {}
    request_meta = request_meta or {}

    hotel, rate = _pick_hotel_and_rate(_response_hotels(response), token)
    payment_types = _as_list((rate.get("payment_options") or {}).get("payment_types"))
    payment = payment_types[0] if payment_types and isinstance(payment_types[0], dict) else {}
    legal_hotel = (rate.get("legal_info") or {}).get("hotel") or (hotel.get("legal_info") or {}).get(
        "hotel"
    ) or {}
    response_dict = response if isinstance(response, dict) else {}
    currency = payment.get("show_currency_code") or payment.get("currency_code")

    return {
        "token": token or rate.get("book_hash"),
        "created_at": created_at.isoformat() if created_at else None,
        "hotel": {
            "id": hotel.get("id"),
            "hid": hotel.get("hid"),
            "name": _first_text(
                hotel.get("name"),
                hotel.get("hotel_name"),
                hotel.get("hotel_name_trans"),
                legal_hotel.get("name"),
                request_meta.get("hotel_name"),
            ),
            "city": _first_text(
                hotel.get("city"),
                hotel.get("city_name"),
                legal_hotel.get("city"),
                hp_context.get("city"),
                hp_context.get("hp_city"),
            ),
            "address": _first_text(
                hotel.get("address"),
                hotel.get("address_full"),
                legal_hotel.get("address"),
                request_meta.get("hotel_address"),
            ),
            "country": _first_text(
                hotel.get("country"),
                hotel.get("country_name"),
                legal_hotel.get("country"),
            ),
        },
        "stay": {
            "checkin": hp_context.get("checkin") or response_dict.get("checkin"),
            "checkout": hp_context.get("checkout") or response_dict.get("checkout"),
            "guests": hp_context.get("guests"),
            "currency": hp_context.get("currency") or currency,
            "language": hp_context.get("language"),
        },
        "room": {
            "name": rate.get("room_name") or (rate.get("room_data_trans") or {}).get("main_name"),
            "meal": rate.get("meal"),
            "price": payment.get("show_amount") or payment.get("amount"),
            "currency": currency,
            "daily_prices": rate.get("daily_prices"),
            "match_hash": rate.get("match_hash"),
        },
    }
