"""Clasificación de los hashes de tarifa del proveedor hotelero."""

import re
from typing import Any

from app.domain.errors import InvalidHashError, ValidationError

MATCH_HASH_RE = re.compile(r"^m-", re.IGNORECASE)
HOTEL_HASH_RE = re.compile(r"^h-", re.IGNORECASE)
PREBOOK_HASH_RE = re.compile(r"^p-", re.IGNORECASE)


def normalize_hash(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def is_match_hash(value: str | None) -> bool:
    return bool(value) and MATCH_HASH_RE.match(value) is not None


def is_hotel_hash(value: str | None) -> bool:
    return bool(value) and HOTEL_HASH_RE.match(value) is not None


def is_prebook_hash(value: str | None) -> bool:
    return bool(value) and PREBOOK_HASH_RE.match(value) is not None


def ensure_bookable_hash(raw: Any) -> str:
    """Match hashes (m-...) identify a rate group and can never be prebooked."""
    normalized = normalize_hash(raw)
    if not normalized or is_match_hash(normalized):
        raise InvalidHashError(raw)
    return normalized


def ensure_prebook_hash(raw: Any) -> str:
    normalized = normalize_hash(raw)
    if not normalized or not is_prebook_hash(normalized):
        raise ValidationError("book_hash", "is required and must start with 'p-'")
    return normalized
