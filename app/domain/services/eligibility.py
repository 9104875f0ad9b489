"""
Matching of an installment-provider eligibility response.

The provider answers with a root eligibility id and a list of per product code /
per country entries, each of which may carry its own error. A request is eligible
only when one entry matches both the requested product code and country code, has
its agreement flag set and carries no error. Deal creation always uses the root id.
"""

from dataclasses import dataclass
from typing import Any

ENTRY_LIST_KEYS = ("productEligibilities", "eligibilities", "products")
AGREEMENT_KEYS = ("hasAgreement", "agreement", "isEligible")
ERROR_KEYS = ("error", "errors")


@dataclass(frozen=True)
class EligibilityMatch:
    eligibility_id: str
    entry: dict[str, Any]


def eligibility_entries(response: Any) -> list[dict[str, Any]]:
    if not isinstance(response, dict):
        return []
    for key in ENTRY_LIST_KEYS:
        entries = response.get(key)
        if isinstance(entries, list):
            return [entry for entry in entries if isinstance(entry, dict)]
    return []


def _has_agreement(entry: dict[str, Any]) -> bool:
    for key in AGREEMENT_KEYS:
        if key in entry:
            return entry[key] is True
    return False


def _has_error(entry: dict[str, Any]) -> bool:
    return any(entry.get(key) for key in ERROR_KEYS)


def _same_code(left: Any, right: str) -> bool:
    return isinstance(left, str) and left.strip().upper() == right.strip().upper()


def match_eligibility(
    response: Any, product_code: str, country_code: str
) -> EligibilityMatch | None:
    if not isinstance(response, dict):
        return None
    root_id = response.get("id")
    if not root_id:
        return None
    for entry in eligibility_entries(response):
        if not _same_code(entry.get("productCode"), product_code):
            continue
        if not _same_code(entry.get("countryCode"), country_code):
            continue
        if _has_agreement(entry) and not _has_error(entry):
            return EligibilityMatch(eligibility_id=str(root_id), entry=entry)
    return None
