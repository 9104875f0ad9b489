"""
Chargeable amount derivation from a persisted booking form.

Strategies run in a fixed order and the first one returning an amount wins:

1. ``payment_type_amount``: ``form["payment_types"][0]["amount"]``
2. ``record_amount``: the amount column stored with the booking form row
3. ``form_total_amount``: ``form["total_amount"]``
4. ``form_order_amount``: ``form["order_amount"]``

Strategies 3 and 4 do not accept bare integers above 100: suppliers report those fields
in minor units as often as in major units. When no strategy yields an amount, the first
integer-like candidate greater than 100 is reinterpreted as cents. Smaller integers are
taken at face value.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable

from app.domain.constants import DEFAULT_CURRENCY
from app.domain.value_objects.money import Money

MINOR_UNITS_THRESHOLD = 100
# Largest value the Numeric(12, 2) amount columns can hold.
MAX_AMOUNT = Decimal("9999999999.99")


@dataclass(frozen=True)
class AmountStrategy:
    name: str
    extract: Callable[[dict[str, Any], Any], Any]
    integers_are_ambiguous: bool = False

    def apply(self, form: dict[str, Any], record_amount: Any) -> Decimal | None:
        raw = self.extract(form, record_amount)
        if self.integers_are_ambiguous and is_minor_units_candidate(raw):
            return None
        return parse_positive_amount(raw)


@dataclass(frozen=True)
class AmountDerivation:
    money: Money | None
    source: str | None
    candidates: list[tuple[str, Any]]


def first_payment_type(form: dict[str, Any]) -> dict[str, Any]:
    payment_types = form.get("payment_types") if isinstance(form, dict) else None
    if isinstance(payment_types, list) and payment_types and isinstance(payment_types[0], dict):
        return payment_types[0]
    return {}


def parse_positive_amount(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        parsed = Decimal(str(value).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        return None
    if not parsed.is_finite() or parsed <= 0 or parsed > MAX_AMOUNT:
        return None
    return parsed


def is_integer_like(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip().isdigit()


def is_minor_units_candidate(value: Any) -> bool:
    return is_integer_like(value) and int(value) > MINOR_UNITS_THRESHOLD


AMOUNT_STRATEGIES: tuple[AmountStrategy, ...] = (
    AmountStrategy("payment_type_amount", lambda form, _: first_payment_type(form).get("amount")),
    AmountStrategy("record_amount", lambda _, record_amount: record_amount),
    AmountStrategy("form_total_amount", lambda form, _: form.get("total_amount"), True),
    AmountStrategy("form_order_amount", lambda form, _: form.get("order_amount"), True),
)


def first_some(
    strategies: Iterable[AmountStrategy], form: dict[str, Any], record_amount: Any
) -> tuple[str, Decimal] | None:
    for strategy in strategies:
        value = strategy.apply(form, record_amount)
        if value is not None:
            return strategy.name, value
    return None


def _minor_units_fallback(candidates: list[tuple[str, Any]]) -> tuple[str, Decimal] | None:
    for name, raw in candidates:
        if not is_minor_units_candidate(raw):
            continue
        value = parse_positive_amount(Decimal(int(raw)) / 100)
        if value is not None:
            return f"{name}:cents", value
    return None


def derive_amount(
    form: dict[str, Any] | None,
    record_amount: Any = None,
    record_currency: str | None = None,
) -> AmountDerivation:
    form = form if isinstance(form, dict) else {}
    candidates = [
        (strategy.name, raw)
        for strategy in AMOUNT_STRATEGIES
        if (raw := strategy.extract(form, record_amount)) is not None
    ]
    currency = (
        record_currency or first_payment_type(form).get("currency_code") or DEFAULT_CURRENCY
    )

    picked = first_some(AMOUNT_STRATEGIES, form, record_amount) or _minor_units_fallback(
        candidates
    )
    if not picked:
        return AmountDerivation(money=None, source=None, candidates=candidates)
    source, value = picked
    return AmountDerivation(
        money=Money(amount=value, currency_code=currency),
        source=source,
        candidates=candidates,
    )
