"""Travel insurance catalog, the ancillary items chargeable with a hotel stay."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

INSURANCE_CONTRACT_CODE = "ANBVM"


@dataclass(frozen=True)
class InsuranceProduct:
    id: str
    title: str
    description: str
    price: Decimal
    extension_code: str | None = None


INSURANCE_CATALOG: tuple[InsuranceProduct, ...] = (
    InsuranceProduct(
        id="ANBVM",
        title="Assurance voyage ANBVM",
        description="Contrat Assur-Travel (ANBVM).",
        price=Decimal("18.00"),
    ),
)

_CATALOG_BY_ID = {product.id: product for product in INSURANCE_CATALOG}


@dataclass(frozen=True)
class InsuranceSummary:
    selected_ids: list[str]
    items: list[InsuranceProduct] = field(default_factory=list)
    extension_codes: list[str] = field(default_factory=list)
    total: Decimal = Decimal("0")
    contract_code: str = INSURANCE_CONTRACT_CODE


def normalize_selected_ids(raw: Any) -> list[str]:
    if isinstance(raw, dict):
        raw = raw.get("selected")
    if not isinstance(raw, list):
        return []
    return [str(item).strip() for item in raw if item is not None and str(item).strip()]


def build_insurance_summary(raw_selection: Any) -> InsuranceSummary:
    """Unknown ids are ignored."""
    selected_ids = normalize_selected_ids(raw_selection)
    items = [_CATALOG_BY_ID[item_id] for item_id in selected_ids if item_id in _CATALOG_BY_ID]
    return InsuranceSummary(
        selected_ids=selected_ids,
        items=items,
        extension_codes=[item.extension_code for item in items if item.extension_code],
        total=sum((item.price for item in items), Decimal("0")),
    )
