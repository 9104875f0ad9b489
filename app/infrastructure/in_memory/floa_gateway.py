from typing import Any
from uuid import uuid4

from app.application.interfaces.floa_gateway import FloaGateway

STUB_PRODUCT_CODES = ("BC3XF", "BC4XF")


class StubFloaGateway(FloaGateway):
    """Always-eligible installment provider for local runs without Floa credentials."""

    async def simulate_plan(self, params: dict[str, Any]) -> dict[str, Any]:
        amount = int(params.get("amount") or 0)
        return {
            "installmentPlans": [
                {"productCode": code, "installmentCount": count, "installmentAmount": amount // count}
                for code, count in zip(STUB_PRODUCT_CODES, (3, 4))
            ]
        }

    async def check_product_eligibility(self, payload: dict[str, Any]) -> dict[str, Any]:
        country = payload.get("country_code") or "FR"
        return {
            "id": f"elig-{uuid4().hex[:12]}",
            "productEligibilities": [
                {"productCode": code, "countryCode": country, "hasAgreement": True}
                for code in STUB_PRODUCT_CODES
            ],
        }

    async def create_deal(
        self,
        product_code: str,
        body: dict[str, Any],
        implementation_type: str | None = None,
    ) -> dict[str, Any]:
        return {
            "dealReference": f"DEAL-{uuid4().hex[:10].upper()}",
            "merchantReference": body.get("merchantReference"),
            "productCode": product_code,
            "status": "Initialized",
        }

    async def finalize_deal(self, deal_reference: str, body: dict[str, Any]) -> dict[str, Any]:
        return {
            "dealReference": deal_reference,
            "status": "Finalized",
            "configuration": body.get("configuration"),
        }

    async def retrieve_deal(self, deal_reference: str) -> dict[str, Any]:
        return {"dealReference": deal_reference, "installments": []}

    async def cancel_deal(self, deal_reference: str, body: dict[str, Any]) -> dict[str, Any]:
        return {"dealReference": deal_reference, "status": "Cancelled"}
