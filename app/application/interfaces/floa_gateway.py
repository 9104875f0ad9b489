from typing import Any


class FloaGateway:
    """Installment-payment provider (eligibility, deals, installment plans)."""

    async def simulate_plan(self, params: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    async def check_product_eligibility(self, payload: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    async def create_deal(
        self,
        product_code: str,
        body: dict[str, Any],
        implementation_type: str | None = None,
    ) -> dict[str, Any]:
        raise NotImplementedError

    async def finalize_deal(self, deal_reference: str, body: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    async def retrieve_deal(self, deal_reference: str) -> dict[str, Any]:
        raise NotImplementedError

    async def cancel_deal(self, deal_reference: str, body: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError
