from typing import Any


class SystempayGateway:
    """Card-payment gateway; payment results arrive later through the IPN webhook."""

    public_key: str | None = None

    async def create_payment(self, payload: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError
