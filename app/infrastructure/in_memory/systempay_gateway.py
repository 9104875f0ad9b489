from typing import Any

from app.application.interfaces.systempay_gateway import SystempayGateway


class StubSystempayGateway(SystempayGateway):
    def __init__(self, public_key: str | None = "stub-public-key") -> None:
        self.public_key = public_key
        self.requests: list[dict[str, Any]] = []

    async def create_payment(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(payload)
        return {
            "status": "SUCCESS",
            "answer": {"formToken": f"stub-form-token-{payload.get('orderId')}"},
        }
