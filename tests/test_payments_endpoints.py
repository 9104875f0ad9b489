from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

ELIGIBLE_RESPONSE = {
    "id": "elig-root-1",
    "productEligibilities": [
        {"productCode": "BC4XF", "countryCode": "FR", "hasAgreement": False},
        {"productCode": "BC3XF", "countryCode": "FR", "hasAgreement": True, "id": "entry-3x"},
    ],
}

CUSTOMER = {"civility": "Mrs", "firstName": "Ana", "lastName": "Roe", "email": "ana@example.com"}


@pytest.fixture
def partner_order_id(client: TestClient) -> str:
    """Booking form bound through the API with the stub supplier (120.00 EUR)."""
    response = client.post("/booking/form", json={"prebook_token": "p-789"})
    return response.json()["partner_order_id"]


@pytest.fixture
def floa(gateways) -> AsyncMock:
    mock = AsyncMock()
    mock.check_product_eligibility.return_value = ELIGIBLE_RESPONSE
    mock.create_deal.return_value = {"dealReference": "DEAL-123", "status": "Initialized"}
    gateways["floa_gateway"] = mock
    return mock


class TestFloaHotelDeal:
    def test_creates_deal_with_root_eligibility_id(
        self, client: TestClient, floa: AsyncMock, partner_order_id: str, repos
    ):
        response = client.post(
            "/payments/floa/hotel/deal",
            json={
                "partnerOrderId": partner_order_id,
                "productCode": "BC3XF",
                "customer": CUSTOMER,
                "insurance": {"selected": ["ANBVM"]},
            },
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["dealReference"] == "DEAL-123"
        assert data["eligibilityId"] == "elig-root-1"
        assert data["merchantReference"].startswith(f"{partner_order_id}-")
        assert data["amount"] == "138.00"
        assert data["insurance"]["selected"] == ["ANBVM"]

        eligibility_payload = floa.check_product_eligibility.await_args.args[0]
        assert eligibility_payload["merchantFinancedAmount"] == 13800
        assert eligibility_payload["itemCount"] == 2
        assert [item["category"] for item in eligibility_payload["items"]] == [
            "Travel",
            "Insurance",
        ]

        product_code, deal_body = floa.create_deal.await_args.args
        assert product_code == "BC3XF"
        assert deal_body["productEligibilityId"] == "elig-root-1"
        assert deal_body["merchantFinancedAmount"] == 13800

        payment = repos["payment_repo"].records[0]
        assert payment.provider == "floa"
        assert payment.status == "pending"
        assert payment.external_reference == "DEAL-123"
        assert payment.supplier_order_id == "1001"

    def test_not_eligible_is_a_business_answer(
        self, client: TestClient, floa: AsyncMock, partner_order_id: str, repos
    ):
        floa.check_product_eligibility.return_value = {
            "id": "elig-root-2",
            "productEligibilities": [
                {
                    "productCode": "BC3XF",
                    "countryCode": "FR",
                    "hasAgreement": True,
                    "error": {"code": "CUSTOMER_REFUSED"},
                }
            ],
        }

        response = client.post(
            "/payments/floa/hotel/deal",
            json={"partnerOrderId": partner_order_id, "productCode": "BC3XF", "customer": CUSTOMER},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["status"] == "nok"
        assert data["reason"] == "not_eligible"
        assert data["floa"]["id"] == "elig-root-2"
        floa.create_deal.assert_not_awaited()
        assert repos["payment_repo"].records == []

    def test_unknown_booking_form(self, client: TestClient, floa: AsyncMock):
        response = client.post(
            "/payments/floa/hotel/deal",
            json={"partnerOrderId": "missing", "productCode": "BC3XF", "customer": CUSTOMER},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "booking_form_not_found"
        floa.check_product_eligibility.assert_not_awaited()

    def test_customer_civility_is_required(self, client: TestClient, partner_order_id: str):
        response = client.post(
            "/payments/floa/hotel/deal",
            json={
                "partnerOrderId": partner_order_id,
                "productCode": "BC3XF",
                "customer": {"firstName": "Ana"},
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestFloaGenericDeal:
    def _payload(self, **overrides):
        payload = {
            "productCode": "BC3XF",
            "customers": [CUSTOMER],
            "merchantFinancedAmount": 25000,
            "merchantReference": "cart-42",
            "items": [
                {"reference": "sku-1", "unitPrice": 12500, "quantity": 2, "totalAmount": 25000}
            ],
            "shippingAddress": {"countryCode": "fr"},
        }
        payload.update(overrides)
        return payload

    def test_creates_deal_with_root_eligibility_id(self, client: TestClient, floa: AsyncMock, repos):
        response = client.post(
            "/payments/floa/deal", json=self._payload(implementationType="Redirect")
        )

        assert response.status_code == 200, response.text
        assert response.json() == {
            "status": "ok",
            "deal": {"dealReference": "DEAL-123", "status": "Initialized"},
        }

        eligibility_payload = floa.check_product_eligibility.await_args.args[0]
        assert eligibility_payload["customers"] == [CUSTOMER]
        assert eligibility_payload["itemCount"] == 1
        assert eligibility_payload["country_code"] == "FR"
        assert eligibility_payload["device"] == "Desktop"
        assert eligibility_payload["currency"] == "EUR"

        product_code, deal_body = floa.create_deal.await_args.args
        assert product_code == "BC3XF"
        assert deal_body["productEligibilityId"] == "elig-root-1"
        assert deal_body["merchantReference"] == "cart-42"
        assert "productCode" not in deal_body
        assert floa.create_deal.await_args.kwargs["implementation_type"] == "Redirect"
        assert repos["payment_repo"].records == []

    def test_not_eligible_is_a_business_answer(self, client: TestClient, floa: AsyncMock):
        floa.check_product_eligibility.return_value = {
            "id": "elig-root-3",
            "productEligibilities": [
                {"productCode": "BC3XF", "countryCode": "BE", "hasAgreement": True}
            ],
        }

        response = client.post("/payments/floa/deal", json=self._payload())

        assert response.status_code == 400
        data = response.json()
        assert data["status"] == "nok"
        assert data["reason"] == "not_eligible"
        floa.create_deal.assert_not_awaited()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"customers": []},
            {"items": []},
            {"productCode": None},
            {"merchantFinancedAmount": None},
        ],
    )
    def test_required_fields(self, client: TestClient, floa: AsyncMock, overrides):
        response = client.post("/payments/floa/deal", json=self._payload(**overrides))

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        floa.check_product_eligibility.assert_not_awaited()


class TestFloaDealLifecycle:
    def test_finalize_builds_configuration(self, client: TestClient, floa: AsyncMock):
        floa.finalize_deal.return_value = {"status": "Finalized"}

        response = client.post(
            "/payments/floa/deal/DEAL-123/finalize",
            json={"returnUrl": "https://shop.example.com/return", "culture": "fr-FR"},
        )

        assert response.status_code == 200
        reference, body = floa.finalize_deal.await_args.args
        assert reference == "DEAL-123"
        assert body["configuration"]["sessionModes"] == ["WebPage"]
        assert body["configuration"]["returnUrl"] == "https://shop.example.com/return"
        assert body["configuration"]["culture"] == "fr-FR"

    def test_finalize_without_body(self, client: TestClient, floa: AsyncMock):
        floa.finalize_deal.return_value = {}

        response = client.post("/payments/floa/deal/DEAL-123/finalize")

        assert response.status_code == 200
        assert floa.finalize_deal.await_args.args[1]["configuration"] == {
            "sessionModes": ["WebPage"]
        }

    def test_cancel_passes_through(self, client: TestClient, floa: AsyncMock):
        floa.cancel_deal.return_value = {"status": "Cancelled"}

        response = client.post("/payments/floa/deal/DEAL-123/cancel", json={"reason": "customer"})

        assert response.status_code == 200
        assert response.json()["cancellation"] == {"status": "Cancelled"}
        floa.cancel_deal.assert_awaited_once_with("DEAL-123", {"reason": "customer"})

    def test_retrieve_installment_plan(self, client: TestClient, floa: AsyncMock):
        floa.retrieve_deal.return_value = {"installments": [{"amount": 4600}]}

        response = client.get("/payments/floa/deal/DEAL-123")

        assert response.status_code == 200
        assert response.json()["plan"] == {"installments": [{"amount": 4600}]}

    def test_simulate_converts_to_cents(self, client: TestClient, floa: AsyncMock):
        floa.simulate_plan.return_value = {"installmentPlans": []}

        response = client.post("/payments/floa/simulate", json={"amount": "138.00"})

        assert response.status_code == 200
        params = floa.simulate_plan.await_args.args[0]
        assert params["amount"] == 13800
        assert params["merchantFinancedAmount"] == 13800
        assert params["currency"] == "EUR"
        assert params["country_code"] == "FR"

    def test_simulate_rejects_invalid_amount(self, client: TestClient, floa: AsyncMock):
        response = client.post("/payments/floa/simulate", json={"amount": "abc"})

        assert response.status_code == 400
        floa.simulate_plan.assert_not_awaited()

    def test_simulate_rejects_out_of_range_amount(self, client: TestClient, floa: AsyncMock):
        response = client.post("/payments/floa/simulate", json={"amount": "1e40"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        floa.simulate_plan.assert_not_awaited()


class TestSystempayOrder:
    def test_create_order_uses_booking_form_amount(
        self, client: TestClient, partner_order_id: str, gateways, repos
    ):
        response = client.post(
            "/payments/systempay/create-order",
            json={"partner_order_id": partner_order_id, "email": "ana@example.com"},
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["order_id"].startswith(f"{partner_order_id}-")
        assert data["form_token"] == f"stub-form-token-{data['order_id']}"
        assert data["public_key"] == "stub-public-key"
        assert data["amount"] == "120.00"
        assert data["currency"] == "EUR"

        request = gateways["systempay_gateway"].requests[0]
        assert request["amount"] == 12000
        assert request["customer"] == {"email": "ana@example.com"}
        assert request["metadata"] == {"partner_order_id": partner_order_id}

        payment = repos["payment_repo"].records[0]
        assert payment.provider == "systempay"
        assert payment.status == "pending"
        assert payment.external_reference == data["order_id"]

    def test_create_order_failure_from_gateway(
        self, client: TestClient, partner_order_id: str, gateways, repos
    ):
        systempay = AsyncMock()
        systempay.create_payment.return_value = {"status": "ERROR", "answer": {"errorCode": "INT_905"}}
        gateways["systempay_gateway"] = systempay

        response = client.post(
            "/payments/systempay/create-order", json={"partner_order_id": partner_order_id}
        )

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "systempay_create_payment_failed"
        assert data["provider"] == "systempay"
        assert repos["payment_repo"].records == []
