import json
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.application.interfaces.booking_repo import BookingRecord
from app.application.interfaces.payment_repo import PaymentRecord
from app.api.dependencies import get_use_cases
from app.domain.services.signature import compute_kr_hash
from app.main import app

TEST_HMAC_KEY = "test-hmac-key"
ORDER_ID = "order-0001-mhfw1k00"


def _kr_answer(order_status: str = "PAID") -> str:
    return json.dumps(
        {
            "orderStatus": order_status,
            "orderDetails": {
                "orderId": ORDER_ID,
                "metadata": {"partner_order_id": "order-0001"},
            },
            "transactions": [{"status": order_status}],
        }
    )


def _signed_headers(answer: str, key: str = TEST_HMAC_KEY) -> dict:
    return {"kr-hash": compute_kr_hash(answer, key), "kr-hash-algorithm": "sha256_hmac"}


@pytest.fixture
def pending_order(repos, clock):
    repos["payment_repo"].records.append(
        PaymentRecord(
            id=1,
            provider="systempay",
            status="pending",
            partner_order_id="order-0001",
            amount=Decimal("120.00"),
            currency_code="EUR",
            created_at=clock.now(),
            updated_at=clock.now(),
            external_reference=ORDER_ID,
        )
    )
    repos["booking_repo"].records.append(
        BookingRecord(id=1, partner_order_id="order-0001", status="started", created_at=clock.now())
    )
    return repos


def test_paid_notification_marks_payment_and_booking(client: TestClient, pending_order):
    answer = _kr_answer("PAID")

    response = client.post(
        "/webhook/systempay", data={"kr-answer": answer}, headers=_signed_headers(answer)
    )

    assert response.status_code == 200
    assert response.text == "OK"
    assert pending_order["payment_repo"].records[0].status == "paid"
    assert pending_order["booking_repo"].records[0].status == "paid"


def test_refused_notification_marks_payment_failed(client: TestClient, pending_order):
    answer = _kr_answer("REFUSED")

    client.post("/webhook/systempay", data={"kr-answer": answer}, headers=_signed_headers(answer))

    assert pending_order["payment_repo"].records[0].status == "failed"
    assert pending_order["booking_repo"].records[0].status == "payment_failed"


def test_signature_in_form_fields_is_accepted(client: TestClient, pending_order):
    answer = _kr_answer("PAID")
    form = {"kr-answer": answer, **_signed_headers(answer)}

    response = client.post("/webhook/systempay", data=form)

    assert response.status_code == 200
    assert pending_order["payment_repo"].records[0].status == "paid"


def test_invalid_signature_is_acknowledged_but_ignored(client: TestClient, pending_order):
    answer = _kr_answer("PAID")

    response = client.post(
        "/webhook/systempay",
        data={"kr-answer": answer},
        headers=_signed_headers(answer, key="another-key"),
    )

    assert response.status_code == 200
    assert response.text == "OK"
    assert pending_order["payment_repo"].records[0].status == "pending"
    assert pending_order["booking_repo"].records[0].status == "started"


def test_unexpected_failure_still_returns_ok(client: TestClient):
    handler = AsyncMock()
    handler.execute.side_effect = RuntimeError("boom")
    app.dependency_overrides[get_use_cases] = lambda: {"systempay_webhook": handler}

    response = client.post("/webhook/systempay", data={"kr-answer": _kr_answer()})

    assert response.status_code == 200
    assert response.text == "OK"
    handler.execute.assert_awaited_once()


def test_repeated_notification_is_idempotent(client: TestClient, pending_order, clock):
    answer = _kr_answer("PAID")
    headers = _signed_headers(answer)

    client.post("/webhook/systempay", data={"kr-answer": answer}, headers=headers)
    first_update = pending_order["payment_repo"].records[0].updated_at
    clock.advance(minutes=5)
    client.post("/webhook/systempay", data={"kr-answer": answer}, headers=headers)

    payment = pending_order["payment_repo"].records[0]
    assert payment.status == "paid"
    assert payment.updated_at == first_update
