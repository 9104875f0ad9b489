import json
from decimal import Decimal

import pytest

from app.application.interfaces.booking_repo import BookingRecord
from app.application.interfaces.clock import FakeClock
from app.application.interfaces.payment_repo import PaymentRecord
from app.application.use_cases.handle_systempay_webhook import (
    HandleSystempayWebhookUseCase,
    parse_kr_answer,
    resolve_order_id,
    resolve_raw_status,
)
from app.domain.entities.payment import PaymentStatus
from app.domain.errors import SignatureInvalidError
from app.domain.services.signature import compute_kr_hash
from app.infrastructure.in_memory import (
    InMemoryBookingRepo,
    InMemoryPaymentRepo,
    NoopTransactionManager,
)

SECRET = "webhook-secret"
ORDER_ID = "order-0001-mhfw1k00"


def _form(status: str, order_id: str = ORDER_ID) -> dict:
    answer = json.dumps(
        {
            "orderStatus": status,
            "orderDetails": {
                "orderId": order_id,
                "metadata": {"partner_order_id": "order-0001"},
            },
        }
    )
    return {"kr-answer": answer}


def _signed(form: dict, secret: str = SECRET) -> str:
    return compute_kr_hash(form["kr-answer"], secret)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def payment_repo(clock):
    repo = InMemoryPaymentRepo()
    repo.records.append(
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
    return repo


@pytest.fixture
def booking_repo(clock):
    repo = InMemoryBookingRepo()
    repo.records.append(
        BookingRecord(id=1, partner_order_id="order-0001", status="started", created_at=clock.now())
    )
    return repo


def _use_case(payment_repo, booking_repo, clock, hmac_key=SECRET):
    return HandleSystempayWebhookUseCase(
        payment_repo=payment_repo,
        booking_repo=booking_repo,
        transaction_manager=NoopTransactionManager(),
        clock=clock,
        hmac_key=hmac_key,
    )


async def test_paid_notification_updates_payment_and_booking(payment_repo, booking_repo, clock):
    form = _form("PAID")

    outcome = await _use_case(payment_repo, booking_repo, clock).execute(
        form, _signed(form), "sha256_hmac"
    )

    assert outcome.applied
    assert outcome.status == PaymentStatus.PAID
    assert outcome.reference == ORDER_ID
    assert outcome.partner_order_id == "order-0001"
    assert outcome.payments_updated == 1
    assert outcome.bookings_updated == 1
    assert payment_repo.records[0].status == "paid"
    assert booking_repo.records[0].status == "paid"


async def test_replayed_notification_changes_nothing(payment_repo, booking_repo, clock):
    use_case = _use_case(payment_repo, booking_repo, clock)
    form = _form("PAID")
    await use_case.execute(form, _signed(form), None)
    first_update = payment_repo.records[0].updated_at
    clock.advance(minutes=5)

    outcome = await use_case.execute(form, _signed(form), None)

    assert not outcome.applied
    assert outcome.payments_updated == 0
    assert payment_repo.records[0].updated_at == first_update


async def test_late_pending_does_not_revert_paid(payment_repo, booking_repo, clock):
    use_case = _use_case(payment_repo, booking_repo, clock)
    paid = _form("PAID")
    await use_case.execute(paid, _signed(paid), None)

    running = _form("RUNNING")
    outcome = await use_case.execute(running, _signed(running), None)

    assert outcome.status == PaymentStatus.PENDING
    assert not outcome.applied
    assert outcome.bookings_updated == 0
    assert payment_repo.records[0].status == "paid"
    assert booking_repo.records[0].status == "paid"


async def test_refused_marks_booking_payment_failed(payment_repo, booking_repo, clock):
    form = _form("REFUSED")

    outcome = await _use_case(payment_repo, booking_repo, clock).execute(form, _signed(form), None)

    assert outcome.status == PaymentStatus.FAILED
    assert payment_repo.records[0].status == "failed"
    assert booking_repo.records[0].status == "payment_failed"


async def test_invalid_signature_is_rejected(payment_repo, booking_repo, clock):
    form = _form("PAID")

    with pytest.raises(SignatureInvalidError) as exc_info:
        await _use_case(payment_repo, booking_repo, clock).execute(
            form, _signed(form, "wrong-secret"), None
        )

    assert exc_info.value.reason == "signature_mismatch"
    assert payment_repo.records[0].status == "pending"


async def test_missing_hash_is_rejected_when_key_configured(payment_repo, booking_repo, clock):
    with pytest.raises(SignatureInvalidError) as exc_info:
        await _use_case(payment_repo, booking_repo, clock).execute(_form("PAID"), None, None)

    assert exc_info.value.reason == "missing_kr_hash"


async def test_without_key_notification_is_applied(payment_repo, booking_repo, clock):
    outcome = await _use_case(payment_repo, booking_repo, clock, hmac_key=None).execute(
        _form("PAID"), None, None
    )

    assert outcome.applied
    assert outcome.signature == "no_hmac_key_configured"


async def test_notification_without_reference_is_ignored(payment_repo, booking_repo, clock):
    form = {"kr-answer": json.dumps({"orderStatus": "PAID"})}

    outcome = await _use_case(payment_repo, booking_repo, clock).execute(form, _signed(form), None)

    assert not outcome.applied
    assert outcome.reference is None
    assert payment_repo.records[0].status == "pending"


class TestAnswerParsing:
    def test_invalid_json_is_none(self):
        assert parse_kr_answer("{not json") is None
        assert parse_kr_answer("[1, 2]") is None
        assert parse_kr_answer(None) is None

    def test_status_falls_back_to_transaction_then_form(self):
        answer = {"transactions": [{"status": "AUTHORISED"}]}

        assert resolve_raw_status(answer, {}) == "AUTHORISED"
        assert resolve_raw_status(None, {"transactionStatus": "REFUSED"}) == "REFUSED"

    def test_order_id_falls_back_to_form_fields(self):
        assert resolve_order_id(None, {"paymentOrderId": "po-1"}) == "po-1"
        assert resolve_order_id({"orderId": 7}, {}) == "7"
