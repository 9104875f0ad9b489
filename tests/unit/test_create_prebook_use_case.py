from unittest.mock import AsyncMock

import pytest

from app.application.interfaces.clock import FakeClock
from app.application.use_cases.create_prebook import (
    CreatePrebookUseCase,
    build_hotel_page_request,
)
from app.domain.errors import (
    InvalidHashError,
    NoFreshRatesError,
    PersistenceError,
    UpstreamError,
    ValidationError,
)
from app.infrastructure.in_memory import InMemoryPrebookRepo, NoopTransactionManager

REFRESH_CONTEXT = {
    "id": "hotel_55",
    "checkin": "2025-11-10",
    "checkout": "2025-11-12",
    "guests": [{"adults": 2}],
    "language": "fr",
    "residency": "FR",
}


def _stale_rate_error() -> UpstreamError:
    return UpstreamError(
        provider="etg", reason="no_available_rates", http_status=400, debug={"error": "no_available_rates"}
    )


def _prebook_response(token: str) -> dict:
    return {"hotels": [{"id": "hotel_55", "rates": [{"book_hash": token, "meal": "breakfast"}]}]}


@pytest.fixture
def supplier():
    gateway = AsyncMock()
    gateway.prebook.return_value = _prebook_response("p-1")
    return gateway


@pytest.fixture
def prebook_repo():
    return InMemoryPrebookRepo()


def _use_case(supplier, prebook_repo):
    return CreatePrebookUseCase(
        supplier_gateway=supplier,
        prebook_repo=prebook_repo,
        transaction_manager=NoopTransactionManager(),
        clock=FakeClock(),
        prebook_ttl_seconds=600,
    )


async def test_prebook_is_persisted_with_ttl(supplier, prebook_repo):
    result = await _use_case(supplier, prebook_repo).execute(" h-123 ", price_increase_percent=2)

    assert result.token == "p-1"
    assert not result.refreshed
    supplier.prebook.assert_awaited_once_with("h-123", 2)
    record = prebook_repo.records[0]
    assert record.offer_hash == "h-123"
    assert (record.expires_at - record.created_at).total_seconds() == 600


async def test_match_hash_never_reaches_supplier(supplier, prebook_repo):
    with pytest.raises(InvalidHashError):
        await _use_case(supplier, prebook_repo).execute("m-123")

    supplier.prebook.assert_not_awaited()


async def test_persistence_failure_still_returns_token(supplier):
    repo = AsyncMock()
    repo.save.side_effect = PersistenceError("prebook", "database down")

    result = await _use_case(supplier, repo).execute("h-123")

    assert result.token == "p-1"


async def test_stale_rate_is_refreshed_with_preferred_room(supplier, prebook_repo):
    supplier.prebook.side_effect = [_stale_rate_error(), _prebook_response("p-9")]
    supplier.fetch_hotel_page.return_value = {
        "hotels": [
            {
                "rates": [
                    {"hash": "h-room-only", "meal": "nomeal", "room_name": "Double"},
                    {"hash": "h-breakfast", "meal": "breakfast", "room_name": "Double"},
                ]
            }
        ]
    }

    result = await _use_case(supplier, prebook_repo).execute(
        "h-123", refresh_context=REFRESH_CONTEXT, meal="breakfast", room_name="Double"
    )

    assert result.refreshed
    assert result.token == "p-9"
    assert result.picked == {"meal": "breakfast", "room_name": "Double", "hash": "h-breakfast"}
    body = supplier.fetch_hotel_page.await_args.args[0]
    assert body["residency"] == "fr"
    assert body["currency"] == "EUR"
    assert supplier.prebook.await_args_list[1].args[0] == "h-breakfast"


async def test_stale_rate_without_context_is_reraised(supplier, prebook_repo):
    supplier.prebook.side_effect = _stale_rate_error()

    with pytest.raises(UpstreamError) as exc_info:
        await _use_case(supplier, prebook_repo).execute("h-123")

    assert exc_info.value.reason == "no_available_rates"
    supplier.fetch_hotel_page.assert_not_awaited()


async def test_refresh_without_hotel_hash_fails(supplier, prebook_repo):
    supplier.prebook.side_effect = _stale_rate_error()
    supplier.fetch_hotel_page.return_value = {"hotels": [{"rates": [{"hash": "m-only"}]}]}

    with pytest.raises(NoFreshRatesError):
        await _use_case(supplier, prebook_repo).execute("h-123", refresh_context=REFRESH_CONTEXT)


class TestHotelPageRequest:
    def test_unsupported_language_defaults_to_english(self):
        body = build_hotel_page_request({**REFRESH_CONTEXT, "language": "xx"})

        assert body["language"] == "en"

    def test_hid_is_accepted_as_id(self):
        context = {key: value for key, value in REFRESH_CONTEXT.items() if key != "id"}

        assert build_hotel_page_request({**context, "hid": 8473})["id"] == 8473

    @pytest.mark.parametrize("missing", ["id", "checkin", "guests"])
    def test_required_fields(self, missing):
        context = {key: value for key, value in REFRESH_CONTEXT.items() if key != missing}

        with pytest.raises(ValidationError):
            build_hotel_page_request(context)
