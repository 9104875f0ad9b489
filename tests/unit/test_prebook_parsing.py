from datetime import datetime, timezone

import pytest

from app.domain.errors import InvalidHashError, ValidationError
from app.domain.services.hashes import ensure_bookable_hash, ensure_prebook_hash
from app.domain.services.prebook_parsing import (
    TokenFound,
    TokenNotFound,
    build_prebook_summary,
    extract_prebook_token,
)


class TestHashes:
    def test_bookable_hash_is_trimmed(self):
        assert ensure_bookable_hash("  h-123 ") == "h-123"
        assert ensure_bookable_hash("sr-abc") == "sr-abc"

    @pytest.mark.parametrize("raw", ["m-123", "M-123", "", "   ", None, 42])
    def test_match_hash_and_empty_values_are_rejected(self, raw):
        with pytest.raises(InvalidHashError):
            ensure_bookable_hash(raw)

    def test_prebook_hash_must_start_with_p(self):
        assert ensure_prebook_hash(" p-789 ") == "p-789"
        with pytest.raises(ValidationError):
            ensure_prebook_hash("h-123")


class TestExtractPrebookToken:
    @pytest.mark.parametrize(
        "response, source",
        [
            ("p-plain", "plain_string"),
            ({"token": "p-1"}, "token"),
            ({"prebook_token": "p-2"}, "prebook_token"),
            (
                {"prebook_token": {"hotels": [{"rates": [{"book_hash": "p-3"}]}]}},
                "prebook_token.hotels.rates",
            ),
            ({"hotels": [{"rates": [{"book_hash": "h-x"}, {"book_hash": "p-4"}]}]}, "hotels.rates"),
            ({"data": {"hotels": [{"rates": [{"book_hash": "p-5"}]}]}}, "data.hotels.rates"),
        ],
    )
    def test_known_shapes(self, response, source):
        lookup = extract_prebook_token(response)

        assert isinstance(lookup, TokenFound)
        assert lookup.source == source
        assert lookup.token.startswith("p")

    def test_first_shape_wins(self):
        lookup = extract_prebook_token(
            {"token": "p-top", "hotels": [{"rates": [{"book_hash": "p-nested"}]}]}
        )

        assert lookup == TokenFound(token="p-top", source="token")

    def test_not_found_lists_every_shape(self):
        lookup = extract_prebook_token({"hotels": [{"rates": [{"book_hash": "h-1"}]}]})

        assert isinstance(lookup, TokenNotFound)
        assert lookup.tried[0] == "plain_string"
        assert len(lookup.tried) == 6


class TestPrebookSummary:
    def test_summary_uses_rate_and_refresh_context(self):
        response = {
            "hotels": [
                {
                    "id": "hotel_55",
                    "name": "Hôtel du Port",
                    "rates": [
                        {
                            "book_hash": "p-789",
                            "room_name": "Double Room",
                            "meal": "breakfast",
                            "payment_options": {
                                "payment_types": [{"show_amount": "240.00", "show_currency_code": "EUR"}]
                            },
                        }
                    ],
                }
            ]
        }
        created_at = datetime(2025, 11, 1, 12, 0, tzinfo=timezone.utc)

        summary = build_prebook_summary(
            response,
            "p-789",
            hp_context={"checkin": "2025-11-10", "checkout": "2025-11-12", "city": "Nice"},
            created_at=created_at,
        )

        assert summary["token"] == "p-789"
        assert summary["created_at"] == created_at.isoformat()
        assert summary["hotel"]["name"] == "Hôtel du Port"
        assert summary["hotel"]["city"] == "Nice"
        assert summary["stay"]["checkin"] == "2025-11-10"
        assert summary["room"]["name"] == "Double Room"
        assert summary["room"]["price"] == "240.00"
        assert summary["room"]["currency"] == "EUR"

    def test_empty_response_has_no_summary(self):
        assert build_prebook_summary(None, "p-1") is None
