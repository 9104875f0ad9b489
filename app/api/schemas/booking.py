from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class HotelPageContext(BaseModel):
    """Hotel and stay used to re-search rates when a prebooked rate went stale."""

    model_config = ConfigDict(extra="allow")

    id: str | int | None = None
    hid: int | None = None
    checkin: str | None = None
    checkout: str | None = None
    guests: list[dict[str, Any]] | None = None
    currency: str | None = None
    language: str | None = None
    residency: str | None = None


class PrebookRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    search_hash: str | None = None
    book_hash: str | None = None
    hash: str | None = None
    offer_id: str | None = None
    price_increase_percent: float = Field(default=0, ge=0, le=100)
    hp_context: HotelPageContext | None = None
    meal: str | None = None
    room_name: str | None = None

    @property
    def rate_hash(self) -> str | None:
        return self.search_hash or self.book_hash or self.hash or self.offer_id


class BookingFormRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prebook_token: str | None = None
    book_hash: str | None = None
    language: str | None = None

    @property
    def token(self) -> str | None:
        return self.prebook_token or self.book_hash


class BookingFormResponse(BaseModel):
    status: str = "ok"
    partner_order_id: str
    form: dict[str, Any]


class BookingUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: EmailStr | None = None
    phone: str | None = None
    comment: str | None = None


class StartBookingRequest(BaseModel):
    """Required fields are checked by the use case so that errors share one shape."""

    model_config = ConfigDict(extra="ignore")

    partner_order_id: str | None = None
    language: str | None = None
    user: BookingUser | None = None
    rooms: list[dict[str, Any]] | None = None
    payment_type: dict[str, Any] | None = None
    supplier_data: dict[str, Any] | None = None
    upsell_data: Any = None
    return_path: str | None = None
    arrival_datetime: str | None = None


class StartBookingResponse(BaseModel):
    status: str = "ok"
    partner_order_id: str
    start: dict[str, Any]


class CheckBookingRequest(BaseModel):
    partner_order_id: str | None = Field(
        default=None, validation_alias=AliasChoices("partner_order_id", "partnerOrderId")
    )


class BookingStatusResponse(BaseModel):
    status: str = "ok"
    partner_order_id: str
    payment_status: str | None = None
    payment_provider: str | None = None
    payment_reference: str | None = None
    booking_status: str | None = None
    supplier_order_id: str | None = None
