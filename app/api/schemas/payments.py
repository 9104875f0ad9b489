from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class FloaSimulateRequest(BaseModel):
    """Amounts in major units; validated and converted to cents by the use case."""

    model_config = ConfigDict(extra="ignore")

    amount: Any = None
    merchantFinancedAmount: Any = None
    currency: str | None = None
    country_code: str | None = None
    products: list[Any] | None = None


class FloaHotelDealRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    partner_order_id: str | None = Field(
        default=None, validation_alias=AliasChoices("partner_order_id", "partnerOrderId")
    )
    product_code: str | None = Field(
        default=None, validation_alias=AliasChoices("product_code", "productCode")
    )
    customer: dict[str, Any] | None = None
    insurance: Any = None
    device: str | None = None
    country_code: str | None = Field(
        default=None, validation_alias=AliasChoices("country_code", "countryCode")
    )
    implementation_type: str | None = Field(
        default=None, validation_alias=AliasChoices("implementation_type", "implementationType")
    )


class FloaHotelDealResponse(BaseModel):
    status: str = "ok"
    dealReference: str
    merchantReference: str
    eligibilityId: str
    amount: Decimal
    currency: str
    insurance: dict[str, Any]
    deal: dict[str, Any]


class SystempayOrderRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    partner_order_id: str | None = Field(
        default=None, validation_alias=AliasChoices("partner_order_id", "partnerOrderId")
    )
    email: EmailStr | None = Field(
        default=None, validation_alias=AliasChoices("email", "customer_email")
    )


class SystempayOrderResponse(BaseModel):
    form_token: str
    public_key: str | None
    order_id: str
    amount: Decimal
    currency: str
