from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.dependencies import get_use_cases
from app.api.schemas.booking import (
    BookingFormRequest,
    BookingFormResponse,
    BookingStatusResponse,
    CheckBookingRequest,
    PrebookRequest,
    StartBookingRequest,
    StartBookingResponse,
)
from app.api.security import require_api_key

router = APIRouter(dependencies=[Depends(require_api_key)])


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("/prebook", status_code=status.HTTP_200_OK)
async def prebook(
    payload: PrebookRequest,
    use_cases=Depends(get_use_cases),
) -> dict[str, Any]:
    refresh_context = (
        payload.hp_context.model_dump(exclude_none=True) if payload.hp_context else None
    )
    result = await use_cases["prebook"].execute(
        rate_hash=payload.rate_hash,
        price_increase_percent=payload.price_increase_percent,
        refresh_context=refresh_context,
        meal=payload.meal,
        room_name=payload.room_name,
    )
    body = dict(result.response) if isinstance(result.response, dict) else {"data": result.response}
    body.update(
        prebook_token=result.token,
        refreshed=result.refreshed,
        picked=result.picked,
        summary=result.summary,
    )
    return body


@router.post("/booking/form", response_model=BookingFormResponse)
async def booking_form(
    payload: BookingFormRequest,
    request: Request,
    use_cases=Depends(get_use_cases),
) -> BookingFormResponse:
    result = await use_cases["booking_form"].execute(
        prebook_token=payload.token,
        language=payload.language,
        user_ip=_client_ip(request),
    )
    return BookingFormResponse(partner_order_id=result.partner_order_id, form=result.form)


@router.post("/booking/start", response_model=StartBookingResponse)
async def start_booking(
    payload: StartBookingRequest,
    use_cases=Depends(get_use_cases),
) -> StartBookingResponse:
    result = await use_cases["start_booking"].execute(payload.model_dump(mode="json"))
    return StartBookingResponse(partner_order_id=result.partner_order_id, start=result.start)


@router.post("/booking/check")
async def check_booking(
    payload: CheckBookingRequest,
    use_cases=Depends(get_use_cases),
) -> dict[str, Any]:
    check = await use_cases["check_booking"].check_supplier(payload.partner_order_id)
    return {"status": "ok", "check": check}


@router.get("/booking/status", response_model=BookingStatusResponse)
async def booking_status(
    partner_order_id: str | None = Query(default=None),
    use_cases=Depends(get_use_cases),
) -> BookingStatusResponse:
    view = await use_cases["check_booking"].local_status(partner_order_id)
    return BookingStatusResponse(
        partner_order_id=view.partner_order_id,
        payment_status=view.payment_status,
        payment_provider=view.payment_provider,
        payment_reference=view.payment_reference,
        booking_status=view.booking_status,
        supplier_order_id=view.supplier_order_id,
    )
