from typing import Any

from fastapi import APIRouter, Body, Depends

from app.api.dependencies import get_use_cases
from app.api.schemas.payments import (
    FloaHotelDealRequest,
    FloaHotelDealResponse,
    FloaSimulateRequest,
    SystempayOrderRequest,
    SystempayOrderResponse,
)
from app.api.security import require_api_key

router = APIRouter(prefix="/payments", dependencies=[Depends(require_api_key)])


@router.post("/floa/simulate")
async def simulate_floa_plan(
    payload: FloaSimulateRequest,
    use_cases=Depends(get_use_cases),
) -> dict[str, Any]:
    plan = await use_cases["floa_deal"].simulate(payload.model_dump(exclude_none=True))
    return {"status": "ok", "plan": plan}


@router.post("/floa/deal")
async def create_floa_deal(
    payload: dict[str, Any] | None = Body(default=None),
    use_cases=Depends(get_use_cases),
) -> dict[str, Any]:
    deal = await use_cases["floa_deal"].create_deal(payload)
    return {"status": "ok", "deal": deal}


@router.post("/floa/hotel/deal", response_model=FloaHotelDealResponse)
async def create_floa_hotel_deal(
    payload: FloaHotelDealRequest,
    use_cases=Depends(get_use_cases),
) -> FloaHotelDealResponse:
    result = await use_cases["floa_hotel_deal"].execute(
        partner_order_id=payload.partner_order_id,
        product_code=payload.product_code,
        customer=payload.customer,
        insurance=payload.insurance,
        device=payload.device,
        country_code=payload.country_code,
        implementation_type=payload.implementation_type,
    )
    return FloaHotelDealResponse(
        dealReference=result.deal_reference,
        merchantReference=result.merchant_reference,
        eligibilityId=result.eligibility_id,
        amount=result.amount.amount,
        currency=result.amount.currency_code,
        insurance={
            "selected": result.insurance.selected_ids,
            "total": str(result.insurance.total),
            "contract_code": result.insurance.contract_code,
        },
        deal=result.deal,
    )


@router.post("/floa/deal/{deal_reference}/finalize")
async def finalize_floa_deal(
    deal_reference: str,
    payload: dict[str, Any] | None = Body(default=None),
    use_cases=Depends(get_use_cases),
) -> dict[str, Any]:
    result = await use_cases["floa_deal"].finalize(deal_reference, payload)
    return {"status": "ok", "result": result}


@router.post("/floa/deal/{deal_reference}/cancel")
async def cancel_floa_deal(
    deal_reference: str,
    payload: dict[str, Any] | None = Body(default=None),
    use_cases=Depends(get_use_cases),
) -> dict[str, Any]:
    cancellation = await use_cases["floa_deal"].cancel(deal_reference, payload)
    return {"status": "ok", "cancellation": cancellation}


@router.get("/floa/deal/{deal_reference}")
async def get_floa_installment_plan(
    deal_reference: str,
    use_cases=Depends(get_use_cases),
) -> dict[str, Any]:
    plan = await use_cases["floa_deal"].retrieve(deal_reference)
    return {"status": "ok", "plan": plan}


@router.post("/systempay/create-order", response_model=SystempayOrderResponse)
async def create_systempay_order(
    payload: SystempayOrderRequest,
    use_cases=Depends(get_use_cases),
) -> SystempayOrderResponse:
    result = await use_cases["systempay_order"].execute(
        partner_order_id=payload.partner_order_id,
        customer_email=payload.email,
    )
    return SystempayOrderResponse(
        form_token=result.form_token,
        public_key=result.public_key,
        order_id=result.order_id,
        amount=result.amount.amount,
        currency=result.amount.currency_code,
    )
