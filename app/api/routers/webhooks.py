"""
Payment-provider notifications (IPN).

Every delivery is answered with HTTP 200 "OK", including rejected signatures and
internal failures. Payment gateways retry on any non-2xx answer, and a retry storm
against a failing handler does more harm than a logged, swallowed anomaly.
Failures are visible through logs only.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from app.api.dependencies import get_use_cases
from app.domain.errors import SignatureInvalidError
from app.infrastructure.db.retry import retry_on_deadlock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook")


@router.post("/systempay", response_class=PlainTextResponse)
async def systempay_webhook(
    request: Request,
    use_cases=Depends(get_use_cases),
) -> PlainTextResponse:
    try:
        form = dict(await request.form())
        kr_hash = request.headers.get("kr-hash") or form.get("kr-hash")
        kr_hash_algorithm = request.headers.get("kr-hash-algorithm") or form.get(
            "kr-hash-algorithm"
        )
        handler = use_cases["systempay_webhook"]
        await retry_on_deadlock(lambda: handler.execute(form, kr_hash, kr_hash_algorithm))
    except SignatureInvalidError as exc:
        logger.error(
            "Systempay IPN rejected: invalid signature",
            extra={"reason": exc.reason},
        )
    except Exception as exc:
        logger.error("Systempay IPN processing failed", exc_info=exc)
    return PlainTextResponse("OK", status_code=200)
