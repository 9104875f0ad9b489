import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.deps import engine
from app.api.routers.booking import router as booking_router
from app.api.routers.health import router as health_router
from app.api.routers.payments import router as payments_router
from app.api.routers.webhooks import router as webhooks_router
from app.domain.errors import (
    DomainError,
    NotEligibleError,
    PaymentRequiredBeforeBookingFinishError,
    UpstreamError,
)
from app.infrastructure.db.mysql_engine import create_schema

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize DB tables (for dev/demo purposes)
    await create_schema(engine)
    yield
    # Cleanup
    await engine.dispose()

app = FastAPI(
    title="Hotel Booking API",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(NotEligibleError)
async def not_eligible_handler(request: Request, exc: NotEligibleError):
    """Negative business answer from Floa: rendered as a result, not as a failure."""
    logger.info(
        "Customer not eligible for installments",
        extra={"product_code": exc.product_code, "country_code": exc.country_code},
    )
    return JSONResponse(
        status_code=exc.http_status,
        content={"status": "nok", "reason": "not_eligible", "floa": exc.eligibility},
    )


@app.exception_handler(PaymentRequiredBeforeBookingFinishError)
async def payment_required_handler(
    request: Request, exc: PaymentRequiredBeforeBookingFinishError
):
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "status": "error",
            "error": exc.code,
            "message": exc.message,
            "http": exc.http_status,
            "partner_order_id": exc.partner_order_id,
            "payment_status": exc.payment_status,
            "provider": exc.provider,
        },
    )


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.warning(
        "Upstream provider error",
        extra={
            "provider": exc.provider,
            "reason": exc.reason,
            "http_status": exc.http_status,
            "request_id": exc.request_id,
            "path": request.url.path,
        },
    )
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "status": exc.status,
            "error": exc.reason,
            "message": exc.message,
            "provider": exc.provider,
            "http": exc.http_status,
            "request_id": exc.request_id,
            "debug": exc.debug,
        },
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Known business failures carry their own HTTP status and error code."""
    if exc.http_status >= 500:
        logger.error("Domain error", exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "status": "error",
            "error": exc.code,
            "message": exc.message,
            "http": exc.http_status,
            "request_id": None,
            "debug": exc.debug,
        },
    )


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    # Log the full error with context for internal debugging
    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    # Return a generic error to the client without exposing internal details
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(booking_router, tags=["Booking"])
app.include_router(payments_router, tags=["Payments"])
app.include_router(webhooks_router, tags=["Webhooks"])
