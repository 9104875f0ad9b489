import logging
from functools import lru_cache
from typing import Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AsyncSessionLocal
from app.application.interfaces.clock import SystemClock
from app.application.interfaces.uuid_generator import RealUUIDGenerator
from app.application.use_cases.check_booking import CheckBookingUseCase
from app.application.use_cases.create_floa_hotel_deal import CreateFloaHotelDealUseCase
from app.application.use_cases.create_prebook import CreatePrebookUseCase
from app.application.use_cases.create_systempay_order import CreateSystempayOrderUseCase
from app.application.use_cases.handle_systempay_webhook import HandleSystempayWebhookUseCase
from app.application.use_cases.manage_floa_deal import ManageFloaDealUseCase
from app.application.use_cases.request_booking_form import RequestBookingFormUseCase
from app.application.use_cases.start_booking import StartBookingUseCase
from app.config import Settings, get_settings
from app.infrastructure.db.repositories.booking_form_repo_sql import BookingFormRepoSQL
from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.payment_repo_sql import PaymentRepoSQL
from app.infrastructure.db.repositories.prebook_repo_sql import PrebookRepoSQL
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.gateways.etg_gateway_http import ETGGatewayHTTP
from app.infrastructure.gateways.floa_gateway_http import FloaGatewayHTTP
from app.infrastructure.gateways.systempay_gateway_http import SystempayGatewayHTTP
from app.infrastructure.in_memory import (
    InMemoryBookingFormRepo,
    InMemoryBookingRepo,
    InMemoryPaymentRepo,
    InMemoryPrebookRepo,
    NoopTransactionManager,
    StubFloaGateway,
    StubHotelSupplierGateway,
    StubSystempayGateway,
)

logger = logging.getLogger(__name__)


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


@lru_cache(maxsize=1)
def _in_memory_bundle() -> dict[str, Any]:
    return {
        "prebook_repo": InMemoryPrebookRepo(),
        "booking_form_repo": InMemoryBookingFormRepo(),
        "payment_repo": InMemoryPaymentRepo(),
        "booking_repo": InMemoryBookingRepo(),
        "tx_manager": NoopTransactionManager(),
    }


@lru_cache(maxsize=1)
def _gateway_bundle() -> dict[str, Any]:
    """
    Process-wide upstream clients. The Floa client owns the access-token cache,
    so exactly one instance must exist per process.
    """
    settings = get_settings()

    if settings.etg_configured:
        supplier_gateway = ETGGatewayHTTP(
            partner_id=settings.etg_partner_id,
            api_key=settings.etg_api_key,
            base_url=settings.etg_base_url,
            timeout_seconds=settings.etg_timeout_seconds,
        )
    else:
        logger.warning("ETG credentials missing, using stub supplier gateway")
        supplier_gateway = StubHotelSupplierGateway()

    if settings.floa_configured:
        floa_gateway = FloaGatewayHTTP(
            base_url=settings.floa_base_url,
            client_id=settings.floa_client_id,
            client_secret=settings.floa_client_secret,
            timeout_seconds=settings.floa_timeout_seconds,
            token_retry_attempts=settings.floa_token_retry_attempts,
            token_retry_base_ms=settings.floa_token_retry_base_ms,
        )
    else:
        logger.warning("Floa credentials missing, using stub installment gateway")
        floa_gateway = StubFloaGateway()

    if settings.systempay_configured:
        systempay_gateway = SystempayGatewayHTTP(
            username=settings.systempay_rest_username,
            password=settings.systempay_rest_password,
            public_key=settings.systempay_sdk_public_key,
            create_payment_url=settings.systempay_create_payment_url,
        )
    else:
        logger.warning("Systempay credentials missing, using stub card gateway")
        systempay_gateway = StubSystempayGateway(public_key=settings.systempay_sdk_public_key)

    return {
        "supplier_gateway": supplier_gateway,
        "floa_gateway": floa_gateway,
        "systempay_gateway": systempay_gateway,
        "clock": SystemClock(),
        "uuid_generator": RealUUIDGenerator(),
    }


def build_use_cases(
    settings: Settings,
    repos: dict[str, Any],
    gateways: dict[str, Any],
) -> dict[str, Any]:
    tx_manager = repos["tx_manager"]
    clock = gateways["clock"]
    return {
        "prebook": CreatePrebookUseCase(
            supplier_gateway=gateways["supplier_gateway"],
            prebook_repo=repos["prebook_repo"],
            transaction_manager=tx_manager,
            clock=clock,
            prebook_ttl_seconds=settings.prebook_ttl_seconds,
        ),
        "booking_form": RequestBookingFormUseCase(
            supplier_gateway=gateways["supplier_gateway"],
            booking_form_repo=repos["booking_form_repo"],
            transaction_manager=tx_manager,
            clock=clock,
            uuid_generator=gateways["uuid_generator"],
        ),
        "start_booking": StartBookingUseCase(
            supplier_gateway=gateways["supplier_gateway"],
            payment_repo=repos["payment_repo"],
            booking_repo=repos["booking_repo"],
            transaction_manager=tx_manager,
            clock=clock,
        ),
        "check_booking": CheckBookingUseCase(
            supplier_gateway=gateways["supplier_gateway"],
            payment_repo=repos["payment_repo"],
            booking_repo=repos["booking_repo"],
            transaction_manager=tx_manager,
        ),
        "floa_hotel_deal": CreateFloaHotelDealUseCase(
            floa_gateway=gateways["floa_gateway"],
            booking_form_repo=repos["booking_form_repo"],
            payment_repo=repos["payment_repo"],
            transaction_manager=tx_manager,
            clock=clock,
            default_country_code=settings.floa_default_country_code,
            default_currency=settings.floa_default_currency,
        ),
        "floa_deal": ManageFloaDealUseCase(
            floa_gateway=gateways["floa_gateway"],
            notification_url=settings.floa_notification_url,
            default_currency=settings.floa_default_currency,
            default_country_code=settings.floa_default_country_code,
        ),
        "systempay_order": CreateSystempayOrderUseCase(
            systempay_gateway=gateways["systempay_gateway"],
            booking_form_repo=repos["booking_form_repo"],
            payment_repo=repos["payment_repo"],
            transaction_manager=tx_manager,
            clock=clock,
            ipn_url=settings.systempay_ipn_url,
        ),
        "systempay_webhook": HandleSystempayWebhookUseCase(
            payment_repo=repos["payment_repo"],
            booking_repo=repos["booking_repo"],
            transaction_manager=tx_manager,
            clock=clock,
            hmac_key=settings.systempay_hmac_key,
        ),
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> dict[str, Any]:
    if settings.use_in_memory:
        return build_use_cases(settings, _in_memory_bundle(), _gateway_bundle())

    if not session:
        raise RuntimeError("DB session not available")

    repos = {
        "prebook_repo": PrebookRepoSQL(session),
        "booking_form_repo": BookingFormRepoSQL(session),
        "payment_repo": PaymentRepoSQL(session),
        "booking_repo": BookingRepoSQL(session),
        "tx_manager": SQLAlchemyTransactionManager(session),
    }
    return build_use_cases(settings, repos, _gateway_bundle())
