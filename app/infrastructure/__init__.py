"""
Capa de Infraestructura - Reservas de hotel y pagos.

Esta capa contiene las implementaciones concretas de los puertos (interfaces).
Incluye adaptadores para bases de datos y gateways externos.

Estructura:
- db/: Tablas, repositorios SQL y transacciones
- gateways/: Clientes HTTP de ETG, Floa y Systempay
- in_memory/: Implementaciones in-memory y stubs para desarrollo y testing
- circuit_breaker.py: Breakers por proveedor
"""

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

__all__ = [
    # Database - Repositories SQL
    "PrebookRepoSQL",
    "BookingFormRepoSQL",
    "PaymentRepoSQL",
    "BookingRepoSQL",
    "SQLAlchemyTransactionManager",
    # Gateways
    "ETGGatewayHTTP",
    "FloaGatewayHTTP",
    "SystempayGatewayHTTP",
    # In-Memory Implementations
    "InMemoryPrebookRepo",
    "InMemoryBookingFormRepo",
    "InMemoryPaymentRepo",
    "InMemoryBookingRepo",
    "NoopTransactionManager",
    "StubHotelSupplierGateway",
    "StubFloaGateway",
    "StubSystempayGateway",
]
