"""Implementaciones in-memory para desarrollo y testing."""

from app.infrastructure.in_memory.booking_form_repo import InMemoryBookingFormRepo
from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.floa_gateway import StubFloaGateway
from app.infrastructure.in_memory.payment_repo import InMemoryPaymentRepo
from app.infrastructure.in_memory.prebook_repo import InMemoryPrebookRepo
from app.infrastructure.in_memory.supplier_gateway import StubHotelSupplierGateway
from app.infrastructure.in_memory.systempay_gateway import StubSystempayGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager

__all__ = [
    # Repositories
    "InMemoryPrebookRepo",
    "InMemoryBookingFormRepo",
    "InMemoryPaymentRepo",
    "InMemoryBookingRepo",
    # Gateways
    "StubHotelSupplierGateway",
    "StubFloaGateway",
    "StubSystempayGateway",
    # Infrastructure
    "NoopTransactionManager",
]
