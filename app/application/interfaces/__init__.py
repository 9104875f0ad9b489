"""Interfaces (Puertos) de la capa de aplicación."""

from app.application.interfaces.booking_form_repo import BookingFormRecord, BookingFormRepo
from app.application.interfaces.booking_repo import BookingRecord, BookingRepo
from app.application.interfaces.clock import Clock, FakeClock, SystemClock
from app.application.interfaces.floa_gateway import FloaGateway
from app.application.interfaces.payment_repo import PaymentRecord, PaymentRepo
from app.application.interfaces.prebook_repo import PrebookRecord, PrebookRepo
from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.application.interfaces.systempay_gateway import SystempayGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import (
    FakeUUIDGenerator,
    RealUUIDGenerator,
    UUIDGenerator,
)

__all__ = [
    # Repositories
    "PrebookRepo",
    "PrebookRecord",
    "BookingFormRepo",
    "BookingFormRecord",
    "PaymentRepo",
    "PaymentRecord",
    "BookingRepo",
    "BookingRecord",
    # Gateways
    "HotelSupplierGateway",
    "FloaGateway",
    "SystempayGateway",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "UUIDGenerator",
    "RealUUIDGenerator",
    "FakeUUIDGenerator",
]
