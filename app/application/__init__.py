"""
Capa de Aplicación - Reservas de hotel y pagos.

Esta capa contiene los casos de uso e interfaces (puertos).
Orquesta la lógica de negocio y define los contratos con la infraestructura.

Estructura:
- use_cases/: Prebook, formulario, pagos (Floa, Systempay), IPN y reserva
- interfaces/: Puertos (contratos para adaptadores)
"""

from app.application.interfaces import (
    BookingFormRecord,
    BookingFormRepo,
    BookingRecord,
    BookingRepo,
    Clock,
    FakeClock,
    FakeUUIDGenerator,
    FloaGateway,
    HotelSupplierGateway,
    PaymentRecord,
    PaymentRepo,
    PrebookRecord,
    PrebookRepo,
    RealUUIDGenerator,
    SystemClock,
    SystempayGateway,
    TransactionManager,
    UUIDGenerator,
)

__all__ = [
    # Interfaces - Repositories
    "PrebookRepo",
    "PrebookRecord",
    "BookingFormRepo",
    "BookingFormRecord",
    "PaymentRepo",
    "PaymentRecord",
    "BookingRepo",
    "BookingRecord",
    # Interfaces - Gateways
    "HotelSupplierGateway",
    "FloaGateway",
    "SystempayGateway",
    # Interfaces - Infrastructure
    "TransactionManager",
    # Interfaces - Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "UUIDGenerator",
    "RealUUIDGenerator",
    "FakeUUIDGenerator",
]
