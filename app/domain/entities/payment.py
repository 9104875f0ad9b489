"""Estados y proveedores de pago."""

from enum import Enum


class PaymentStatus(str, Enum):
    """
    Estados posibles de un pago.

    pending -> paid | failed. Los estados paid y failed son terminales para
    notificaciones no terminales: un pending tardío nunca revierte un pago cerrado.
    """

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PaymentStatus.PAID, PaymentStatus.FAILED)


class PaymentProvider(str, Enum):
    """
    Proveedores de pago soportados.

    FLOA es el proveedor de pago fraccionado (installment) y SYSTEMPAY la pasarela
    de tarjeta (card).
    """

    FLOA = "floa"
    SYSTEMPAY = "systempay"


TERMINAL_STATUSES = frozenset(status.value for status in PaymentStatus if status.is_terminal)
