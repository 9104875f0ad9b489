"""Entidades del dominio de reservas de hotel."""

from app.domain.entities.payment import PaymentProvider, PaymentStatus

__all__ = [
    "PaymentProvider",
    "PaymentStatus",
]
