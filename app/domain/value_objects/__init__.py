"""Value Objects del dominio de reservas de hotel."""

from app.domain.value_objects.money import Money

__all__ = [
    "Money",
]
