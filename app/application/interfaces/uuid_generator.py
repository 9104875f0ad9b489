"""Interface UUIDGenerator - Puerto para generación de identificadores de orden."""

import uuid
from abc import ABC, abstractmethod


class UUIDGenerator(ABC):
    """
    Puerto para generación de identificadores únicos.

    Permite inyectar implementaciones fake para testing determinista.
    """

    @abstractmethod
    def generate_partner_order_id(self) -> str:
        """
        Genera el partner_order_id que correlaciona formulario, pago y reserva.

        Returns:
            String con UUID v4 en formato estándar.
        """
        raise NotImplementedError


class RealUUIDGenerator(UUIDGenerator):
    """Implementación real que genera UUIDs aleatorios."""

    def generate_partner_order_id(self) -> str:
        return str(uuid.uuid4())


class FakeUUIDGenerator(UUIDGenerator):
    """Implementación fake para testing; genera valores predecibles."""

    def __init__(self, prefix: str = "order"):
        self._prefix = prefix
        self._counter = 0

    def generate_partner_order_id(self) -> str:
        self._counter += 1
        return f"{self._prefix}-{self._counter:04d}"

    def reset(self) -> None:
        self._counter = 0
