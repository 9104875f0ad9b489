"""Excepciones de dominio para el flujo de reserva de hotel y pagos."""

from typing import Any


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        code: str | None = None,
        http_status: int | None = None,
        debug: Any = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        if http_status is not None:
            self.http_status = http_status
        self.debug = debug
        super().__init__(self.message)


# === Errores de validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"{field}: {message}",
            code="validation_error",
            http_status=400,
        )
        self.field = field


class InvalidHashError(DomainError):
    """El hash de tarifa no es reservable (vacío o de tipo match-hash)."""

    def __init__(self, raw_hash: Any):
        super().__init__(
            message="invalid hash: provide sr-... or h-...",
            code="invalid_hash",
            http_status=400,
            debug={"hash": raw_hash},
        )
        self.raw_hash = raw_hash


# === Errores de prebook ===


class NoFreshRatesError(DomainError):
    """La tarifa expiró y el refresco no devolvió una tarifa reservable."""

    def __init__(self, message: str, debug: Any = None):
        super().__init__(
            message=message,
            code="no_fresh_rates",
            http_status=400,
            debug=debug,
        )


# === Errores de formulario y monto ===


class MissingBookingFormError(DomainError):
    """No existe un formulario de reserva persistido para la orden."""

    def __init__(self, partner_order_id: str):
        super().__init__(
            message=f"booking form not found for partner_order_id {partner_order_id}",
            code="booking_form_not_found",
            http_status=404,
        )
        self.partner_order_id = partner_order_id


class InvalidAmountError(DomainError):
    """No se pudo derivar un monto cobrable del formulario de reserva."""

    def __init__(self, partner_order_id: str, candidates: list[tuple[str, Any]]):
        super().__init__(
            message=f"invalid amount for partner_order_id {partner_order_id}",
            code="invalid_amount",
            http_status=400,
            debug={
                "partner_order_id": partner_order_id,
                "candidates": [{"source": name, "value": value} for name, value in candidates],
            },
        )
        self.partner_order_id = partner_order_id
        self.candidates = candidates


# === Errores de pago ===


class NotEligibleError(DomainError):
    """Resultado de negocio negativo: el cliente no es elegible al pago fraccionado."""

    def __init__(self, eligibility: Any, product_code: str, country_code: str):
        super().__init__(
            message="Not eligible",
            code="not_eligible",
            http_status=400,
            debug=eligibility,
        )
        self.eligibility = eligibility
        self.product_code = product_code
        self.country_code = country_code


class MissingDealReferenceError(DomainError):
    """Operación sobre un deal sin referencia."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"dealReference is required to {operation} a Floa deal",
            code="missing_deal_reference",
            http_status=400,
        )
        self.operation = operation


class PaymentRequiredBeforeBookingFinishError(DomainError):
    """La orden no tiene un pago confirmado; no se puede finalizar la reserva."""

    def __init__(
        self,
        partner_order_id: str,
        payment_status: str | None,
        provider: str | None,
    ):
        super().__init__(
            message="payment_required_before_booking_finish",
            code="payment_required_before_booking_finish",
            http_status=403,
            debug={
                "partner_order_id": partner_order_id,
                "payment_status": payment_status,
                "provider": provider,
            },
        )
        self.partner_order_id = partner_order_id
        self.payment_status = payment_status
        self.provider = provider


class SignatureInvalidError(DomainError):
    """Firma HMAC de la notificación inválida."""

    def __init__(self, reason: str):
        super().__init__(
            message="Invalid signature",
            code="signature_invalid",
            http_status=401,
            debug={"reason": reason},
        )
        self.reason = reason


# === Errores de proveedores externos ===


class UpstreamError(DomainError):
    """El proveedor (hotelero o de pago) respondió con error o no respondió."""

    def __init__(
        self,
        provider: str,
        reason: str,
        http_status: int = 502,
        debug: Any = None,
        request_id: str | None = None,
        status: str = "error",
    ):
        super().__init__(
            message=reason,
            code=reason,
            http_status=http_status,
            debug=debug,
        )
        self.provider = provider
        self.reason = reason
        self.request_id = request_id
        self.status = status

    @property
    def debug_error(self) -> str | None:
        if isinstance(self.debug, dict):
            value = self.debug.get("error")
            return value if isinstance(value, str) else None
        return None


# === Errores de persistencia ===


class PersistenceError(DomainError):
    """Fallo al escribir en el almacén; se registra y nunca se expone al cliente."""

    def __init__(self, entity: str, message: str):
        super().__init__(
            message=f"could not persist {entity}: {message}",
            code="persistence_error",
            http_status=500,
        )
        self.entity = entity
