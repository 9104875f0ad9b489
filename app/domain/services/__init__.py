"""Reglas de negocio puras del flujo de reserva y pago."""
