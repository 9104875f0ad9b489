"""
Capa de Dominio - Reservas de hotel y pagos.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.

Estructura:
- entities/: Estados y proveedores de pago
- value_objects/: Objetos de valor inmutables (Money)
- services/: Reglas puras (hashes, tokens de prebook, montos, elegibilidad, firmas)
- errors.py: Excepciones específicas del dominio
- constants.py: Constantes del dominio
"""
