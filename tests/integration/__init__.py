"""
Integration tests package.

Tests de integración contra SQLite in-memory (sqlite+aiosqlite) que verifican:
- Repositorios SQL: prebooks, formularios de reserva, pagos (apply_status idempotente) y reservas
- Reconciliación completa del webhook de Systempay sobre los repositorios SQL
- Health checks (/health, /health/db, /health/ready)
- Reintento ante deadlocks de MySQL (1213, 1205)

Para ejecutar solo tests de integración:
    pytest tests/integration/
"""
