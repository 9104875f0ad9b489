from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)

metadata = MetaData()

prebooks = Table(
    "prebooks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("offer_hash", String(255), nullable=False),
    Column("token", String(255), nullable=False),
    Column("request_id", String(128)),
    Column("summary", JSON),
    Column("raw_supplier_response", JSON),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("expires_at", DateTime(timezone=True), nullable=False),
    Index("ix_prebooks_token", "token"),
)

booking_forms = Table(
    "booking_forms",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("partner_order_id", String(64), nullable=False),
    Column("prebook_token", String(255), nullable=False),
    Column("supplier_order_id", String(64)),
    Column("item_id", String(64)),
    Column("amount", Numeric(12, 2)),
    Column("currency_code", String(3)),
    Column("form", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_booking_forms_partner_order_id", "partner_order_id"),
)

payments = Table(
    "payments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("provider", String(32), nullable=False),
    Column("status", String(32), nullable=False),
    Column("partner_order_id", String(64), nullable=False),
    Column("prebook_token", String(255)),
    Column("supplier_order_id", String(64)),
    Column("item_id", String(64)),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("currency_code", String(3), nullable=False),
    Column("external_reference", String(128)),
    Column("payload", JSON),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("provider", "external_reference", name="uq_payments_provider_reference"),
    Index("ix_payments_partner_order_id", "partner_order_id"),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("partner_order_id", String(64), nullable=False),
    Column("supplier_order_id", String(64)),
    Column("status", String(32), nullable=False),
    Column("user_email", String(255)),
    Column("user_phone", String(50)),
    Column("user_name", String(255)),
    Column("amount", Numeric(12, 2)),
    Column("currency_code", String(3)),
    Column("raw", JSON),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_bookings_partner_order_id", "partner_order_id"),
)
