"""Provider status vocabularies normalized to the internal payment status."""

from typing import Any, Mapping

from app.domain.entities.payment import PaymentProvider, PaymentStatus

SYSTEMPAY_STATUS_MAP: Mapping[str, PaymentStatus] = {
    "PAID": PaymentStatus.PAID,
    "ACCEPTED": PaymentStatus.PAID,
    "AUTHORISED": PaymentStatus.PAID,
    "CANCELED": PaymentStatus.FAILED,
    "CANCELLED": PaymentStatus.FAILED,
    "REFUSED": PaymentStatus.FAILED,
    "ABANDONED": PaymentStatus.FAILED,
    "FAILED": PaymentStatus.FAILED,
}

STATUS_MAPS: Mapping[PaymentProvider, Mapping[str, PaymentStatus]] = {
    PaymentProvider.SYSTEMPAY: SYSTEMPAY_STATUS_MAP,
}


def normalize_status(provider: PaymentProvider, raw_status: Any) -> PaymentStatus:
    """Unknown or missing values stay pending."""
    if not isinstance(raw_status, str):
        return PaymentStatus.PENDING
    return STATUS_MAPS.get(provider, {}).get(raw_status.strip().upper(), PaymentStatus.PENDING)
