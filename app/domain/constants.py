PREBOOK_TTL_SECONDS_DEFAULT = 1800

BOOKING_STATUS_STARTED = "started"
BOOKING_STATUS_PAID = "paid"
BOOKING_STATUS_PAYMENT_FAILED = "payment_failed"

DEFAULT_CURRENCY = "EUR"
DEFAULT_BOOKING_LANGUAGE = "fr"
DEFAULT_FORM_LANGUAGE = "en"
DEFAULT_PAYMENT_TYPE = "deposit"
