import string
from datetime import datetime

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding expects a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def mint_merchant_reference(partner_order_id: str, now: datetime) -> str:
    """A fresh reference per payment attempt: providers reject reused references."""
    millis = int(now.timestamp() * 1000)
    return f"{partner_order_id}-{to_base36(millis)}"
