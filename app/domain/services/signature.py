"""HMAC-SHA256 verification of card-gateway notifications (kr-hash over kr-answer)."""

import binascii
import hashlib
import hmac
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHM = "sha256_hmac"


@dataclass(frozen=True)
class SignatureCheck:
    valid: bool
    message: str


def compute_kr_hash(answer: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), answer.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_kr_hash(
    answer: str | None,
    received_hash: str | None,
    algorithm: str | None,
    secret: str | None,
) -> SignatureCheck:
    if not secret:
        # Non-production convenience: without a shared secret nothing can be verified.
        logger.warning("Systempay IPN: no HMAC key configured, skipping signature validation")
        return SignatureCheck(valid=True, message="no_hmac_key_configured")

    if not received_hash:
        return SignatureCheck(valid=False, message="missing_kr_hash")
    if answer is None:
        return SignatureCheck(valid=False, message="missing_kr_answer")

    algorithm = (algorithm or SUPPORTED_ALGORITHM).strip().lower()
    if algorithm != SUPPORTED_ALGORITHM:
        return SignatureCheck(valid=False, message=f"unsupported_hash_algorithm: {algorithm}")

    try:
        received = bytes.fromhex(received_hash.strip())
    except ValueError:
        return SignatureCheck(valid=False, message="invalid_hash_format")

    expected = binascii.unhexlify(compute_kr_hash(answer, secret))
    if not hmac.compare_digest(expected, received):
        return SignatureCheck(valid=False, message="signature_mismatch")
    return SignatureCheck(valid=True, message="signature_valid")
