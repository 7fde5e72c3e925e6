"""
Payment callback signature verification.

Razorpay signs a successful checkout as
    hex(HMAC_SHA256(key_secret, "{order_id}|{payment_id}"))
and the client forwards that signature to us. The comparison is constant-time
(hmac.compare_digest); a plain `==` would leak the matching prefix length.
"""
import hashlib
import hmac
import logging

from domain.errors import MissingParametersError

logger = logging.getLogger(__name__)


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}"
    return hmac.new(
        secret.encode("utf-8"),
        body.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """
    Return True iff `signature` is the gateway signature for this order/payment pair.

    Fails closed when the secret is empty.
    """
    if not secret:
        logger.error("Payment signing secret not configured, rejecting callback")
        return False
    if not signature:
        return False

    expected = compute_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def require_callback_fields(
    *,
    order_id: str | None,
    payment_id: str | None,
    signature: str | None,
    course_ids: list[str] | None,
    user_id: str | None,
) -> None:
    """Raise MissingParametersError naming every absent callback field."""
    fields = {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": signature,
        "courses": course_ids,
        "user_id": user_id,
    }
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise MissingParametersError(missing=missing)


class SignatureVerifier:
    """Holds the signing secret so callers never touch configuration."""

    def __init__(self, secret: str):
        self._secret = secret

    def __repr__(self) -> str:
        return "SignatureVerifier(secret=***)"

    def verify(self, order_id: str, payment_id: str, signature: str) -> bool:
        return verify_payment_signature(order_id, payment_id, signature, self._secret)
