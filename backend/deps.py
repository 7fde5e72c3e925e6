"""
Shared FastAPI dependencies.

Collaborators (gateway, signature verifier, mailer) are built from settings
here and nowhere else, so services receive explicit configuration and tests
can swap them through app.dependency_overrides.
"""

from __future__ import annotations

from config import settings
from middleware.auth import require_user_id
from services.mail_service import MailConfig, MailSender
from services.razorpay_client import GatewayConfig, RazorpayClient
from services.signature_service import SignatureVerifier

__all__ = [
    "require_user_id",
    "get_gateway_client",
    "get_signature_verifier",
    "get_mail_sender",
]


def get_gateway_client() -> RazorpayClient:
    return RazorpayClient(GatewayConfig.from_settings(settings))


def get_signature_verifier() -> SignatureVerifier:
    return SignatureVerifier(settings.razorpay_secret.get_secret_value())


def get_mail_sender() -> MailSender:
    return MailSender(MailConfig.from_settings(settings))
