"""
Domain enums used across services.
"""

from enum import Enum


class CheckoutState(str, Enum):
    """Lifecycle of one checkout attempt (logged, never persisted)."""
    REQUESTED = "Requested"
    QUOTED = "Quoted"
    GATEWAY_ORDER_CREATED = "GatewayOrderCreated"
    CALLBACK_RECEIVED = "CallbackReceived"
    VERIFIED_AND_ENROLLED = "VerifiedAndEnrolled"
    REJECTED_BAD_SIGNATURE = "RejectedBadSignature"
    REJECTED_MISSING_PARAMS = "RejectedMissingParams"


class EnrollmentStatus(str, Enum):
    ENROLLED = "ENROLLED"
    FAILED = "FAILED"
