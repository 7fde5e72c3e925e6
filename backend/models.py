"""
Pydantic models for request/response validation.

Request fields that the checkout flow treats as "required" are declared
Optional on purpose: an absent field has to reach the service layer and come
back as a MissingParameters (400) payload, not as FastAPI's generic 422.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class CheckoutBase(BaseModel):
    """Shared base — allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True)


# ── Requests ────────────────────────────────────────────────────────

class CaptureRequest(CheckoutBase):
    """POST /payment/capture"""
    courses: Optional[List[str]] = Field(
        default=None,
        description="Course ids to buy, in order",
    )


class VerifyPaymentRequest(CheckoutBase):
    """POST /payment/verify — fields exactly as the Razorpay checkout returns them."""
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    courses: Optional[List[str]] = None


class PaymentEmailRequest(CheckoutBase):
    """POST /payment/sendPaymentSuccessEmail"""
    order_id: Optional[str] = Field(default=None, alias="orderId")
    payment_id: Optional[str] = Field(default=None, alias="paymentId")
    amount: Optional[int] = Field(
        default=None,
        ge=0,
        description="Amount paid, in minor units (paise)",
    )


# ── Responses ───────────────────────────────────────────────────────

class GatewayOrderResponse(CheckoutBase):
    """The subset of a Razorpay order the frontend needs to open checkout."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    amount: int
    currency: str
    receipt: Optional[str] = None
    status: Optional[str] = None


class CaptureResponse(CheckoutBase):
    success: bool = True
    data: GatewayOrderResponse


class EnrollmentOutcomeResponse(CheckoutBase):
    course_id: str = Field(..., alias="courseId")
    status: str
    course_progress_id: Optional[str] = Field(default=None, alias="courseProgressId")
    notified: bool = False
    reason: Optional[str] = None


class VerifyPaymentData(CheckoutBase):
    enrolled: List[EnrollmentOutcomeResponse]


class VerifyPaymentResponse(CheckoutBase):
    success: bool = True
    message: str = "Payment Verified"
    data: Optional[VerifyPaymentData] = None


class MessageResponse(CheckoutBase):
    success: bool
    message: str
