"""
Payment endpoints — course checkout, callback verification, receipt email.

Endpoints:
    POST /payment/capture                  — quote courses, open a Razorpay order
    POST /payment/verify                   — verify the checkout signature, enroll
    POST /payment/sendPaymentSuccessEmail  — (re)send the payment receipt

All three act on the authenticated user. Failures are raised as DomainError
subclasses and rendered by the handlers in main.py.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from deps import get_gateway_client, get_mail_sender, get_signature_verifier, require_user_id
from domain.responses import success_response
from models import (
    CaptureRequest,
    CaptureResponse,
    MessageResponse,
    PaymentEmailRequest,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from services import enrollment_service, notification_service, order_service
from services.mail_service import MailSender
from services.razorpay_client import RazorpayClient
from services.signature_service import SignatureVerifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["payments"])


@router.post("/capture", response_model=CaptureResponse)
async def capture_payment(
    request: CaptureRequest,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    gateway: RazorpayClient = Depends(get_gateway_client),
):
    """Quote the requested courses and create the gateway order to pay against."""
    order = await order_service.capture_payment(
        db,
        gateway,
        user_id=user_id,
        course_ids=request.courses,
        currency=settings.currency,
    )
    return success_response(data=order)


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
    mailer: MailSender = Depends(get_mail_sender),
):
    """
    Verify the Razorpay checkout signature and enroll the user.

    Not idempotent: replaying a valid callback enrolls the user again.
    """
    callback = enrollment_service.PaymentCallback(
        order_id=request.razorpay_order_id,
        payment_id=request.razorpay_payment_id,
        signature=request.razorpay_signature,
        course_ids=request.courses,
        user_id=user_id,
    )
    outcomes = await enrollment_service.verify_and_enroll(db, verifier, mailer, callback=callback)
    return success_response(
        message="Payment Verified",
        data={"enrolled": [o.to_dict() for o in outcomes]},
    )


@router.post("/sendPaymentSuccessEmail", response_model=MessageResponse)
async def send_payment_success_email(
    request: PaymentEmailRequest,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    mailer: MailSender = Depends(get_mail_sender),
):
    await notification_service.send_payment_receipt(
        db,
        mailer,
        user_id=user_id,
        order_id=request.order_id,
        payment_id=request.payment_id,
        amount_minor=request.amount,
        currency=settings.currency,
    )
    return success_response(message="Email sent successfully")
