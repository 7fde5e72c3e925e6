"""
Payment receipt email, independent of enrollment.

Lets a client re-request the "payment received" email, e.g. when the
enrollment call's own notification failed.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from domain.constants import DEFAULT_CURRENCY
from domain.errors import MissingParametersError, UserNotFoundError
from domain.money import Money
from services import ledger_store
from services.mail_service import MailSender
from services.mail_templates import payment_success_email

logger = logging.getLogger(__name__)


async def send_payment_receipt(
    db: AsyncSession,
    mailer: MailSender,
    *,
    user_id: str | None,
    order_id: str | None,
    payment_id: str | None,
    amount_minor: int | None,
    currency: str = DEFAULT_CURRENCY,
) -> None:
    fields = {"orderId": order_id, "paymentId": payment_id, "amount": amount_minor, "user_id": user_id}
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise MissingParametersError("Please provide all the details", missing=missing)

    student = await ledger_store.find_user(db, user_id)
    if student is None:
        raise UserNotFoundError(user_id)

    amount = Money(amount_minor, currency)
    await mailer.send(
        student.email,
        "Payment Received",
        payment_success_email(student.display_name, amount.major, order_id, payment_id),
    )
    logger.info(f"Payment receipt sent to user={user_id} order={order_id} amount={amount}")
