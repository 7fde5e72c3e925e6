"""
Order service — price quotes and gateway order creation for course checkout.

build_price_quote() only reads: a checkout can be abandoned at the gateway,
so nothing is written until a verified callback arrives.
"""

import logging
import time
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from domain.constants import DEFAULT_CURRENCY, RECEIPT_PREFIX
from domain.enums import CheckoutState
from domain.errors import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    DuplicateCourseError,
    EmptyOrderError,
    GatewayOrderError,
    InvalidTotalError,
    PaymentCancelledError,
)
from domain.money import Money
from services import ledger_store
from services.razorpay_client import GatewayError, RazorpayClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    amount: Money
    receipt: str
    course_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def currency(self) -> str:
        return self.amount.currency


def new_receipt_token() -> str:
    return f"{RECEIPT_PREFIX}{int(time.time() * 1000)}"


def _repeated(course_ids: list[str]) -> list[str]:
    seen, repeated = set(), []
    for course_id in course_ids:
        if course_id in seen and course_id not in repeated:
            repeated.append(course_id)
        seen.add(course_id)
    return repeated


async def build_price_quote(
    db: AsyncSession,
    *,
    user_id: str,
    course_ids: list[str] | None,
    currency: str = DEFAULT_CURRENCY,
) -> PriceQuote:
    """
    Validate the requested courses and total their prices.

    Courses are checked in request order; the first missing course or the
    first course the user already owns ends the check.

    Raises:
        EmptyOrderError: no course ids
        DuplicateCourseError: a course id is repeated
        CourseNotFoundError: a course id does not resolve
        AlreadyEnrolledError: the user is already enrolled in a requested course
        InvalidTotalError: the total is not strictly positive
    """
    if not course_ids:
        raise EmptyOrderError()

    duplicates = _repeated(course_ids)
    if duplicates:
        raise DuplicateCourseError(duplicates)

    total = Money.zero(currency)
    for course_id in course_ids:
        course = await ledger_store.find_course(db, course_id)
        if course is None:
            raise CourseNotFoundError(course_id)

        if await ledger_store.is_enrolled(db, course_id=course_id, user_id=user_id):
            raise AlreadyEnrolledError(course_id)

        total = total + Money.from_major(course.price, currency)

    if not total.is_positive:
        raise InvalidTotalError()

    quote = PriceQuote(amount=total, receipt=new_receipt_token(), course_ids=tuple(course_ids))
    logger.info(
        f"Checkout {CheckoutState.QUOTED.value}: user={user_id} "
        f"courses={len(course_ids)} amount={quote.amount.minor} {currency} receipt={quote.receipt}"
    )
    return quote


async def capture_payment(
    db: AsyncSession,
    gateway: RazorpayClient,
    *,
    user_id: str,
    course_ids: list[str] | None,
    currency: str = DEFAULT_CURRENCY,
) -> dict:
    """
    Quote the courses and open a gateway order for the total.

    Returns:
        dict: the gateway order (its `id` is what the client pays against)

    Raises:
        Any build_price_quote error, PaymentCancelledError, or GatewayOrderError
    """
    quote = await build_price_quote(db, user_id=user_id, course_ids=course_ids, currency=currency)

    try:
        order = await gateway.create_order(quote.amount.minor, quote.currency, quote.receipt)
    except GatewayError as e:
        if e.is_cancelled:
            logger.info(f"Gateway order declined as cancelled for user={user_id} receipt={quote.receipt}")
            raise PaymentCancelledError() from e
        logger.error(f"Gateway order failed for user={user_id} receipt={quote.receipt}: {e}")
        raise GatewayOrderError(e.description) from e

    logger.info(
        f"Checkout {CheckoutState.GATEWAY_ORDER_CREATED.value}: user={user_id} "
        f"order={order.get('id')} receipt={quote.receipt}"
    )
    return order
