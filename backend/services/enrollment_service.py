"""
Enrollment service — turns a verified payment callback into course enrollments.

Per course, in the order given:
    a. add the user to the course's enrolled-students set
    b. create an empty CourseProgress record
    c. append course + progress to the user's relation lists
    d. email an enrollment confirmation

Each step commits on its own and there is no compensation. Processing stops
at the first failing course; courses before it stay enrolled. If step (d)
fails, that course is already committed. Callers must therefore read any
error from here as "a prefix of the requested courses may be enrolled"; the
raised error's details list exactly which ones.

A course id repeated inside one callback is enrolled once. Re-running the
same callback enrolls again; nothing deduplicates across calls.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.enums import CheckoutState, EnrollmentStatus
from domain.errors import (
    CourseNotFoundError,
    DomainError,
    EmailDeliveryError,
    EnrollmentError,
    InvalidSignatureError,
    MissingParametersError,
    UserNotFoundError,
)
from services import ledger_store
from services.mail_service import MailSender
from services.mail_templates import course_enrollment_email
from services.signature_service import SignatureVerifier, require_callback_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentCallback:
    """What the client sends back after paying at the gateway. Untrusted until verified."""
    order_id: str | None
    payment_id: str | None
    signature: str | None
    course_ids: list[str] | None
    user_id: str | None


@dataclass
class EnrollmentOutcome:
    course_id: str
    status: EnrollmentStatus
    progress_id: str | None = None
    notified: bool = False
    reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_id,
            "status": self.status.value,
            "courseProgressId": self.progress_id,
            "notified": self.notified,
            "reason": self.reason,
        }


def _failure_details(outcomes: list[EnrollmentOutcome], failed: EnrollmentOutcome) -> dict:
    return {
        "enrolled": [o.course_id for o in outcomes if o.status == EnrollmentStatus.ENROLLED],
        "failed_course": failed.course_id,
        "outcomes": [o.to_dict() for o in outcomes],
    }


async def enroll_student(
    db: AsyncSession,
    mailer: MailSender,
    *,
    user_id: str,
    course_ids: list[str],
) -> list[EnrollmentOutcome]:
    """
    Enroll user_id into each course in order.

    Returns:
        One ENROLLED outcome per course when everything succeeds.

    Raises:
        CourseNotFoundError / UserNotFoundError / EmailDeliveryError / EnrollmentError
        for the first course that fails. `details["enrolled"]` lists the
        courses committed before (and, for an email failure, including) it.
        An EnrollmentError raised after step (a) also sets
        `details["partially_committed"]` to the course left without progress.
    """
    outcomes: list[EnrollmentOutcome] = []

    for course_id in course_ids:
        outcome = EnrollmentOutcome(course_id=course_id, status=EnrollmentStatus.FAILED)
        outcomes.append(outcome)
        course = None
        try:
            course = await ledger_store.push_enrolled_student(db, course_id=course_id, user_id=user_id)
            if course is None:
                outcome.reason = "course_not_found"
                raise CourseNotFoundError(
                    course_id,
                    message="Course not found",
                    details=_failure_details(outcomes, outcome),
                )

            progress = await ledger_store.create_course_progress(db, course_id=course_id, user_id=user_id)
            outcome.progress_id = progress.id

            student = await ledger_store.push_user_enrollment(
                db, user_id=user_id, course_id=course_id, progress_id=progress.id
            )
            if student is None:
                outcome.reason = "user_not_found"
                raise UserNotFoundError(user_id, details=_failure_details(outcomes, outcome))

            # Committed from here on; a mail failure below does not undo it.
            outcome.status = EnrollmentStatus.ENROLLED
            logger.info(f"Enrolled user={user_id} in course={course_id} progress={progress.id}")

            try:
                await mailer.send(
                    student.email,
                    f"Successfully Enrolled into {course.course_name}",
                    course_enrollment_email(course.course_name, student.display_name),
                )
            except EmailDeliveryError as e:
                outcome.reason = "email_failed"
                raise EmailDeliveryError(e.message, details=_failure_details(outcomes, outcome)) from e
            outcome.notified = True

        except DomainError:
            logger.error(
                f"Enrollment stopped at course={course_id} for user={user_id} "
                f"({outcome.reason}); enrolled so far: "
                f"{[o.course_id for o in outcomes if o.status == EnrollmentStatus.ENROLLED]}"
            )
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            outcome.reason = "store_error"
            logger.error(f"Store failure enrolling user={user_id} in course={course_id}: {e}", exc_info=True)
            details = _failure_details(outcomes, outcome)
            if course is not None:
                # step (a) already committed for this course
                details["partially_committed"] = course_id
            raise EnrollmentError(details=details) from e

    return outcomes


async def verify_and_enroll(
    db: AsyncSession,
    verifier: SignatureVerifier,
    mailer: MailSender,
    *,
    callback: PaymentCallback,
) -> list[EnrollmentOutcome]:
    """
    Verify a gateway callback and enroll the user in the paid-for courses.

    Raises:
        MissingParametersError before any signature work if a field is absent
        InvalidSignatureError if the signature does not match
        any enroll_student() error
    """
    logger.info(
        f"Checkout {CheckoutState.CALLBACK_RECEIVED.value}: user={callback.user_id} order={callback.order_id}"
    )

    try:
        require_callback_fields(
            order_id=callback.order_id,
            payment_id=callback.payment_id,
            signature=callback.signature,
            course_ids=callback.course_ids,
            user_id=callback.user_id,
        )
    except MissingParametersError as e:
        logger.warning(
            f"Checkout {CheckoutState.REJECTED_MISSING_PARAMS.value}: "
            f"user={callback.user_id} missing={e.details.get('missing')}"
        )
        raise

    if not verifier.verify(callback.order_id, callback.payment_id, callback.signature):
        logger.warning(
            f"Checkout {CheckoutState.REJECTED_BAD_SIGNATURE.value}: user={callback.user_id} "
            f"order={callback.order_id} payment={callback.payment_id} "
            f"provided_signature={callback.signature[:8]}..."
        )
        raise InvalidSignatureError()

    outcomes = await enroll_student(
        db, mailer, user_id=callback.user_id, course_ids=list(dict.fromkeys(callback.course_ids))
    )
    logger.info(
        f"Checkout {CheckoutState.VERIFIED_AND_ENROLLED.value}: user={callback.user_id} "
        f"order={callback.order_id} courses={[o.course_id for o in outcomes]}"
    )
    return outcomes
