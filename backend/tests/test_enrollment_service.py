"""
Unit tests for the enrollment service.

Tests the per-course enrollment steps, stop-at-first-failure with partial
commit, notification failure after commit, callback verification, and the
known non-idempotency of replayed callbacks.
"""
import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from domain.enums import EnrollmentStatus
from domain.errors import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    EmailDeliveryError,
    EnrollmentError,
    InvalidSignatureError,
    MissingParametersError,
    UserNotFoundError,
)
from services import enrollment_service, ledger_store, order_service
from services.enrollment_service import PaymentCallback
from tests.fakes import sign

MISSING_ID = "ffffffffffffffffffffffff"


def _callback(user_id, course_ids, order_id="order_abc", payment_id="pay_xyz", signature=None):
    return PaymentCallback(
        order_id=order_id,
        payment_id=payment_id,
        signature=signature if signature is not None else sign(order_id, payment_id),
        course_ids=course_ids,
        user_id=user_id,
    )


@pytest.mark.integration
@pytest.mark.asyncio
async def test_enroll_two_courses(db_session, sample_user, make_course, fake_mailer):
    c1 = await make_course("Web Dev", 500)
    c2 = await make_course("DSA", 300)

    outcomes = await enrollment_service.enroll_student(
        db_session, fake_mailer, user_id=sample_user.id, course_ids=[c1.id, c2.id]
    )

    assert [o.course_id for o in outcomes] == [c1.id, c2.id]
    assert all(o.status == EnrollmentStatus.ENROLLED for o in outcomes)
    assert all(o.notified for o in outcomes)

    for course in (c1, c2):
        assert await ledger_store.list_enrolled_students(db_session, course.id) == [sample_user.id]
        progress = await ledger_store.list_course_progress(db_session, user_id=sample_user.id, course_id=course.id)
        assert len(progress) == 1
        assert progress[0].completed_videos == []

    relations = await ledger_store.list_user_courses(db_session, sample_user.id)
    assert {r.course_id for r in relations} == {c1.id, c2.id}
    assert {r.course_progress_id for r in relations} == {o.progress_id for o in outcomes}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_enrollment_email_contents(db_session, make_user, make_course, fake_mailer):
    user = await make_user("Ravi", "Kumar", email="ravi@example.com")
    course = await make_course("Intro to Rust", 400)

    await enrollment_service.enroll_student(
        db_session, fake_mailer, user_id=user.id, course_ids=[course.id]
    )

    assert len(fake_mailer.sent) == 1
    mail = fake_mailer.sent[0]
    assert mail["to"] == "ravi@example.com"
    assert mail["subject"] == "Successfully Enrolled into Intro to Rust"
    assert "Ravi Kumar" in mail["body"]
    assert "Intro to Rust" in mail["body"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_missing_course_keeps_earlier_enrollment(db_session, sample_user, make_course, fake_mailer):
    """[A, B] with B missing: A stays enrolled, B fails with CourseNotFound."""
    a = await make_course("A", 500)

    with pytest.raises(CourseNotFoundError) as exc_info:
        await enrollment_service.enroll_student(
            db_session, fake_mailer, user_id=sample_user.id, course_ids=[a.id, MISSING_ID]
        )

    err = exc_info.value
    assert err.status_code == 404
    assert err.details["enrolled"] == [a.id]
    assert err.details["failed_course"] == MISSING_ID

    assert await ledger_store.list_enrolled_students(db_session, a.id) == [sample_user.id]
    assert len(await ledger_store.list_course_progress(db_session, user_id=sample_user.id)) == 1
    assert [r.course_id for r in await ledger_store.list_user_courses(db_session, sample_user.id)] == [a.id]
    assert fake_mailer.attempts == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_processing_stops_at_first_failure(db_session, sample_user, make_course, fake_mailer):
    a = await make_course("A", 500)
    c = await make_course("C", 100)

    with pytest.raises(CourseNotFoundError):
        await enrollment_service.enroll_student(
            db_session, fake_mailer, user_id=sample_user.id, course_ids=[a.id, MISSING_ID, c.id]
        )

    assert await ledger_store.list_enrolled_students(db_session, c.id) == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_email_failure_after_commit(db_session, sample_user, make_course, fake_mailer):
    a = await make_course("A", 500)
    b = await make_course("B", 300)
    fake_mailer.fail_on_attempt = 1

    with pytest.raises(EmailDeliveryError) as exc_info:
        await enrollment_service.enroll_student(
            db_session, fake_mailer, user_id=sample_user.id, course_ids=[a.id, b.id]
        )

    err = exc_info.value
    assert err.status_code == 500
    assert err.details["enrolled"] == [a.id]
    assert err.details["failed_course"] == a.id

    # A committed before the mail step; B never started
    assert await ledger_store.list_enrolled_students(db_session, a.id) == [sample_user.id]
    assert await ledger_store.list_enrolled_students(db_session, b.id) == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unknown_user(db_session, make_course, fake_mailer):
    a = await make_course("A", 500)

    with pytest.raises(UserNotFoundError) as exc_info:
        await enrollment_service.enroll_student(
            db_session, fake_mailer, user_id=MISSING_ID, course_ids=[a.id]
        )
    assert exc_info.value.details["failed_course"] == a.id
    assert fake_mailer.attempts == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_store_failure_mid_course(db_session, sample_user, make_course, fake_mailer, monkeypatch):
    """[A, B] with the progress insert failing for B: A stays, B is left half-written."""
    a = await make_course("A", 500)
    b = await make_course("B", 300)
    # rollback expires loaded instances; keep plain ids
    a_id, b_id, user_id = a.id, b.id, sample_user.id
    real_create = ledger_store.create_course_progress

    async def flaky_create(db, *, course_id, user_id):
        if course_id == b_id:
            raise OperationalError("INSERT INTO course_progress", {}, Exception("disk I/O error"))
        return await real_create(db, course_id=course_id, user_id=user_id)

    monkeypatch.setattr(ledger_store, "create_course_progress", flaky_create)

    with pytest.raises(EnrollmentError) as exc_info:
        await enrollment_service.enroll_student(
            db_session, fake_mailer, user_id=user_id, course_ids=[a_id, b_id]
        )

    err = exc_info.value
    assert err.status_code == 500
    assert err.details["enrolled"] == [a_id]
    assert err.details["failed_course"] == b_id
    assert err.details["partially_committed"] == b_id

    # B keeps its enrolled-students row but has no progress or user relation
    assert await ledger_store.list_enrolled_students(db_session, b_id) == [user_id]
    assert await ledger_store.list_course_progress(db_session, user_id=user_id, course_id=b_id) == []
    assert [r.course_id for r in await ledger_store.list_user_courses(db_session, user_id)] == [a_id]

    # and a later checkout for B is declined as already enrolled
    with pytest.raises(AlreadyEnrolledError):
        await order_service.build_price_quote(db_session, user_id=user_id, course_ids=[b_id])


@pytest.mark.integration
@pytest.mark.asyncio
async def test_store_failure_on_first_step_leaves_nothing(db_session, sample_user, make_course, fake_mailer, monkeypatch):
    a = await make_course("A", 500)

    async def failing_push(db, *, course_id, user_id):
        raise OperationalError("INSERT INTO course_students", {}, Exception("database is locked"))

    monkeypatch.setattr(ledger_store, "push_enrolled_student", failing_push)

    with pytest.raises(EnrollmentError) as exc_info:
        await enrollment_service.enroll_student(
            db_session, fake_mailer, user_id=sample_user.id, course_ids=[a.id]
        )

    assert exc_info.value.details["enrolled"] == []
    assert "partially_committed" not in exc_info.value.details


# ── verify_and_enroll ────────────────────────────────────────────────


@pytest.mark.integration
@pytest.mark.asyncio
async def test_verify_and_enroll(db_session, sample_user, make_course, fake_mailer, verifier):
    a = await make_course("A", 500)

    outcomes = await enrollment_service.verify_and_enroll(
        db_session, verifier, fake_mailer, callback=_callback(sample_user.id, [a.id])
    )

    assert [o.status for o in outcomes] == [EnrollmentStatus.ENROLLED]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_bad_signature_enrolls_nobody(db_session, sample_user, make_course, fake_mailer, verifier):
    a = await make_course("A", 500)
    cb = _callback(sample_user.id, [a.id], signature=sign("order_abc", "pay_other"))

    with pytest.raises(InvalidSignatureError) as exc_info:
        await enrollment_service.verify_and_enroll(db_session, verifier, fake_mailer, callback=cb)

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Payment Failed: Invalid signature"
    assert await ledger_store.list_enrolled_students(db_session, a.id) == []
    assert fake_mailer.attempts == 0


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["order_id", "payment_id", "signature", "course_ids"])
async def test_missing_field_rejected_before_hmac(db_session, sample_user, fake_mailer, verifier, field):
    values = dict(order_id="order_abc", payment_id="pay_xyz", signature="deadbeef", course_ids=["c1"])
    values[field] = None
    cb = PaymentCallback(user_id=sample_user.id, **values)

    with patch("services.signature_service.compute_signature") as hmac_spy:
        with pytest.raises(MissingParametersError):
            await enrollment_service.verify_and_enroll(db_session, verifier, fake_mailer, callback=cb)
        hmac_spy.assert_not_called()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_replayed_callback_enrolls_twice(db_session, sample_user, make_course, fake_mailer, verifier):
    """
    Known non-idempotency: the verify step has no duplicate check, so a
    replayed valid callback creates a second enrollment record.
    """
    a = await make_course("A", 500)
    cb = _callback(sample_user.id, [a.id])

    await enrollment_service.verify_and_enroll(db_session, verifier, fake_mailer, callback=cb)
    await enrollment_service.verify_and_enroll(db_session, verifier, fake_mailer, callback=cb)

    assert await ledger_store.list_enrolled_students(db_session, a.id) == [sample_user.id, sample_user.id]
    assert len(await ledger_store.list_course_progress(db_session, user_id=sample_user.id, course_id=a.id)) == 2
    assert len(fake_mailer.sent) == 2


@pytest.mark.integration
@pytest.mark.asyncio
async def test_repeated_course_in_callback_enrolled_once(db_session, sample_user, make_course, fake_mailer, verifier):
    a = await make_course("A", 500)

    outcomes = await enrollment_service.verify_and_enroll(
        db_session, verifier, fake_mailer, callback=_callback(sample_user.id, [a.id, a.id])
    )

    assert [o.course_id for o in outcomes] == [a.id]
    assert await ledger_store.list_enrolled_students(db_session, a.id) == [sample_user.id]
    assert fake_mailer.attempts == 1
