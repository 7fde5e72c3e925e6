"""
Ledger store — persistence primitives for users, courses and enrollments.

Each write is its own committed unit, the SQL equivalent of a single-document
atomic update. Nothing here spans more than one course: callers that loop over
several courses get per-course atomicity only.
"""

from sqlalchemy import select, exists
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import User, Course, CourseEnrollment, CourseProgress, UserCourse


async def find_course(db: AsyncSession, course_id: str) -> Course | None:
    return await db.get(Course, course_id)


async def find_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def is_enrolled(db: AsyncSession, *, course_id: str, user_id: str) -> bool:
    """True when user_id is in the course's enrolled-students set."""
    res = await db.execute(
        select(
            exists().where(
                CourseEnrollment.course_id == course_id,
                CourseEnrollment.user_id == user_id,
            )
        )
    )
    return bool(res.scalar())


async def push_enrolled_student(db: AsyncSession, *, course_id: str, user_id: str) -> Course | None:
    """
    Add user_id to the course's enrolled-students set and return the course.

    Returns None (and writes nothing) when the course does not exist.
    No uniqueness check: pushing twice creates two enrollment rows.
    """
    course = await db.get(Course, course_id)
    if course is None:
        return None

    db.add(CourseEnrollment(course_id=course_id, user_id=user_id))
    await db.commit()
    return course


async def create_course_progress(db: AsyncSession, *, course_id: str, user_id: str) -> CourseProgress:
    progress = CourseProgress(course_id=course_id, user_id=user_id, completed_videos=[])
    db.add(progress)
    await db.commit()
    return progress


async def push_user_enrollment(
    db: AsyncSession,
    *,
    user_id: str,
    course_id: str,
    progress_id: str,
) -> User | None:
    """
    Append (course_id, progress_id) to the user's relation lists and return the user.

    Returns None when the user does not exist.
    """
    user = await db.get(User, user_id)
    if user is None:
        return None

    db.add(UserCourse(user_id=user_id, course_id=course_id, course_progress_id=progress_id))
    await db.commit()
    return user


async def list_enrolled_students(db: AsyncSession, course_id: str) -> list[str]:
    res = await db.execute(
        select(CourseEnrollment.user_id)
        .where(CourseEnrollment.course_id == course_id)
        .order_by(CourseEnrollment.enrolled_at)
    )
    return list(res.scalars().all())


async def list_user_courses(db: AsyncSession, user_id: str) -> list[UserCourse]:
    res = await db.execute(
        select(UserCourse)
        .where(UserCourse.user_id == user_id)
        .order_by(UserCourse.added_at)
    )
    return list(res.scalars().all())


async def list_course_progress(db: AsyncSession, *, user_id: str, course_id: str | None = None) -> list[CourseProgress]:
    stmt = select(CourseProgress).where(CourseProgress.user_id == user_id)
    if course_id is not None:
        stmt = stmt.where(CourseProgress.course_id == course_id)
    res = await db.execute(stmt.order_by(CourseProgress.created_at))
    return list(res.scalars().all())
