"""
SQLAlchemy ORM models for the course platform ledger.

Tables:
    users            — students and instructors
    courses          — catalog entries with a price in major currency units
    course_students  — enrolled-students set of a course (one row per enrollment)
    course_progress  — per (course, user) progress record, completed videos
    user_courses     — user's course + progress relation lists

course_students deliberately has no unique (course_id, user_id) constraint:
duplicate enrollment is prevented by the checkout pre-check only.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, DateTime, Text, Numeric, ForeignKey, JSON, Index,
)

from database import Base


def new_object_id() -> str:
    """24-char hex id, same shape as the ids the frontend already stores."""
    return uuid.uuid4().hex[:24]


class User(Base):
    """Platform account (student or instructor)."""
    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_object_id)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, nullable=False, index=True)
    account_type = Column(String(20), nullable=False, default="Student")  # "Student" | "Instructor" | "Admin"
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Course(Base):
    """Catalog course. Price is stored in major units (rupees)."""
    __tablename__ = "courses"

    id = Column(String(24), primary_key=True, default=new_object_id)
    course_name = Column(String(200), nullable=False)
    course_description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    instructor_id = Column(String(24), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class CourseEnrollment(Base):
    """A user's membership in a course's enrolled-students set."""
    __tablename__ = "course_students"

    id = Column(String(24), primary_key=True, default=new_object_id)
    course_id = Column(String(24), ForeignKey("courses.id"), nullable=False, index=True)
    user_id = Column(String(24), ForeignKey("users.id"), nullable=False, index=True)
    enrolled_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("ix_course_students_course_user", "course_id", "user_id"),
    )


class CourseProgress(Base):
    """Progress tracking for one user in one course."""
    __tablename__ = "course_progress"

    id = Column(String(24), primary_key=True, default=new_object_id)
    course_id = Column(String(24), ForeignKey("courses.id"), nullable=False, index=True)
    user_id = Column(String(24), ForeignKey("users.id"), nullable=False, index=True)
    completed_videos = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)


class UserCourse(Base):
    """
    One append to the user's relation lists: the course id together with
    the progress record created for it.
    """
    __tablename__ = "user_courses"

    id = Column(String(24), primary_key=True, default=new_object_id)
    user_id = Column(String(24), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(24), ForeignKey("courses.id"), nullable=False)
    course_progress_id = Column(String(24), ForeignKey("course_progress.id"), nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow)
