"""Course enrollment with a bounded, atomically maintained counter."""
from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from eduverse.models import Course, Enrollment, User

logger = logging.getLogger(__name__)

__all__ = [
    "EnrollmentError",
    "CourseNotFoundError",
    "CourseFullError",
    "AlreadyEnrolledError",
    "NotEnrolledError",
    "enroll",
    "unenroll",
]


class EnrollmentError(ValueError):
    """Base class for rejected enrollment changes."""


class CourseNotFoundError(LookupError):
    """Raised when the course code does not exist."""


class CourseFullError(EnrollmentError):
    """Raised when the course has no free seat."""


class AlreadyEnrolledError(EnrollmentError):
    """Raised when the user is already enrolled."""


class NotEnrolledError(EnrollmentError):
    """Raised when unenrolling from a course the user is not in."""


def _is_enrolled(db: Session, user_id: str, course_id: str) -> bool:
    return (
        db.execute(
            select(Enrollment.user_id).where(
                Enrollment.user_id == user_id,
                Enrollment.course_id == course_id,
            )
        ).first()
        is not None
    )


def enroll(db: Session, user: User, course_id: str) -> Course:
    """Enroll ``user`` in a course and commit.

    The seat is claimed with a conditional ``UPDATE`` that only succeeds while
    ``enrolled < capacity``, and the enrollment row insert shares its
    transaction, so the counter and the enrollment set move together.

    Raises:
        CourseNotFoundError: Unknown course code.
        AlreadyEnrolledError: The user already holds a seat.
        CourseFullError: No seat left; the counter is unchanged.
    """
    course = db.get(Course, course_id)
    if course is None:
        raise CourseNotFoundError("Course not found")
    if _is_enrolled(db, user.id, course_id):
        raise AlreadyEnrolledError("Already enrolled in this course")

    claimed = db.execute(
        update(Course)
        .where(Course.id == course_id, Course.enrolled < Course.capacity)
        .values(enrolled=Course.enrolled + 1)
        .execution_options(synchronize_session=False)
    )
    if not claimed.rowcount:
        db.rollback()
        raise CourseFullError("Course is full")

    db.add(Enrollment(user_id=user.id, course_id=course_id))
    db.commit()
    db.refresh(course)
    db.expire(user, ["enrollments"])
    logger.info("User %s enrolled in %s (%d/%d)", user.id, course_id, course.enrolled, course.capacity)
    return course


def unenroll(db: Session, user: User, course_id: str) -> Course:
    """Remove ``user`` from a course, release the seat and commit.

    Raises:
        CourseNotFoundError: Unknown course code.
        NotEnrolledError: The user holds no seat in the course.
    """
    course = db.get(Course, course_id)
    if course is None:
        raise CourseNotFoundError("Course not found")

    removed = db.execute(
        delete(Enrollment)
        .where(Enrollment.user_id == user.id, Enrollment.course_id == course_id)
        .execution_options(synchronize_session=False)
    )
    if not removed.rowcount:
        db.rollback()
        raise NotEnrolledError("Not enrolled in this course")

    db.execute(
        update(Course)
        .where(Course.id == course_id, Course.enrolled > 0)
        .values(enrolled=Course.enrolled - 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(course)
    db.expire(user, ["enrollments"])
    logger.info("User %s left %s (%d/%d)", user.id, course_id, course.enrolled, course.capacity)
    return course
