# tests/services/test_enrollment_service.py
"""Tests for the bounded enrollment counter."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from sqlalchemy.orm import Session

from eduverse.models import Course, Enrollment, User
from eduverse.services.enrollment import (
    AlreadyEnrolledError,
    CourseFullError,
    CourseNotFoundError,
    EnrollmentError,
    NotEnrolledError,
    enroll,
    unenroll,
)


def _enrollment_count(db: Session, course_id: str) -> int:
    return db.query(Enrollment).filter(Enrollment.course_id == course_id).count()


def test_enroll_claims_a_seat(db_session: Session, test_user: User, course: Course) -> None:
    updated = enroll(db_session, test_user, course.id)

    assert updated.enrolled == 1
    assert _enrollment_count(db_session, course.id) == 1
    assert [row.course_id for row in test_user.enrollments] == [course.id]


def test_counter_matches_rows_when_full(
    db_session: Session, make_user: Callable[..., User], course: Course
) -> None:
    first, second, third = (make_user(f"Seat {index}") for index in range(3))
    enroll(db_session, first, course.id)
    enroll(db_session, second, course.id)

    with pytest.raises(CourseFullError):
        enroll(db_session, third, course.id)

    db_session.refresh(course)
    assert course.enrolled == course.capacity == 2
    assert _enrollment_count(db_session, course.id) == 2


def test_double_enroll_rejected(db_session: Session, test_user: User, course: Course) -> None:
    enroll(db_session, test_user, course.id)

    with pytest.raises(AlreadyEnrolledError):
        enroll(db_session, test_user, course.id)

    db_session.refresh(course)
    assert course.enrolled == 1


def test_unenroll_releases_seat(db_session: Session, test_user: User, course: Course) -> None:
    enroll(db_session, test_user, course.id)

    updated = unenroll(db_session, test_user, course.id)

    assert updated.enrolled == 0
    assert _enrollment_count(db_session, course.id) == 0
    assert test_user.enrollments == []


def test_unenroll_without_seat(db_session: Session, test_user: User, course: Course) -> None:
    with pytest.raises(NotEnrolledError) as excinfo:
        unenroll(db_session, test_user, course.id)

    assert isinstance(excinfo.value, EnrollmentError)
    db_session.refresh(course)
    assert course.enrolled == 0


@pytest.mark.parametrize("operation", [enroll, unenroll])
def test_unknown_course(db_session: Session, test_user: User, operation) -> None:
    with pytest.raises(CourseNotFoundError):
        operation(db_session, test_user, "NOPE000")
