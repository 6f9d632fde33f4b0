"""Course catalogue and enrollment endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from eduverse.models import Course, Enrollment, User
from eduverse.models.user import ROLE_ADMIN
from eduverse.schemas.common import StatusMessage
from eduverse.schemas.course import (
    CourseCreate,
    CourseListResponse,
    CourseResponse,
    CourseUpdate,
)
from eduverse.services.enrollment import (
    CourseNotFoundError,
    EnrollmentError,
    enroll,
    unenroll,
)

from ..dependencies import CurrentUserDep, InstructorDep, OptionalUserDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


def _get_course_or_404(db: SessionDep, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


def _ensure_can_manage(course: Course, user: User) -> None:
    if user.role != ROLE_ADMIN and user.id not in course.instructor_ids:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only course instructors can modify this course",
        )


@router.get("", response_model=CourseListResponse)
async def list_courses(
    db: SessionDep,
    limit: int = Query(100, ge=1, le=500),
    skip: int = Query(0, ge=0),
) -> CourseListResponse:
    """List courses ordered by code."""
    courses = db.scalars(
        select(Course)
        .options(selectinload(Course.instructors))
        .order_by(Course.id)
        .offset(skip)
        .limit(limit)
    ).all()
    return CourseListResponse(courses=[CourseResponse.model_validate(course) for course in courses])


@router.get("/enrolled", response_model=CourseListResponse)
async def list_enrolled_courses(
    db: SessionDep,
    current_user: OptionalUserDep,
    user_id: str | None = Query(None, alias="userId"),
) -> CourseListResponse:
    """Courses a user is enrolled in; defaults to the caller."""
    target_id = user_id or (current_user.id if current_user else None)
    if target_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userId is required")

    courses = db.scalars(
        select(Course)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .where(Enrollment.user_id == target_id)
        .order_by(Enrollment.created_at)
    ).all()
    return CourseListResponse(courses=[CourseResponse.model_validate(course) for course in courses])


@router.get("/{course_id}", response_model=CourseResponse)
async def read_course(course_id: str, db: SessionDep) -> CourseResponse:
    """Return one course with its instructors."""
    return CourseResponse.model_validate(_get_course_or_404(db, course_id))


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    current_user: InstructorDep,
    db: SessionDep,
) -> CourseResponse:
    """Create a course taught by the caller."""
    if db.get(Course, payload.id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Course with this id already exists",
        )

    course = Course(
        id=payload.id,
        name=payload.name,
        description=payload.description,
        credit_hours=payload.credit_hours,
        capacity=payload.capacity,
        enrolled=0,
    )
    course.instructors.append(current_user)
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info("Course %s created by %s", course.id, current_user.id)
    return CourseResponse.model_validate(course)


@router.put("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: str,
    payload: CourseUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CourseResponse:
    """Edit course details; capacity may not drop below current enrollment."""
    course = _get_course_or_404(db, course_id)
    _ensure_can_manage(course, current_user)

    if payload.capacity is not None and payload.capacity < course.enrolled:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Capacity cannot be lower than the number of enrolled students",
        )

    for field_name in ("name", "description", "credit_hours", "capacity"):
        value = getattr(payload, field_name)
        if value is not None:
            setattr(course, field_name, value)
    db.commit()
    db.refresh(course)
    return CourseResponse.model_validate(course)


@router.delete("/{course_id}", response_model=StatusMessage)
async def delete_course(
    course_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> StatusMessage:
    """Delete a course and its enrollments; posts keep their course code."""
    course = _get_course_or_404(db, course_id)
    _ensure_can_manage(course, current_user)

    db.execute(delete(Enrollment).where(Enrollment.course_id == course_id))
    db.delete(course)
    db.commit()
    logger.info("Course %s deleted by %s", course_id, current_user.id)
    return StatusMessage(message="Course deleted")


@router.post("/{course_id}/enroll", response_model=StatusMessage)
async def enroll_in_course(
    course_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> StatusMessage:
    """Claim a seat in a course."""
    try:
        enroll(db, current_user, course_id)
    except CourseNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except EnrollmentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return StatusMessage(message="Enrolled successfully")


@router.post("/{course_id}/unenroll", response_model=StatusMessage)
async def unenroll_from_course(
    course_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> StatusMessage:
    """Release the caller's seat in a course."""
    try:
        unenroll(db, current_user, course_id)
    except CourseNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except EnrollmentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return StatusMessage(message="Unenrolled successfully")
