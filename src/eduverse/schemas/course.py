"""Course-related Pydantic schemas."""

from pydantic import Field

from .common import CamelModel


class CourseCreate(CamelModel):
    """Schema for creating a course under a caller-chosen code."""

    id: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=200)
    credit_hours: int = Field(0, ge=0, le=30)
    description: str = ""
    capacity: int = Field(80, ge=1)


class CourseUpdate(CamelModel):
    """Partial course update; omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=200)
    credit_hours: int | None = Field(None, ge=0, le=30)
    description: str | None = None
    capacity: int | None = Field(None, ge=1)


class InstructorInfo(CamelModel):
    """Instructor fields shown alongside a course."""

    id: str
    name: str
    email: str
    image_id: str | None = None


class CourseResponse(CamelModel):
    """Schema for course information returned by the API."""

    id: str
    name: str
    description: str
    credit_hours: int
    capacity: int
    enrolled: int
    instructors: list[InstructorInfo] = Field(default_factory=list)


class CourseListResponse(CamelModel):
    """Wrapper for course listings."""

    courses: list[CourseResponse]
