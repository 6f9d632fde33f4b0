"""Schemas for instructor analytics reports."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class ContributorEntry(CamelModel):
    """Leaderboard row for one identity."""

    id: str
    name: str
    email: str
    role: str
    level: str
    posts_count: int
    comments_count: int
    reactions_given_count: int
    reactions_received_count: int
    questions_asked: int
    announcements_made: int
    contribution_score: int
    popularity_score: int
    member_since: datetime


class CourseEngagementEntry(CamelModel):
    """Engagement metrics for posts sharing a course code."""

    course_id: str | None
    course_name: str
    enrolled: int
    total_posts: int
    announcements: int
    questions: int
    discussions: int
    events: int
    total_comments: int
    total_reactions: int
    unique_contributors: int
    engagement_score: int
    avg_comments_per_post: float


class ReactionTypeEntry(CamelModel):
    """Usage of a single reaction type."""

    reaction_type: str
    total_count: int
    unique_users_count: int
    unique_posts_count: int
    courses_reached: int
    avg_reactions_per_user: float


class ReactionDistribution(CamelModel):
    """Global reaction usage."""

    grand_total: int
    reaction_breakdown: list[ReactionTypeEntry]
    most_popular_reaction: str | None = None


class PostsByType(CamelModel):
    """Post counts per type."""

    questions: int = 0
    announcements: int = 0
    discussions: int = 0
    events: int = 0


class InstructorContact(CamelModel):
    """Instructor listed in a performance row."""

    id: str
    name: str
    email: str


class CoursePerformanceEntry(CamelModel):
    """Enrollment and engagement figures for one course."""

    course_id: str
    course_name: str
    description: str
    credit_hours: int
    enrolled: int
    capacity: int
    instructors: list[InstructorContact] = Field(default_factory=list)
    enrollment_rate: float
    total_posts: int
    posts_by_type: PostsByType
    total_comments: int
    total_reactions: int
    unique_contributors: int
    avg_engagement_per_post: float


class TopContributorsReport(CamelModel):
    report: list[ContributorEntry]


class CourseEngagementReport(CamelModel):
    report: list[CourseEngagementEntry]


class ReactionDistributionReport(CamelModel):
    report: ReactionDistribution


class CoursePerformanceReport(CamelModel):
    report: list[CoursePerformanceEntry]
