"""Read-only analytics reports for instructors and admins.

Each report is recomputed from the live tables on every call. Counts come
from grouped SQL aggregates, scores and ratios are derived in Python.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session, selectinload

from eduverse.models import Comment, Course, Post, Reaction, User
from eduverse.schemas.report import (
    ContributorEntry,
    CourseEngagementEntry,
    CoursePerformanceEntry,
    InstructorContact,
    PostsByType,
    ReactionDistribution,
    ReactionTypeEntry,
)

logger = logging.getLogger(__name__)

UNKNOWN_COURSE_NAME = "General/Unknown"
TOP_CONTRIBUTORS_LIMIT = 10

# Plural keys used by the per-type breakdowns.
_TYPE_KEYS = {
    "question": "questions",
    "announcement": "announcements",
    "discussion": "discussions",
    "event": "events",
}


def _ratio(numerator: float, denominator: float, digits: int = 2) -> float:
    """Return ``numerator / denominator`` rounded, or 0 for an empty denominator."""
    if not denominator:
        return 0
    return round(numerator / denominator, digits)


def _count_by(db: Session, column, *where) -> dict:
    rows = db.execute(select(column, func.count()).where(*where).group_by(column)).all()
    return {key: count for key, count in rows}


def top_contributors(db: Session) -> list[ContributorEntry]:
    """Rank identities by contribution score and return the top ten.

    ``contributionScore`` weighs a post at 5, a comment at 3 and a reaction
    given at 1. ``popularityScore`` is the number of reactions received on
    the identity's posts.
    """
    posts_by_type: dict[str, dict[str, int]] = defaultdict(dict)
    for sender_id, post_type, count in db.execute(
        select(Post.sender_id, Post.type, func.count()).group_by(Post.sender_id, Post.type)
    ):
        posts_by_type[sender_id][post_type] = count

    comments = _count_by(db, Comment.sender_id)
    reactions_given = _count_by(db, Reaction.sender_id)
    reactions_received = {
        sender_id: count
        for sender_id, count in db.execute(
            select(Post.sender_id, func.count(Reaction.id))
            .join(Reaction, Reaction.post_id == Post.id)
            .group_by(Post.sender_id)
        )
    }

    entries = []
    for user in db.scalars(select(User).order_by(User.created_at)):
        by_type = posts_by_type.get(user.id, {})
        posts_count = sum(by_type.values())
        comments_count = comments.get(user.id, 0)
        given = reactions_given.get(user.id, 0)
        received = reactions_received.get(user.id, 0)
        entries.append(
            ContributorEntry(
                id=user.id,
                name=user.name,
                email=user.email,
                role=user.role,
                level=user.level,
                posts_count=posts_count,
                comments_count=comments_count,
                reactions_given_count=given,
                reactions_received_count=received,
                questions_asked=by_type.get("question", 0),
                announcements_made=by_type.get("announcement", 0),
                contribution_score=posts_count * 5 + comments_count * 3 + given,
                popularity_score=received,
                member_since=user.created_at,
            )
        )

    entries.sort(key=lambda entry: entry.contribution_score, reverse=True)
    return entries[:TOP_CONTRIBUTORS_LIMIT]


def course_engagement(db: Session) -> list[CourseEngagementEntry]:
    """Summarize activity for every course code that has posts.

    Posts whose code no longer matches a course are reported under
    ``General/Unknown``.
    """
    posts_by_type: dict[str | None, dict[str, int]] = defaultdict(dict)
    for course_id, post_type, count in db.execute(
        select(Post.course_id, Post.type, func.count()).group_by(Post.course_id, Post.type)
    ):
        posts_by_type[course_id][post_type] = count
    if not posts_by_type:
        return []

    comments = {
        course_id: count
        for course_id, count in db.execute(
            select(Post.course_id, func.count(Comment.id))
            .join(Comment, Comment.post_id == Post.id)
            .group_by(Post.course_id)
        )
    }
    reactions = {
        course_id: count
        for course_id, count in db.execute(
            select(Post.course_id, func.count(Reaction.id))
            .join(Reaction, Reaction.post_id == Post.id)
            .group_by(Post.course_id)
        )
    }
    contributors = {
        course_id: count
        for course_id, count in db.execute(
            select(Post.course_id, func.count(distinct(Post.sender_id))).group_by(Post.course_id)
        )
    }
    known_ids = [course_id for course_id in posts_by_type if course_id is not None]
    courses = {
        course.id: course
        for course in db.scalars(select(Course).where(Course.id.in_(known_ids)))
    }

    entries = []
    for course_id, by_type in posts_by_type.items():
        course = courses.get(course_id)
        total_posts = sum(by_type.values())
        total_comments = comments.get(course_id, 0)
        total_reactions = reactions.get(course_id, 0)
        entries.append(
            CourseEngagementEntry(
                course_id=course_id,
                course_name=course.name if course else UNKNOWN_COURSE_NAME,
                enrolled=course.enrolled if course else 0,
                total_posts=total_posts,
                announcements=by_type.get("announcement", 0),
                questions=by_type.get("question", 0),
                discussions=by_type.get("discussion", 0),
                events=by_type.get("event", 0),
                total_comments=total_comments,
                total_reactions=total_reactions,
                unique_contributors=contributors.get(course_id, 0),
                engagement_score=total_posts * 3 + total_comments * 2 + total_reactions,
                avg_comments_per_post=_ratio(total_comments, total_posts),
            )
        )

    entries.sort(key=lambda entry: entry.engagement_score, reverse=True)
    return entries


def reaction_distribution(db: Session) -> ReactionDistribution:
    """Break reaction usage down by type, most used first."""
    rows = db.execute(
        select(
            Reaction.type,
            func.count(Reaction.id),
            func.count(distinct(Reaction.sender_id)),
            func.count(distinct(Reaction.post_id)),
            func.count(distinct(Post.course_id)),
        )
        .join(Post, Post.id == Reaction.post_id)
        .group_by(Reaction.type)
    ).all()

    breakdown = [
        ReactionTypeEntry(
            reaction_type=reaction_type,
            total_count=total,
            unique_users_count=users,
            unique_posts_count=posts,
            courses_reached=courses,
            avg_reactions_per_user=_ratio(total, users),
        )
        for reaction_type, total, users, posts, courses in rows
    ]
    breakdown.sort(key=lambda entry: (-entry.total_count, entry.reaction_type))

    return ReactionDistribution(
        grand_total=sum(entry.total_count for entry in breakdown),
        reaction_breakdown=breakdown,
        most_popular_reaction=breakdown[0].reaction_type if breakdown else None,
    )


def _contributors_by_course(db: Session, course_ids: Iterable[str]) -> dict[str, set[str]]:
    """Collect distinct post and comment authors per course."""
    course_ids = list(course_ids)
    contributors: dict[str, set[str]] = defaultdict(set)
    post_authors = select(Post.course_id, Post.sender_id).where(Post.course_id.in_(course_ids))
    comment_authors = (
        select(Post.course_id, Comment.sender_id)
        .join(Comment, Comment.post_id == Post.id)
        .where(Post.course_id.in_(course_ids))
    )
    for statement in (post_authors, comment_authors):
        for course_id, sender_id in db.execute(statement.distinct()):
            contributors[course_id].add(sender_id)
    return contributors


def course_performance(db: Session, *, instructor_id: str | None = None) -> list[CoursePerformanceEntry]:
    """Report enrollment and engagement per course, most enrolled first.

    Args:
        db: Database session.
        instructor_id: When given, only courses taught by this identity.
    """
    statement = select(Course).options(selectinload(Course.instructors))
    if instructor_id is not None:
        statement = statement.where(Course.instructors.any(User.id == instructor_id))
    courses = list(db.scalars(statement))
    if not courses:
        return []
    course_ids = [course.id for course in courses]

    posts_by_type: dict[str, dict[str, int]] = defaultdict(dict)
    for course_id, post_type, count in db.execute(
        select(Post.course_id, Post.type, func.count())
        .where(Post.course_id.in_(course_ids))
        .group_by(Post.course_id, Post.type)
    ):
        posts_by_type[course_id][post_type] = count

    comments = {
        course_id: count
        for course_id, count in db.execute(
            select(Post.course_id, func.count(Comment.id))
            .join(Comment, Comment.post_id == Post.id)
            .where(Post.course_id.in_(course_ids))
            .group_by(Post.course_id)
        )
    }
    reactions = {
        course_id: count
        for course_id, count in db.execute(
            select(Post.course_id, func.count(Reaction.id))
            .join(Reaction, Reaction.post_id == Post.id)
            .where(Post.course_id.in_(course_ids))
            .group_by(Post.course_id)
        )
    }
    contributors = _contributors_by_course(db, course_ids)

    entries = []
    for course in courses:
        by_type = posts_by_type.get(course.id, {})
        total_posts = sum(by_type.values())
        total_comments = comments.get(course.id, 0)
        total_reactions = reactions.get(course.id, 0)
        entries.append(
            CoursePerformanceEntry(
                course_id=course.id,
                course_name=course.name,
                description=course.description,
                credit_hours=course.credit_hours,
                enrolled=course.enrolled,
                capacity=course.capacity,
                instructors=[
                    InstructorContact(id=user.id, name=user.name, email=user.email)
                    for user in course.instructors
                ],
                enrollment_rate=round(course.enrolled / max(course.capacity, 1) * 100, 1),
                total_posts=total_posts,
                posts_by_type=PostsByType(
                    **{_TYPE_KEYS[key]: value for key, value in by_type.items() if key in _TYPE_KEYS}
                ),
                total_comments=total_comments,
                total_reactions=total_reactions,
                unique_contributors=len(contributors.get(course.id, ())),
                avg_engagement_per_post=_ratio(total_comments + total_reactions, total_posts),
            )
        )

    entries.sort(key=lambda entry: entry.enrolled, reverse=True)
    logger.debug("Course performance computed for %d courses", len(entries))
    return entries
