"""Populate the configured database with sample EduVerse data.

Usage:
    python -m eduverse.scripts.seed [--reset] [--password PASSWORD]
"""
from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy import select
from sqlalchemy.orm import Session

from eduverse.core.security import hash_password
from eduverse.db.session import SessionLocal, create_tables, drop_tables
from eduverse.models import Comment, Course, Post, User
from eduverse.models.user import ROLE_ADMIN, ROLE_INSTRUCTOR, ROLE_STUDENT
from eduverse.services.enrollment import EnrollmentError, enroll
from eduverse.services.reactions import upsert_reaction

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    ("Admin", "admin@eduverse.local", ROLE_ADMIN, "Staff"),
    ("Dr. Amal Hassan", "amal@eduverse.local", ROLE_INSTRUCTOR, "Faculty"),
    ("Dr. Karim Nabil", "karim@eduverse.local", ROLE_INSTRUCTOR, "Faculty"),
    ("Sara Adel", "sara@eduverse.local", ROLE_STUDENT, "Level 2"),
    ("Omar Farouk", "omar@eduverse.local", ROLE_STUDENT, "Level 3"),
    ("Lina Mostafa", "lina@eduverse.local", ROLE_STUDENT, "Level 1"),
]

SAMPLE_COURSES = [
    ("CS101", "Introduction to Programming", 3, 60, "amal@eduverse.local"),
    ("CS201", "Data Structures", 3, 40, "amal@eduverse.local"),
    ("MATH110", "Discrete Mathematics", 2, 80, "karim@eduverse.local"),
]

# (course, author email, type, title, body)
SAMPLE_POSTS = [
    ("CS101", "amal@eduverse.local", "announcement", "Welcome", "Lectures start on Sunday."),
    ("CS101", "sara@eduverse.local", "question", "Loops", "When should I use while over for?"),
    ("CS201", "omar@eduverse.local", "discussion", "Heaps", "Share your favourite heap visualizer."),
    ("MATH110", "karim@eduverse.local", "event", "Quiz 1", "First quiz covers propositional logic."),
]


def _get_or_create_user(db: Session, name: str, email: str, role: str, level: str, password: str) -> User:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        user = User(
            name=name,
            email=email,
            role=role,
            level=level,
            password_hash=hash_password(password),
        )
        db.add(user)
        db.flush()
    return user


def seed(db: Session, password: str) -> None:
    users = {
        email: _get_or_create_user(db, name, email, role, level, password)
        for name, email, role, level in SAMPLE_USERS
    }
    db.commit()

    for course_id, name, credit_hours, capacity, instructor_email in SAMPLE_COURSES:
        if db.get(Course, course_id) is not None:
            continue
        course = Course(id=course_id, name=name, credit_hours=credit_hours, capacity=capacity)
        course.instructors.append(users[instructor_email])
        db.add(course)
    db.commit()

    students = [user for user in users.values() if user.role == ROLE_STUDENT]
    for student in students:
        for course_id in ("CS101", "CS201"):
            try:
                enroll(db, student, course_id)
            except EnrollmentError as exc:
                logger.info("Skipping enrollment of %s in %s: %s", student.email, course_id, exc)

    if db.scalar(select(Post.id).limit(1)) is not None:
        logger.info("Posts already present; leaving content untouched")
        return

    for course_id, email, post_type, title, body in SAMPLE_POSTS:
        author = users[email]
        post = Post(
            sender_id=author.id,
            sender_name=author.name,
            sender_image_id=author.image_id,
            course_id=course_id,
            type=post_type,
            title=title,
            body=body,
        )
        db.add(post)
        db.flush()
        for student in students:
            if student.id == author.id:
                continue
            db.add(
                Comment(
                    post_id=post.id,
                    sender_id=student.id,
                    sender_name=student.name,
                    sender_image_id=student.image_id,
                    body=f"Thanks for the {post_type}!",
                )
            )
            upsert_reaction(db, post_id=post.id, sender_id=student.id, reaction_type="like")
    db.commit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the database with sample data")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables before seeding.",
    )
    parser.add_argument(
        "--password",
        default="password123",
        help="Password assigned to every sample account.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="[seed] %(message)s")

    if args.reset:
        drop_tables()
        logger.info("Dropped all tables")
    create_tables()

    db = SessionLocal()
    try:
        seed(db, args.password)
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        sys.exit(1)
    finally:
        db.close()
    logger.info("Seeded %d users and %d courses", len(SAMPLE_USERS), len(SAMPLE_COURSES))


if __name__ == "__main__":
    main()
