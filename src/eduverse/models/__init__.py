"""SQLAlchemy models for the EduVerse application."""

from .chat import Chat
from .comment import Comment
from .course import Course, course_instructors
from .file import File
from .message import Message
from .post import Post
from .reaction import Reaction
from .user import Enrollment, User

__all__ = [
    "Chat",
    "Comment",
    "Course", "course_instructors",
    "File",
    "Message",
    "Post",
    "Reaction",
    "Enrollment", "User",
]
