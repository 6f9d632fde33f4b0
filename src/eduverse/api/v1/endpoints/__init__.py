"""API endpoint modules for version 1."""

from .chats import router as chats_router
from .comments import router as comments_router
from .courses import router as courses_router
from .files import router as files_router
from .messages import router as messages_router
from .metrics import router as metrics_router
from .posts import router as posts_router
from .reactions import router as reactions_router
from .users import router as users_router

__all__ = [
    "users_router",
    "courses_router",
    "posts_router",
    "comments_router",
    "reactions_router",
    "chats_router",
    "messages_router",
    "files_router",
    "metrics_router",
]
