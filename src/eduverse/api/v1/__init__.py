"""Version 1 API endpoints."""

from .endpoints import (
    chats_router,
    comments_router,
    courses_router,
    files_router,
    messages_router,
    metrics_router,
    posts_router,
    reactions_router,
    users_router,
)

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
