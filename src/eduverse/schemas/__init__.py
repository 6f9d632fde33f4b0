"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
All of them serialize with camelCase keys.
"""

from .chat import ChatCreate, ChatListResponse, ChatResponse
from .comment import CommentCreate, CommentResponse
from .common import CamelModel, Pagination, SenderSnapshot, StatusMessage
from .course import CourseCreate, CourseResponse, CourseUpdate
from .file import FileResponse
from .message import MessageCreate, MessageResponse
from .post import PostCreate, PostDetailResponse, PostResponse, PostUpdate
from .reaction import ReactionCreate, ReactionResponse, ReactionSummaryResponse
from .user import ProfileUpdateRequest, RegisterRequest, UserResponse

__all__ = [
    "ChatCreate", "ChatListResponse", "ChatResponse",
    "CommentCreate", "CommentResponse",
    "CamelModel", "Pagination", "SenderSnapshot", "StatusMessage",
    "CourseCreate", "CourseResponse", "CourseUpdate",
    "FileResponse",
    "MessageCreate", "MessageResponse",
    "PostCreate", "PostDetailResponse", "PostResponse", "PostUpdate",
    "ReactionCreate", "ReactionResponse", "ReactionSummaryResponse",
    "ProfileUpdateRequest", "RegisterRequest", "UserResponse",
]
