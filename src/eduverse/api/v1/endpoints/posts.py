"""Course post endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import delete, select

from eduverse.models import Comment, Post, Reaction, User
from eduverse.models.post import POST_TYPES
from eduverse.models.user import ROLE_ADMIN
from eduverse.schemas.common import StatusMessage
from eduverse.schemas.post import PostCreate, PostDetailResponse, PostResponse, PostUpdate
from eduverse.schemas.reaction import ReactionCounts
from eduverse.services.reactions import get_user_reaction, reaction_summary

from ..dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from ..serializers import serialize_comments, serialize_post, serialize_posts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def _get_post_or_404(db: SessionDep, post_id: str) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def _ensure_author(post: Post, user: User, *, allow_admin: bool = False) -> None:
    if post.sender_id == user.id or (allow_admin and user.role == ROLE_ADMIN):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Not authorized to modify this post",
    )


@router.get("", response_model=list[PostResponse])
async def list_posts(
    db: SessionDep,
    course_id: str | None = Query(None, alias="courseId"),
    post_type: str | None = Query(None, alias="type"),
    limit: int = Query(50, ge=1, le=200),
    skip: int = Query(0, ge=0),
) -> list[PostResponse]:
    """List posts newest first, optionally narrowed to a course or type."""
    stmt = select(Post)
    if course_id:
        stmt = stmt.where(Post.course_id == course_id)
    if post_type:
        normalized = post_type.strip().lower()
        if normalized not in POST_TYPES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid post type")
        stmt = stmt.where(Post.type == normalized)
    posts = db.scalars(
        stmt.order_by(Post.created_at.desc()).offset(skip).limit(limit)
    ).all()
    return serialize_posts(db, posts)


@router.get("/{post_id}", response_model=PostDetailResponse)
async def read_post(post_id: str, db: SessionDep, current_user: OptionalUserDep) -> PostDetailResponse:
    """Return a post with its comments, reaction counts and the caller's reaction."""
    post = _get_post_or_404(db, post_id)
    comments = db.scalars(
        select(Comment).where(Comment.post_id == post_id).order_by(Comment.created_at)
    ).all()
    return PostDetailResponse(
        post=serialize_post(db, post),
        comments=serialize_comments(db, comments),
        reactions=ReactionCounts(**reaction_summary(db, post_id)),
        user_reaction=get_user_reaction(
            db, post_id=post_id, sender_id=current_user.id if current_user else None
        ),
    )


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostResponse:
    """Publish a post as the caller."""
    post = Post(
        sender_id=current_user.id,
        sender_name=current_user.name,
        sender_image_id=current_user.image_id,
        course_id=payload.course_id,
        title=payload.title,
        body=payload.body,
        type=payload.type,
        attachments_id=payload.attachments_id,
        deadline=payload.deadline,
        event_date=payload.event_date,
        event_location=payload.event_location,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post %s created by %s in %s", post.id, current_user.id, post.course_id)
    return serialize_post(db, post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    payload: PostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostResponse:
    """Edit a post's title, body or answered flag."""
    post = _get_post_or_404(db, post_id)
    _ensure_author(post, current_user)

    for field_name in ("title", "body", "answered"):
        value = getattr(payload, field_name)
        if value is not None:
            setattr(post, field_name, value)
    db.commit()
    db.refresh(post)
    return serialize_post(db, post)


@router.delete("/{post_id}", response_model=StatusMessage)
async def delete_post(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> StatusMessage:
    """Delete a post together with its comments and reactions."""
    post = _get_post_or_404(db, post_id)
    _ensure_author(post, current_user, allow_admin=True)

    comments = db.execute(delete(Comment).where(Comment.post_id == post_id))
    reactions = db.execute(delete(Reaction).where(Reaction.post_id == post_id))
    db.delete(post)
    db.commit()
    logger.info(
        "Post %s deleted by %s (%d comments, %d reactions)",
        post_id,
        current_user.id,
        comments.rowcount or 0,
        reactions.rowcount or 0,
    )
    return StatusMessage(message="Post deleted")
