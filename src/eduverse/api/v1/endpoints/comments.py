"""Comment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select

from eduverse.models import Comment, Post
from eduverse.schemas.comment import CommentCreate, CommentResponse
from eduverse.schemas.common import StatusMessage

from ..dependencies import CurrentUserDep, SessionDep
from ..serializers import serialize_comments

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=list[CommentResponse])
async def list_comments(
    db: SessionDep,
    post_id: str | None = Query(None, alias="postId"),
) -> list[CommentResponse]:
    """Comments on a post, oldest first."""
    if not post_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="postId is required")
    comments = db.scalars(
        select(Comment).where(Comment.post_id == post_id).order_by(Comment.created_at)
    ).all()
    return serialize_comments(db, comments)


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    payload: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentResponse:
    """Comment on a post, optionally replying to another comment on it."""
    if db.get(Post, payload.post_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    if payload.parent_comment_id:
        parent = db.get(Comment, payload.parent_comment_id)
        if parent is None or parent.post_id != payload.post_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent comment does not belong to this post",
            )

    comment = Comment(
        post_id=payload.post_id,
        sender_id=current_user.id,
        sender_name=current_user.name,
        sender_image_id=current_user.image_id,
        body=payload.body,
        parent_comment_id=payload.parent_comment_id,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return serialize_comments(db, [comment])[0]


@router.delete("/{comment_id}", response_model=StatusMessage)
async def delete_comment(
    comment_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> StatusMessage:
    """Delete one of the caller's comments."""
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    if comment.sender_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to delete this comment",
        )
    db.delete(comment)
    db.commit()
    return StatusMessage(message="Comment deleted")
