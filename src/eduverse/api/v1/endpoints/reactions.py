"""Reaction endpoints: one reaction per user and post."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import delete

from eduverse.models import Post, Reaction
from eduverse.schemas.common import StatusMessage
from eduverse.schemas.reaction import (
    ReactionCounts,
    ReactionCreate,
    ReactionResponse,
    ReactionSummaryResponse,
)
from eduverse.services.reactions import (
    InvalidReactionType,
    get_user_reaction,
    normalize_reaction_type,
    reaction_summary,
    upsert_reaction,
)

from ..dependencies import CurrentUserDep, OptionalUserDep, SessionDep

router = APIRouter(prefix="/reactions", tags=["reactions"])


@router.get("", response_model=ReactionSummaryResponse)
async def read_reactions(
    db: SessionDep,
    current_user: OptionalUserDep,
    post_id: str | None = Query(None, alias="postId"),
) -> ReactionSummaryResponse:
    """Per-type counts for a post and the caller's own reaction."""
    if not post_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="postId is required")
    return ReactionSummaryResponse(
        reactions=ReactionCounts(**reaction_summary(db, post_id)),
        user_reaction=get_user_reaction(
            db, post_id=post_id, sender_id=current_user.id if current_user else None
        ),
    )


@router.post("", response_model=ReactionResponse)
async def set_reaction(
    payload: ReactionCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReactionResponse:
    """Add the caller's reaction or replace its type."""
    try:
        reaction_type = normalize_reaction_type(payload.type)
    except InvalidReactionType as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if db.get(Post, payload.post_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    reaction = upsert_reaction(
        db,
        post_id=payload.post_id,
        sender_id=current_user.id,
        reaction_type=reaction_type,
    )
    db.commit()
    db.refresh(reaction)
    return ReactionResponse.model_validate(reaction)


@router.delete("/{post_id}", response_model=StatusMessage)
async def remove_reaction(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> StatusMessage:
    """Withdraw the caller's reaction from a post."""
    result = db.execute(
        delete(Reaction).where(
            Reaction.post_id == post_id,
            Reaction.sender_id == current_user.id,
        )
    )
    if not result.rowcount:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reaction not found")
    db.commit()
    return StatusMessage(message="Reaction removed")
