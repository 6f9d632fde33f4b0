"""One-to-one chat endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import func, or_, select

from eduverse.models import Chat, User
from eduverse.schemas.chat import ChatCreate, ChatListResponse, ChatResponse
from eduverse.schemas.common import Pagination
from eduverse.services.chats import find_or_create_chat

from ..dependencies import CurrentUserDep, SessionDep
from ..serializers import serialize_chat, serialize_chats

router = APIRouter(prefix="/chats", tags=["chats"])

MAX_PAGE_SIZE = 100
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("", response_model=ChatListResponse)
async def list_chats(
    response: Response,
    current_user: CurrentUserDep,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
) -> ChatListResponse:
    """The caller's chats, most recently active first."""
    limit = min(limit, MAX_PAGE_SIZE)
    mine = or_(Chat.user1_id == current_user.id, Chat.user2_id == current_user.id)
    total = db.scalar(select(func.count()).select_from(Chat).where(mine)) or 0
    chats = db.scalars(
        select(Chat)
        .where(mine)
        .order_by(Chat.updated_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    response.headers.update(NO_CACHE_HEADERS)
    return ChatListResponse(
        chats=serialize_chats(db, chats),
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{chat_id}", response_model=ChatResponse)
async def read_chat(chat_id: str, current_user: CurrentUserDep, db: SessionDep) -> ChatResponse:
    """Return one chat the caller participates in."""
    chat = db.get(Chat, chat_id)
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    if not chat.has_participant(current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return serialize_chat(db, chat)


@router.post("", response_model=ChatResponse, status_code=status.HTTP_201_CREATED)
async def open_chat(
    payload: ChatCreate,
    response: Response,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ChatResponse:
    """Start a chat with another user, or return the one that already exists."""
    if payload.user2_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot start a chat with yourself",
        )
    other = db.get(User, payload.user2_id)
    if other is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    chat, created = find_or_create_chat(db, current_user, other)
    db.commit()
    if not created:
        response.status_code = status.HTTP_200_OK
    return serialize_chat(db, chat)
