"""Direct message endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select

from eduverse.models import Chat, Message, User
from eduverse.schemas.common import StatusMessage
from eduverse.schemas.message import MessageCreate, MessageResponse
from eduverse.services.chats import find_or_create_chat, touch_chat

from ..dependencies import CurrentUserDep, SessionDep
from ..serializers import serialize_messages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


def _get_chat_for(db: SessionDep, chat_id: str, user: User) -> Chat:
    chat = db.get(Chat, chat_id)
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    if not chat.has_participant(user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return chat


@router.get("", response_model=list[MessageResponse])
async def list_messages(
    current_user: CurrentUserDep,
    db: SessionDep,
    chat_id: str | None = Query(None, alias="chatId"),
) -> list[MessageResponse]:
    """Messages of a chat in the order they were sent."""
    if not chat_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="chatId is required")
    _get_chat_for(db, chat_id, current_user)
    messages = db.scalars(
        select(Message).where(Message.chat_id == chat_id).order_by(Message.created_at)
    ).all()
    return serialize_messages(db, messages)


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    """Send a message, opening the pair's chat on first contact."""
    if payload.receiver_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot send a message to yourself",
        )
    receiver = db.get(User, payload.receiver_id)
    if receiver is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receiver not found")

    if payload.chat_id:
        chat = _get_chat_for(db, payload.chat_id, current_user)
        if not chat.has_participant(receiver.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Receiver is not a participant of this chat",
            )
    else:
        chat, _ = find_or_create_chat(db, current_user, receiver)

    if payload.reply_to:
        original = db.get(Message, payload.reply_to)
        if original is None or original.chat_id != chat.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Replied message is not part of this chat",
            )

    message = Message(
        chat_id=chat.id,
        sender_id=current_user.id,
        sender_name=current_user.name,
        sender_image_id=current_user.image_id,
        receiver_id=receiver.id,
        text=payload.text,
        attachments_id=payload.attachments_id,
        reply_to_id=payload.reply_to,
    )
    db.add(message)
    touch_chat(chat, payload.text)
    db.commit()
    db.refresh(message)
    logger.debug("Message %s sent in chat %s", message.id, chat.id)
    return serialize_messages(db, [message])[0]


@router.delete("/{message_id}", response_model=StatusMessage)
async def delete_message(
    message_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> StatusMessage:
    """Delete one of the caller's messages."""
    message = db.get(Message, message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    if message.sender_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to delete this message",
        )
    db.delete(message)
    db.commit()
    return StatusMessage(message="Message deleted")
