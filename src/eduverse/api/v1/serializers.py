"""Build API payloads from ORM rows with reconciled identity snapshots.

Every response that embeds a sender or chat participant is produced here so
the current name and avatar always win over the stored copy.
"""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from eduverse.models import Chat, Comment, Message, Post
from eduverse.schemas.chat import ChatResponse
from eduverse.schemas.comment import CommentResponse
from eduverse.schemas.message import MessageResponse
from eduverse.schemas.post import PostResponse
from eduverse.services.identity_sync import IdentityReconciler


def serialize_posts(db: Session, posts: Sequence[Post]) -> list[PostResponse]:
    reconciler = IdentityReconciler(db)
    reconciler.load(post.sender_id for post in posts)
    return [
        PostResponse(
            id=post.id,
            sender=reconciler.snapshot(post),
            course_id=post.course_id,
            title=post.title,
            body=post.body,
            type=post.type,
            attachments_id=list(post.attachments_id or []),
            deadline=post.deadline,
            event_date=post.event_date,
            event_location=post.event_location,
            answered=post.answered,
            created_at=post.created_at,
        )
        for post in posts
    ]


def serialize_post(db: Session, post: Post) -> PostResponse:
    return serialize_posts(db, [post])[0]


def serialize_comments(db: Session, comments: Sequence[Comment]) -> list[CommentResponse]:
    reconciler = IdentityReconciler(db)
    reconciler.load(comment.sender_id for comment in comments)
    return [
        CommentResponse(
            id=comment.id,
            post_id=comment.post_id,
            sender=reconciler.snapshot(comment),
            body=comment.body,
            parent_comment_id=comment.parent_comment_id,
            created_at=comment.created_at,
        )
        for comment in comments
    ]


def serialize_chats(db: Session, chats: Sequence[Chat]) -> list[ChatResponse]:
    reconciler = IdentityReconciler(db)
    reconciler.load(user_id for chat in chats for user_id in (chat.user1_id, chat.user2_id))
    return [
        ChatResponse(
            id=chat.id,
            user1=reconciler.snapshot(chat, prefix="user1"),
            user2=reconciler.snapshot(chat, prefix="user2"),
            last_message=chat.last_message,
            updated_at=chat.updated_at,
        )
        for chat in chats
    ]


def serialize_chat(db: Session, chat: Chat) -> ChatResponse:
    return serialize_chats(db, [chat])[0]


def serialize_messages(db: Session, messages: Sequence[Message]) -> list[MessageResponse]:
    reconciler = IdentityReconciler(db)
    reconciler.load(message.sender_id for message in messages)
    return [
        MessageResponse(
            id=message.id,
            chat_id=message.chat_id,
            sender=reconciler.snapshot(message),
            receiver_id=message.receiver_id,
            text=message.text,
            attachments_id=list(message.attachments_id or []),
            reply_to=message.reply_to_id,
            created_at=message.created_at,
        )
        for message in messages
    ]
