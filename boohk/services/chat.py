"""
Chat persistence for the AI assistant.

Conversations are keyed by a client-visible session id. Each stored
message bumps the conversation's message count, and the first user
message becomes the conversation title.
"""
import logging
import secrets
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from boohk.models import ChatConversation, ChatMessage
from boohk.timeutil import utc_now, epoch_ms

logger = logging.getLogger(__name__)

TITLE_LENGTH = 50


def generate_session_id() -> str:
    return f"session_{epoch_ms()}_{secrets.token_hex(5)}"


def conversation_title(content: str) -> str:
    content = (content or "").strip()
    if len(content) > TITLE_LENGTH:
        return content[:TITLE_LENGTH] + "..."
    return content


def get_or_create_conversation(
    db: Session, session_id: Optional[str], user_id: Optional[str], company_id: Optional[str]
) -> ChatConversation:
    """
    Load the user's conversation for a session id, or start a new one.

    A session id that belongs to another user starts a fresh session.
    """
    if session_id:
        conversation = (
            db.query(ChatConversation).filter(ChatConversation.session_id == session_id).first()
        )
        if conversation and conversation.user_id == user_id:
            return conversation
        if conversation:
            logger.warning(f"Session {session_id} belongs to another user, starting a new session")
            session_id = None

    conversation = ChatConversation(
        session_id=session_id or generate_session_id(),
        user_id=user_id,
        company_id=company_id,
        message_count=0,
    )
    db.add(conversation)
    db.flush()
    return conversation


def add_message(db: Session, conversation: ChatConversation, role: str, content: str) -> ChatMessage:
    """Append a message and update the conversation counters."""
    if role not in ChatMessage.ROLES:
        raise ValueError(f"Invalid message role: {role}")

    message = ChatMessage(conversation_id=conversation.id, role=role, content=content)
    db.add(message)

    conversation.message_count = (conversation.message_count or 0) + 1
    conversation.last_message_at = utc_now()
    if role == "user" and not conversation.title:
        conversation.title = conversation_title(content)

    db.flush()
    return message


def save_exchange(
    db: Session,
    session_id: Optional[str],
    user_id: Optional[str],
    company_id: Optional[str],
    user_message: Optional[str],
    assistant_message: str,
) -> Optional[str]:
    """
    Persist one user/assistant exchange.

    Returns:
        The session id, or None if saving failed (errors are logged)
    """
    try:
        conversation = get_or_create_conversation(db, session_id, user_id, company_id)
        if user_message:
            add_message(db, conversation, "user", user_message)
        add_message(db, conversation, "assistant", assistant_message)
        db.commit()
        return conversation.session_id
    except Exception as e:
        db.rollback()
        logger.error(f"Error saving chat conversation {session_id}: {e}")
        return None


def chat_analytics(db: Session, company_id: str) -> dict:
    conversations = db.query(ChatConversation).filter(
        ChatConversation.company_id == company_id, ChatConversation.deleted == False
    )
    conversation_count = conversations.count()
    message_count = (
        db.query(func.coalesce(func.sum(ChatConversation.message_count), 0))
        .filter(ChatConversation.company_id == company_id, ChatConversation.deleted == False)
        .scalar()
    )
    users = (
        db.query(func.count(func.distinct(ChatConversation.user_id)))
        .filter(ChatConversation.company_id == company_id, ChatConversation.deleted == False)
        .scalar()
    )
    return {
        "conversations": conversation_count,
        "messages": int(message_count or 0),
        "activeUsers": int(users or 0),
        "averageMessagesPerConversation": (
            round(message_count / conversation_count, 1) if conversation_count else 0
        ),
    }
