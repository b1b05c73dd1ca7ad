import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.ai_assistant import BoohkAssistant, AssistantServiceError
from boohk.auth import require_auth, require_admin
from boohk.database import get_db
from boohk.models import ChatConversation, ChatMessage, User
from boohk.routes.helpers import require_company_id
from boohk.services import chat as chat_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assistant"])


class AssistantMessage(BaseModel):
    role: str
    content: Optional[str] = None
    parts: Optional[str] = None


class AssistantRequest(BaseModel):
    messages: Optional[List[AssistantMessage]] = None
    sessionId: Optional[str] = None
    currentPage: Optional[str] = None


def get_assistant() -> BoohkAssistant:
    try:
        return BoohkAssistant()
    except ValueError:
        logger.error("ANTHROPIC_API_KEY is not set")
        raise HTTPException(status_code=500, detail="AI service not configured")


@router.post("/api/assistant")
async def ask_assistant(
    data: AssistantRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
):
    """Answer the latest user message and store the exchange."""
    if not data.messages:
        raise HTTPException(status_code=400, detail="Invalid messages format")

    messages = [m.dict() for m in data.messages]
    assistant = get_assistant()
    try:
        reply = assistant.reply(messages, current_page=data.currentPage, user_name=user.full_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AssistantServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    last_user = next((m for m in reversed(messages) if m["role"] == "user"), None)
    session_id = chat_service.save_exchange(
        db,
        data.sessionId,
        user.id,
        user.company_id,
        (last_user or {}).get("content") or (last_user or {}).get("parts"),
        reply,
    )

    return {"success": True, "message": reply, "sessionId": session_id or data.sessionId}


@router.get("/api/chat/conversations")
async def list_conversations(
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
):
    conversations = (
        db.query(ChatConversation)
        .filter(ChatConversation.user_id == user.id, ChatConversation.deleted == False)
        .order_by(ChatConversation.last_message_at.desc())
        .all()
    )
    return {"conversations": [c.to_dict() for c in conversations]}


@router.get("/api/chat/conversations/{session_id}/messages")
async def list_conversation_messages(
    session_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_auth),
):
    conversation = db.query(ChatConversation).filter(
        ChatConversation.session_id == session_id,
        ChatConversation.user_id == user.id,
        ChatConversation.deleted == False,
    ).first()
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    messages = (
        db.query(ChatMessage)
        .filter(ChatMessage.conversation_id == conversation.id)
        .order_by(ChatMessage.created_at)
        .all()
    )
    return {"conversation": conversation.to_dict(), "messages": [m.to_dict() for m in messages]}


@router.get("/api/admin/chat-analytics")
async def chat_analytics(
    companyId: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin()),
):
    require_company_id(companyId, user)
    return chat_service.chat_analytics(db, companyId)
