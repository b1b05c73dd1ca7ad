from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class ChatConversation(Base):
    __tablename__ = "chat_conversations"

    id = Column(String(32), primary_key=True, default=new_id)
    session_id = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(String(32), nullable=True, index=True)
    company_id = Column(String(64), nullable=True, index=True)
    title = Column(String(255), nullable=True)
    message_count = Column(Integer, nullable=False, default=0)
    last_message_at = Column(DateTime, nullable=True)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    messages = relationship(
        "ChatMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ChatMessage.created_at",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "session_id": self.session_id,
            "user_id": self.user_id,
            "company_id": self.company_id,
            "title": self.title,
            "message_count": self.message_count,
            "last_message_at": isoformat(self.last_message_at),
            "created_at": isoformat(self.created_at),
        }


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(String(32), primary_key=True, default=new_id)
    conversation_id = Column(
        String(32),
        ForeignKey("chat_conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(String(20), nullable=False)  # user, assistant
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    conversation = relationship("ChatConversation", back_populates="messages")

    ROLES = ["user", "assistant"]

    def to_dict(self):
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "created_at": isoformat(self.created_at),
        }
