from sqlalchemy import Column, String, Text, Boolean, DateTime
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), nullable=False, index=True)
    company_id = Column(String(64), nullable=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)
    navigate_to = Column(String(500), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "company_id": self.company_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "navigate_to": self.navigate_to,
            "is_read": self.is_read,
            "created_at": isoformat(self.created_at),
        }
