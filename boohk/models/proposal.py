from decimal import Decimal
from sqlalchemy import Column, String, Text, Boolean, DateTime, Numeric, JSON, ForeignKey
from sqlalchemy.orm import relationship
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class Proposal(Base):
    __tablename__ = "proposals"

    id = Column(String(32), primary_key=True, default=new_id)
    company_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    client = Column(JSON, nullable=False, default=dict)  # company, contactPerson, email...
    products = Column(JSON, nullable=False, default=list)
    total_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    status = Column(String(20), nullable=False, default="draft", index=True)
    password = Column(String(20), nullable=True)
    valid_until = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    custom_message = Column(Text, nullable=True)
    created_by = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    activities = relationship(
        "ProposalActivity",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="ProposalActivity.created_at.desc()",
    )

    STATUSES = ["draft", "sent", "viewed", "accepted", "declined"]

    @property
    def contact_name(self):
        client = self.client or {}
        return client.get("contactPerson") or client.get("name") or "Client"

    def to_dict(self, include_password: bool = True):
        data = {
            "id": self.id,
            "company_id": self.company_id,
            "title": self.title,
            "client": dict(self.client or {}),
            "products": list(self.products or []),
            "total_amount": float(self.total_amount or 0),
            "status": self.status,
            "valid_until": isoformat(self.valid_until),
            "notes": self.notes,
            "custom_message": self.custom_message,
            "created_by": self.created_by,
            "password_protected": bool(self.password),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_password:
            data["password"] = self.password
        return data

    def __repr__(self):
        return f"<Proposal {self.title}>"


class ProposalActivity(Base):
    __tablename__ = "proposal_activities"

    id = Column(String(32), primary_key=True, default=new_id)
    proposal_id = Column(
        String(32),
        ForeignKey("proposals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = Column(String(30), nullable=False)
    description = Column(Text, nullable=False)
    performed_by = Column(String(64), nullable=False)
    performed_by_name = Column(String(255), nullable=True)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    proposal = relationship("Proposal", back_populates="activities")

    TYPES = [
        "created",
        "status_changed",
        "email_sent",
        "viewed",
        "pdf_generated",
        "updated",
        "comment_added",
    ]

    def to_dict(self):
        return {
            "id": self.id,
            "proposal_id": self.proposal_id,
            "type": self.type,
            "description": self.description,
            "performed_by": self.performed_by,
            "performed_by_name": self.performed_by_name,
            "details": dict(self.details or {}),
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<ProposalActivity {self.type}>"
