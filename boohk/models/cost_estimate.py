from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, JSON
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class CostEstimate(Base):
    __tablename__ = "cost_estimates"

    id = Column(String(32), primary_key=True, default=new_id)
    cost_estimate_number = Column(String(50), nullable=False, unique=True, index=True)
    company_id = Column(String(64), nullable=False, index=True)
    proposal_id = Column(String(32), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    client = Column(JSON, nullable=False, default=dict)
    line_items = Column(JSON, nullable=False, default=list)
    total_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    status = Column(String(20), nullable=False, default="draft", index=True)
    notes = Column(Text, nullable=True)
    custom_message = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    duration_days = Column(Integer, nullable=True)
    valid_until = Column(DateTime, nullable=True)
    password = Column(String(20), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    viewed_at = Column(DateTime, nullable=True)
    responded_at = Column(DateTime, nullable=True)
    created_by = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    STATUSES = ["draft", "sent", "viewed", "accepted", "rejected", "expired"]

    CATEGORIES = [
        "LED Billboard Rental",
        "Static Billboard Rental",
        "Production",
        "Installation",
        "Maintenance",
        "Other",
    ]

    @property
    def is_locked(self):
        return self.status in ("accepted", "rejected")

    def to_dict(self, include_password: bool = True):
        data = {
            "id": self.id,
            "cost_estimate_number": self.cost_estimate_number,
            "company_id": self.company_id,
            "proposal_id": self.proposal_id,
            "title": self.title,
            "client": dict(self.client or {}),
            "line_items": list(self.line_items or []),
            "total_amount": float(self.total_amount or 0),
            "status": self.status,
            "notes": self.notes,
            "custom_message": self.custom_message,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "duration_days": self.duration_days,
            "valid_until": isoformat(self.valid_until),
            "rejection_reason": self.rejection_reason,
            "sent_at": isoformat(self.sent_at),
            "viewed_at": isoformat(self.viewed_at),
            "responded_at": isoformat(self.responded_at),
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_password:
            data["password"] = self.password
        return data

    def __repr__(self):
        return f"<CostEstimate {self.cost_estimate_number} {self.status}>"
