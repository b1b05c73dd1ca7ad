from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, JSON
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class Quotation(Base):
    __tablename__ = "quotations"

    id = Column(String(32), primary_key=True, default=new_id)
    quotation_number = Column(String(50), nullable=False, unique=True, index=True)
    company_id = Column(String(64), nullable=False, index=True)
    product_id = Column(String(32), nullable=True, index=True)
    client_id = Column(String(32), nullable=True, index=True)
    proposal_id = Column(String(32), nullable=True)

    # Client snapshot at the time of quoting
    client_name = Column(String(255), nullable=True)
    client_email = Column(String(255), nullable=True)
    client_company_name = Column(String(255), nullable=True)
    client_phone = Column(String(50), nullable=True)
    client_address = Column(Text, nullable=True)
    client_designation = Column(String(255), nullable=True)

    items = Column(JSON, nullable=False, default=dict)  # quoted site snapshot
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    duration_days = Column(Integer, nullable=False, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    vat_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    vat_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    status = Column(String(20), nullable=False, default="draft", index=True)
    valid_until = Column(DateTime, nullable=True)
    password = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    viewed_at = Column(DateTime, nullable=True)
    responded_at = Column(DateTime, nullable=True)

    project_compliance = Column(JSON, nullable=False, default=dict)

    # Treasury rollup from collectibles
    collection_status = Column(String(30), nullable=True)
    collection_progress = Column(Integer, nullable=True)
    total_collected_amount = Column(Numeric(15, 2), nullable=True)
    total_pending_amount = Column(Numeric(15, 2), nullable=True)

    seller_id = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    STATUSES = ["draft", "sent", "viewed", "accepted", "rejected", "expired", "reserved"]

    @property
    def is_locked(self):
        """Responded or booked quotations can no longer be edited."""
        return self.status in ("accepted", "rejected", "reserved")

    def to_dict(self, include_password: bool = True):
        data = {
            "id": self.id,
            "quotation_number": self.quotation_number,
            "company_id": self.company_id,
            "product_id": self.product_id,
            "client_id": self.client_id,
            "proposal_id": self.proposal_id,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_company_name": self.client_company_name,
            "client_phone": self.client_phone,
            "client_address": self.client_address,
            "client_designation": self.client_designation,
            "items": dict(self.items or {}),
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "duration_days": self.duration_days,
            "total_amount": float(self.total_amount or 0),
            "vat_rate": float(self.vat_rate or 0),
            "vat_amount": float(self.vat_amount or 0),
            "status": self.status,
            "valid_until": isoformat(self.valid_until),
            "notes": self.notes,
            "rejection_reason": self.rejection_reason,
            "sent_at": isoformat(self.sent_at),
            "viewed_at": isoformat(self.viewed_at),
            "responded_at": isoformat(self.responded_at),
            "project_compliance": dict(self.project_compliance or {}),
            "collection_status": self.collection_status,
            "collection_progress": self.collection_progress,
            "total_collected_amount": float(self.total_collected_amount or 0),
            "total_pending_amount": float(self.total_pending_amount or 0),
            "seller_id": self.seller_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_password:
            data["password"] = self.password
        return data

    def __repr__(self):
        return f"<Quotation {self.quotation_number} {self.status}>"
