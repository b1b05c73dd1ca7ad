from decimal import Decimal
from sqlalchemy import Column, String, Text, Boolean, DateTime, Numeric
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class Collectible(Base):
    """A billing/collection record tied to a booking."""

    __tablename__ = "collectibles"

    id = Column(String(32), primary_key=True, default=new_id)
    company_id = Column(String(64), nullable=False, index=True)
    booking_id = Column(String(32), nullable=True, index=True)
    quotation_id = Column(String(32), nullable=True, index=True)
    type = Column(String(20), nullable=False, default="sites")  # sites, supplies
    client_name = Column(String(255), nullable=True)
    invoice_no = Column(String(100), nullable=True)
    bs_no = Column(String(100), nullable=True)
    covered_period = Column(String(100), nullable=True)
    total_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    net_amount = Column(Numeric(15, 2), nullable=True)
    mode_of_payment = Column(String(50), nullable=True)
    due_date = Column(DateTime, nullable=True)
    collection_date = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    bir_2307_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    STATUSES = ["pending", "collected", "overdue", "paid"]
    TYPES = ["sites", "supplies"]

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "booking_id": self.booking_id,
            "quotation_id": self.quotation_id,
            "type": self.type,
            "client_name": self.client_name,
            "invoice_no": self.invoice_no,
            "bs_no": self.bs_no,
            "covered_period": self.covered_period,
            "total_amount": float(self.total_amount or 0),
            "net_amount": float(self.net_amount) if self.net_amount is not None else None,
            "mode_of_payment": self.mode_of_payment,
            "due_date": isoformat(self.due_date),
            "collection_date": isoformat(self.collection_date),
            "status": self.status,
            "bir_2307_url": self.bir_2307_url,
            "notes": self.notes,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Collectible {self.invoice_no} {self.status}>"
