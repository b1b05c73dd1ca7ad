from decimal import Decimal
from sqlalchemy import Column, String, Text, Boolean, DateTime, Numeric, JSON
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True, default=new_id)
    reservation_id = Column(String(50), nullable=False, index=True)
    company_id = Column(String(64), nullable=False, index=True)
    quotation_id = Column(String(32), nullable=True, index=True)
    quotation_number = Column(String(50), nullable=True)
    product_id = Column(String(32), nullable=True, index=True)
    product_name = Column(String(255), nullable=True)
    client = Column(JSON, nullable=False, default=dict)
    items = Column(JSON, nullable=False, default=dict)
    cost_details = Column(JSON, nullable=False, default=dict)
    total_cost = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="RESERVED", index=True)
    type = Column(String(30), nullable=False, default="RENTAL")
    payment_method = Column(String(50), nullable=False, default="Manual Payment")
    project_name = Column(String(255), nullable=True)
    cancel_reason = Column(Text, nullable=True)
    project_compliance = Column(JSON, nullable=False, default=dict)
    user_id = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    STATUSES = ["RESERVED", "ONGOING", "COMPLETED", "CANCELLED"]

    def to_dict(self):
        return {
            "id": self.id,
            "reservation_id": self.reservation_id,
            "company_id": self.company_id,
            "quotation_id": self.quotation_id,
            "quotation_number": self.quotation_number,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "client": dict(self.client or {}),
            "items": dict(self.items or {}),
            "cost_details": dict(self.cost_details or {}),
            "total_cost": float(self.total_cost or 0),
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "status": self.status,
            "type": self.type,
            "payment_method": self.payment_method,
            "project_name": self.project_name,
            "cancel_reason": self.cancel_reason,
            "project_compliance": dict(self.project_compliance or {}),
            "user_id": self.user_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Booking {self.reservation_id}>"
