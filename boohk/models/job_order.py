from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class JobOrder(Base):
    __tablename__ = "job_orders"

    id = Column(String(32), primary_key=True, default=new_id)
    jo_number = Column(String(50), nullable=False, index=True)
    jo_type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    company_id = Column(String(64), nullable=True, index=True)
    quotation_id = Column(String(32), nullable=True, index=True)
    booking_id = Column(String(32), nullable=True, index=True)
    product_id = Column(String(32), nullable=True, index=True)
    site_name = Column(String(255), nullable=True)
    site_location = Column(Text, nullable=True)
    client_name = Column(String(255), nullable=True)
    client_company = Column(String(255), nullable=True)
    date_requested = Column(DateTime, nullable=True)
    deadline = Column(DateTime, nullable=True)
    requested_by = Column(String(255), nullable=True)
    assign_to = Column(String(32), nullable=True, index=True)
    remarks = Column(Text, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    project_compliance = Column(JSON, nullable=False, default=dict)
    missing_compliance = Column(JSON, nullable=False, default=list)
    created_by = Column(String(32), nullable=True, index=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    TYPES = [
        "Installation",
        "Dismantling",
        "Maintenance",
        "Repair",
        "Change Material",
        "Roll Down",
        "Other",
    ]
    STATUSES = ["draft", "pending", "approved", "in_progress", "completed", "cancelled"]

    def to_dict(self):
        return {
            "id": self.id,
            "jo_number": self.jo_number,
            "jo_type": self.jo_type,
            "status": self.status,
            "company_id": self.company_id,
            "quotation_id": self.quotation_id,
            "booking_id": self.booking_id,
            "product_id": self.product_id,
            "site_name": self.site_name,
            "site_location": self.site_location,
            "client_name": self.client_name,
            "client_company": self.client_company,
            "date_requested": isoformat(self.date_requested),
            "deadline": isoformat(self.deadline),
            "requested_by": self.requested_by,
            "assign_to": self.assign_to,
            "remarks": self.remarks,
            "attachments": list(self.attachments or []),
            "project_compliance": dict(self.project_compliance or {}),
            "missing_compliance": list(self.missing_compliance or []),
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<JobOrder {self.jo_number}>"
