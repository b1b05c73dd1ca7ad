from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class ServiceAssignment(Base):
    __tablename__ = "service_assignments"

    id = Column(String(32), primary_key=True, default=new_id)
    sa_number = Column(String(20), nullable=False, index=True)
    company_id = Column(String(64), nullable=False, index=True)
    job_order_id = Column(String(32), nullable=True, index=True)
    booking_id = Column(String(32), nullable=True, index=True)
    product_id = Column(String(32), nullable=True, index=True)
    site_name = Column(String(255), nullable=True)
    service_type = Column(String(50), nullable=False)
    assigned_to = Column(String(255), nullable=True)
    crew = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="Draft", index=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    remarks = Column(Text, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    created_by = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    SERVICE_TYPES = [
        "Installation",
        "Dismantling",
        "Maintenance",
        "Repair",
        "Change Material",
        "Roll Down",
        "Monitoring",
        "Other",
    ]
    STATUSES = ["Draft", "Pending", "Ongoing", "Completed", "Cancelled"]

    def to_dict(self):
        return {
            "id": self.id,
            "sa_number": self.sa_number,
            "company_id": self.company_id,
            "job_order_id": self.job_order_id,
            "booking_id": self.booking_id,
            "product_id": self.product_id,
            "site_name": self.site_name,
            "service_type": self.service_type,
            "assigned_to": self.assigned_to,
            "crew": list(self.crew or []),
            "status": self.status,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "remarks": self.remarks,
            "attachments": list(self.attachments or []),
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<ServiceAssignment SA#{self.sa_number}>"
