from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class Report(Base):
    """A logistics service report filed against a booked site."""
    __tablename__ = "reports"

    id = Column(String(32), primary_key=True, default=new_id)
    report_number = Column(String(50), nullable=False, index=True)
    company_id = Column(String(64), nullable=False, index=True)
    product_id = Column(String(32), nullable=True, index=True)
    site_name = Column(String(255), nullable=True)
    site_code = Column(String(50), nullable=True)
    booking_id = Column(String(32), nullable=True, index=True)
    service_assignment_id = Column(String(32), nullable=True, index=True)
    reservation_number = Column(String(50), nullable=True)
    job_order_number = Column(String(50), nullable=True)
    job_order_type = Column(String(50), nullable=True)
    client_id = Column(String(32), nullable=True)
    client_name = Column(String(255), nullable=True)
    client_email = Column(String(255), nullable=True)
    seller_id = Column(String(32), nullable=True)
    sales = Column(String(255), nullable=True)
    booking_start = Column(DateTime, nullable=True)
    booking_end = Column(DateTime, nullable=True)
    breakdate = Column(DateTime, nullable=True)
    report_type = Column(String(50), nullable=False, index=True)
    report_date = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="draft", index=True)
    category = Column(String(100), nullable=True)
    subcategory = Column(String(100), nullable=True)
    priority = Column(String(20), nullable=True)
    completion_percentage = Column(Integer, nullable=True)
    installation_status = Column(String(20), nullable=True)
    installation_timeline = Column(String(50), nullable=True)
    delay_reason = Column(Text, nullable=True)
    delay_days = Column(String(20), nullable=True)
    description_of_work = Column(Text, nullable=True)
    location = Column(String(500), nullable=True)
    assigned_to = Column(String(255), nullable=True)
    requested_by = Column(JSON, nullable=True)
    product = Column(JSON, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    created_by = Column(String(32), nullable=True)
    created_by_name = Column(String(255), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    REPORT_TYPES = [
        "completion-report",
        "installation-report",
        "monitoring-report",
        "progress-report",
        "roll-down-report",
    ]
    STATUSES = ["draft", "posted"]

    def to_dict(self):
        return {
            "id": self.id,
            "report_number": self.report_number,
            "company_id": self.company_id,
            "product_id": self.product_id,
            "site_name": self.site_name,
            "site_code": self.site_code,
            "booking_id": self.booking_id,
            "service_assignment_id": self.service_assignment_id,
            "reservation_number": self.reservation_number,
            "job_order_number": self.job_order_number,
            "job_order_type": self.job_order_type,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "seller_id": self.seller_id,
            "sales": self.sales,
            "booking_start": isoformat(self.booking_start),
            "booking_end": isoformat(self.booking_end),
            "breakdate": isoformat(self.breakdate),
            "report_type": self.report_type,
            "report_date": isoformat(self.report_date),
            "status": self.status,
            "category": self.category,
            "subcategory": self.subcategory,
            "priority": self.priority,
            "completion_percentage": self.completion_percentage,
            "installation_status": self.installation_status,
            "installation_timeline": self.installation_timeline,
            "delay_reason": self.delay_reason,
            "delay_days": self.delay_days,
            "description_of_work": self.description_of_work,
            "location": self.location,
            "assigned_to": self.assigned_to,
            "requested_by": self.requested_by,
            "product": self.product,
            "attachments": list(self.attachments or []),
            "tags": list(self.tags or []),
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Report {self.report_number} {self.report_type}>"
