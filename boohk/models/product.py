from decimal import Decimal
from sqlalchemy import Column, String, Text, Boolean, DateTime, Numeric, JSON
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class Product(Base):
    """A billboard or LED site offered for rent."""

    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=new_id)
    company_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    site_code = Column(String(100), nullable=True)
    location = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default="static")
    price = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))  # per month
    specs = Column(JSON, nullable=False, default=dict)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_by = Column(String(32), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    TYPES = ["static", "digital", "dynamic"]

    @property
    def is_digital(self):
        return self.type in ("digital", "dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "name": self.name,
            "site_code": self.site_code,
            "location": self.location,
            "type": self.type,
            "price": float(self.price or 0),
            "specs": dict(self.specs or {}),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Product {self.name}>"
