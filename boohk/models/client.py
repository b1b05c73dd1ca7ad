from sqlalchemy import Column, String, Text, Boolean, DateTime
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(32), primary_key=True, default=new_id)
    company_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    company_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    designation = Column(String(255), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_by = Column(String(32), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "name": self.name,
            "company_name": self.company_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "designation": self.designation,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Client {self.name}>"
