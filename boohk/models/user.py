from sqlalchemy import Column, String, Boolean, DateTime, JSON
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    company_id = Column(String(64), nullable=True, index=True)
    roles = Column(JSON, nullable=False, default=list)  # department roles
    is_active = Column(Boolean, nullable=False, default=True)
    signature_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    ROLES = ["admin", "sales", "logistics", "cms", "accounting", "treasury", "it", "business"]

    @property
    def full_name(self):
        names = [self.first_name, self.middle_name, self.last_name]
        return " ".join(n for n in names if n)

    @property
    def is_admin(self):
        return "admin" in (self.roles or [])

    def has_role(self, role: str) -> bool:
        """Admins hold every role."""
        return self.is_admin or role in (self.roles or [])

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "middle_name": self.middle_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "company_id": self.company_id,
            "roles": list(self.roles or []),
            "is_active": self.is_active,
            "signature_url": self.signature_url,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<User {self.email}>"
