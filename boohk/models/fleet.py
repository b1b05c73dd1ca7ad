from sqlalchemy import Column, String, Text, Boolean, DateTime, Date
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class FleetVehicle(Base):
    __tablename__ = "fleet_vehicles"

    id = Column(String(32), primary_key=True, default=new_id)
    company_id = Column(String(64), nullable=False, index=True)
    vehicle_number = Column(String(50), nullable=False)
    vehicle_type = Column(String(50), nullable=True)
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    plate_number = Column(String(30), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    assigned_driver = Column(String(255), nullable=True)
    registration_expiry = Column(Date, nullable=True)
    insurance_expiry = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    STATUSES = ["active", "maintenance", "inactive"]

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "vehicle_number": self.vehicle_number,
            "vehicle_type": self.vehicle_type,
            "make": self.make,
            "model": self.model,
            "plate_number": self.plate_number,
            "status": self.status,
            "assigned_driver": self.assigned_driver,
            "registration_expiry": isoformat(self.registration_expiry),
            "insurance_expiry": isoformat(self.insurance_expiry),
            "notes": self.notes,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<FleetVehicle {self.vehicle_number}>"
