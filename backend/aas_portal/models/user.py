import enum
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Enum
from sqlalchemy.sql import func
from aas_portal.db.base import Base

class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    phone_number = Column(String(8), unique=True, index=True, nullable=False)
    pin_hash = Column(String, nullable=False)

    profile_image = Column(String, nullable=True)
    driver_license = Column(String, nullable=True)
    insurance_image = Column(String, nullable=True)
    insurance_start = Column(Date, nullable=True)
    insurance_end = Column(Date, nullable=True)
    car_number = Column(String, nullable=False)

    is_verified = Column(Boolean, default=False, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)

    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
