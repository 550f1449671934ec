import enum
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Date, DateTime, Enum, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from aas_portal.db.base import Base

class ClaimStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"

class Claim(Base):
    __tablename__ = "claims"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    date = Column(Date, nullable=False)

    accident_images = Column(JSON, nullable=False, default=list)
    police_report = Column(String, nullable=True)
    insurance_receipt = Column(String, nullable=True)

    status = Column(Enum(ClaimStatus), default=ClaimStatus.PENDING, nullable=False)
    progress = Column(Integer, default=0, nullable=False)

    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
