"""
Audit trail of staff edits to claims.
"""
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Enum, Text
from sqlalchemy.sql import func
from aas_portal.db.base import Base
from aas_portal.models.claim import ClaimStatus


class ClaimUpdate(Base):
    """
    One row per admin edit of a claim's status/progress.
    Append-only: rows are never updated or deleted.
    """
    __tablename__ = "claim_updates"

    id = Column(Integer, primary_key=True, index=True)
    claim_id = Column(Integer, ForeignKey("claims.id"), nullable=False, index=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    new_status = Column(Enum(ClaimStatus), nullable=True)
    new_progress = Column(Integer, nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
