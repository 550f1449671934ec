from pydantic import BaseModel, Field
from typing import List, Optional
import datetime as dt
from aas_portal.models.claim import ClaimStatus
from aas_portal.schemas.user import UserSummary

class ClaimBase(BaseModel):
    title: str
    description: str
    date: dt.date

class ClaimCreate(ClaimBase):
    accident_images: List[str] = []
    police_report: Optional[str] = None
    insurance_receipt: Optional[str] = None

class ClaimResponse(ClaimBase):
    id: int
    user_id: int
    accident_images: List[str]
    police_report: Optional[str] = None
    insurance_receipt: Optional[str] = None
    status: ClaimStatus
    progress: int
    version: int
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True

class AdminClaimResponse(ClaimResponse):
    user: Optional[UserSummary] = None

class ClaimFeedItem(BaseModel):
    """Anonymised claim row for the public landing page."""
    id: int
    status: ClaimStatus
    progress: int
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True

class ClaimStatusUpdate(BaseModel):
    status: ClaimStatus
    progress: int = Field(ge=0, le=100)
    note: Optional[str] = None
    version: int

class ClaimUpdateResponse(BaseModel):
    id: int
    claim_id: int
    updated_by: int
    new_status: Optional[ClaimStatus] = None
    new_progress: Optional[int] = None
    note: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
