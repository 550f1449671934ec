from pydantic import BaseModel
from typing import List, Optional

class UploadOutcomeResponse(BaseModel):
    filename: str
    url: Optional[str] = None
    error: Optional[str] = None

class UploadResponse(BaseModel):
    purpose: str
    bucket: str
    outcomes: List[UploadOutcomeResponse]
    urls: List[str]
    uploaded: int
    failed: int
