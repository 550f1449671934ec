from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from aas_portal.schemas.user import UserSummary

class PostCreate(BaseModel):
    title: str
    content: str
    media: Optional[str] = None

class PostUpdate(PostCreate):
    version: int

class CommentCreate(BaseModel):
    content: str

class CommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: Optional[datetime] = None
    author: Optional[UserSummary] = None

    class Config:
        from_attributes = True

class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    media: Optional[str] = None
    media_kind: Optional[str] = None
    created_by: int
    version: int
    created_at: Optional[datetime] = None
    creator: Optional[UserSummary] = None

    class Config:
        from_attributes = True

class PostWithComments(PostResponse):
    comments: List[CommentResponse] = []
