from pydantic import BaseModel
from typing import Optional

class InvitationLinkRequest(BaseModel):
    url: str

class InvitationLinkResponse(BaseModel):
    token: Optional[str] = None
    flow: Optional[str] = None
    email: Optional[str] = None
    cleaned_url: str
    redirect_to: Optional[str] = None

class AcceptInviteRequest(BaseModel):
    token: Optional[str] = None
    type: str = "invite"
    password: str
    confirm_password: str

class IdentityLoginRequest(BaseModel):
    email: str
    password: str
