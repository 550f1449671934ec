from pydantic import BaseModel
from typing import Generic, TypeVar

ItemT = TypeVar("ItemT")

class AdminStats(BaseModel):
    total_users: int
    verified_users: int
    total_claims: int
    pending_claims: int
    total_posts: int

class VerifyUserRequest(BaseModel):
    version: int

class AdminMutationResponse(BaseModel, Generic[ItemT]):
    """A changed record together with the recomputed dashboard counters."""
    item: ItemT
    stats: AdminStats

class AdminDeleteResponse(BaseModel):
    id: int
    deleted: bool
    stats: AdminStats
