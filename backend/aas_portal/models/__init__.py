from .user import User, UserRole
from .claim import Claim, ClaimStatus
from .audit import ClaimUpdate
from .post import Post, Comment

__all__ = [
    "User",
    "UserRole",
    "Claim",
    "ClaimStatus",
    "ClaimUpdate",
    "Post",
    "Comment",
]
