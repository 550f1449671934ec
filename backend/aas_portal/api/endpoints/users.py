from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aas_portal.db.session import get_db
from aas_portal.schemas.user import UserRegister, UserResponse
from aas_portal.services.user_service import UserService

router = APIRouter()


@router.post("/", response_model=UserResponse, status_code=201)
async def register(
    user_in: UserRegister,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Create a member account awaiting staff verification."""
    service = UserService(db)
    return await service.register(user_in)
