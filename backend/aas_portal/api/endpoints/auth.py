from typing import Any, Optional

from fastapi import APIRouter, Depends, Response

from aas_portal.api import deps
from aas_portal.api.guard import require_user
from aas_portal.core.config import settings
from aas_portal.core.errors import AuthenticationFailed
from aas_portal.models.user import User
from aas_portal.schemas.user import LoginRequest, LoginResponse, UserResponse
from aas_portal.services.session_store import SessionStore

router = APIRouter()


def landing_path(user: User) -> str:
    return "/admin" if user.is_admin else "/dashboard"


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    store: SessionStore = Depends(deps.get_session_store),
) -> Any:
    session = await store.login(credentials.phone_number, credentials.pin)
    if session is None:
        raise AuthenticationFailed()

    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session.token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return LoginResponse(
        access_token=session.token,
        expires_at=session.expires_at,
        redirect_to=landing_path(session.user),
        user=UserResponse.model_validate(session.user),
    )


@router.post("/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(deps.get_session_token),
    store: SessionStore = Depends(deps.get_session_store),
) -> Any:
    store.logout(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"redirect_to": "/"}


@router.get("/me", response_model=UserResponse)
async def read_me(current_user: User = Depends(require_user)) -> Any:
    return current_user
