"""
Page routes. Each answers with the view model its page renders.

These are registered after the API router and the storage mount, so the
catch-all at the end only sees paths nothing else claimed.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from aas_portal.api import deps
from aas_portal.api.endpoints.auth import landing_path
from aas_portal.api.endpoints.posts import posts_with_comments
from aas_portal.api.guard import require_admin, require_verified
from aas_portal.core.config import settings
from aas_portal.core.errors import NotFound
from aas_portal.core.messages import translate
from aas_portal.db.session import get_db
from aas_portal.models.user import User
from aas_portal.schemas.claim import ClaimFeedItem, ClaimResponse
from aas_portal.schemas.user import UserResponse
from aas_portal.services.claim_service import ClaimService
from aas_portal.services.homepage_content import load_homepage_content
from aas_portal.services.identity_bridge import parse_invitation, password_setup_path
from aas_portal.services.post_service import PostService
from aas_portal.services.user_service import UserService

router = APIRouter(include_in_schema=False)


@router.get("/")
async def home(request: Request, db: AsyncSession = Depends(get_db)) -> Any:
    invitation, _ = parse_invitation(str(request.url))
    if invitation is not None:
        return RedirectResponse(password_setup_path(invitation), status_code=303)

    claims = await ClaimService(db).get_all_claims(with_user=False)
    return {
        "view": "home",
        "content": load_homepage_content(settings.CONTENT_DIR),
        "posts": await posts_with_comments(PostService(db)),
        "claims": [ClaimFeedItem.model_validate(c) for c in claims],
    }


@router.get("/login")
async def login_page(user: Optional[User] = Depends(deps.get_optional_user)) -> Any:
    if user is not None:
        return RedirectResponse(landing_path(user), status_code=303)
    return {"view": "login"}


@router.get("/register")
async def register_page(user: Optional[User] = Depends(deps.get_optional_user)) -> Any:
    if user is not None:
        return RedirectResponse(landing_path(user), status_code=303)
    return {"view": "register"}


@router.get("/dashboard")
async def dashboard(
    current_user: User = Depends(require_verified),
    db: AsyncSession = Depends(get_db),
) -> Any:
    claims = await ClaimService(db).get_user_claims(current_user.id)
    return {
        "view": "dashboard",
        "user": UserResponse.model_validate(current_user),
        "claims": [ClaimResponse.model_validate(c) for c in claims],
    }


@router.get("/admin")
async def admin_dashboard(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return {
        "view": "admin",
        "user": UserResponse.model_validate(admin),
        "stats": await UserService(db).get_stats(),
    }


@router.get("/password-setup")
async def password_setup(
    token: Optional[str] = None,
    type: str = "invite",
    email: Optional[str] = None,
    locale: str = Depends(deps.get_locale),
) -> Any:
    view = {"view": "password_setup", "token": token, "flow": type, "email": email}
    if not token:
        view["error"] = translate("invite_token_missing", locale)
    return view


@router.get("/{path:path}")
async def catch_all(path: str) -> Any:
    requested = f"/{path}"
    if requested == settings.API_V1_STR or requested.startswith(f"{settings.API_V1_STR}/"):
        raise NotFound("route_not_found")
    return RedirectResponse("/", status_code=303)
