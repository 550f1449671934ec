"""
Authorization guard for page and API routes.

The decision is recomputed on every request from the session store state and
the current user record; nothing about it is cached.
"""
import enum
from typing import Optional

from fastapi import Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from aas_portal.api import deps
from aas_portal.core.config import settings
from aas_portal.core.messages import translate
from aas_portal.models.user import User
from aas_portal.services.session_store import SessionStore


class AccessDecision(str, enum.Enum):
    LOADING = "loading"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_DASHBOARD = "redirect_dashboard"
    VERIFICATION_REQUIRED = "verification_required"
    ALLOW = "allow"


def evaluate_access(
    loading: bool,
    user: Optional[User],
    admin_only: bool = False,
    require_verification: bool = False,
) -> AccessDecision:
    if loading:
        return AccessDecision.LOADING
    if user is None:
        return AccessDecision.REDIRECT_LOGIN
    if admin_only and not user.is_admin:
        return AccessDecision.REDIRECT_DASHBOARD
    if require_verification and not user.is_verified:
        return AccessDecision.VERIFICATION_REQUIRED
    return AccessDecision.ALLOW


class AccessDenied(Exception):
    def __init__(self, decision: AccessDecision):
        self.decision = decision
        super().__init__(decision.value)


class RouteGuard:
    """Dependency that resolves the current user or raises ``AccessDenied``."""

    def __init__(self, admin_only: bool = False, require_verification: bool = False):
        self.admin_only = admin_only
        self.require_verification = require_verification

    async def __call__(
        self,
        token: Optional[str] = Depends(deps.get_session_token),
        store: SessionStore = Depends(deps.get_session_store),
    ) -> User:
        user = None if store.loading else await store.restore(token)
        decision = evaluate_access(store.loading, user, self.admin_only, self.require_verification)
        if decision is not AccessDecision.ALLOW:
            raise AccessDenied(decision)
        return user


require_user = RouteGuard()
require_verified = RouteGuard(require_verification=True)
require_admin = RouteGuard(admin_only=True)


_API_STATUS = {
    AccessDecision.LOADING: (503, "loading"),
    AccessDecision.REDIRECT_LOGIN: (401, "login_required"),
    AccessDecision.REDIRECT_DASHBOARD: (403, "admin_required"),
    AccessDecision.VERIFICATION_REQUIRED: (403, "verification_required"),
}


async def access_denied_handler(request: Request, exc: AccessDenied):
    locale = deps.get_locale(request)
    status_code, key = _API_STATUS[exc.decision]

    if not request.url.path.startswith(settings.API_V1_STR):
        if exc.decision is AccessDecision.REDIRECT_LOGIN:
            return RedirectResponse("/login", status_code=303)
        if exc.decision is AccessDecision.REDIRECT_DASHBOARD:
            return RedirectResponse("/dashboard", status_code=303)
        return JSONResponse(
            status_code=status_code,
            content={"view": exc.decision.value, "message": translate(key, locale)},
        )

    return JSONResponse(
        status_code=status_code,
        content={"detail": translate(key, locale), "code": key},
    )
