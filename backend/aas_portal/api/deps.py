from typing import Optional

from fastapi import Depends, Request

from aas_portal.core.config import settings
from aas_portal.core.messages import negotiate_locale
from aas_portal.models.user import User
from aas_portal.services.identity_bridge import IdentityWidgetBridge
from aas_portal.services.session_store import SessionStore
from aas_portal.storage.object_store import LocalObjectStorage


def get_locale(request: Request) -> str:
    return negotiate_locale(request.headers.get("accept-language"), settings.DEFAULT_LOCALE)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_storage(request: Request) -> LocalObjectStorage:
    return request.app.state.storage


def get_identity_bridge(request: Request) -> IdentityWidgetBridge:
    return request.app.state.identity_bridge


def get_session_token(request: Request) -> Optional[str]:
    """Session token from the session cookie, or a Bearer Authorization header."""
    authorization = request.headers.get("authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials.strip()
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_optional_user(
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
) -> Optional[User]:
    if store.loading:
        return None
    return await store.restore(token)
