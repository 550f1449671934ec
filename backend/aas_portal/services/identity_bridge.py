"""
Bridge to the hosted staff identity service (Netlify Identity / GoTrue).

Staff accounts are not phone/PIN members: they are invited by e-mail and set
their password through an invitation link. This module parses those links
and drives the identity API the widget would otherwise call from the page.
"""
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from aas_portal.core.errors import IdentityError, ValidationFailed

logger = logging.getLogger(__name__)

WIDGET_SCRIPT_URL = "https://identity.netlify.com/v1/netlify-identity-widget.js"
PASSWORD_SETUP_PATH = "/password-setup"

EVENTS = ("init", "login", "signup", "error")
WIDGET_MODES = ("login", "signup")

_QUERY_KEYS = {"token", "invite_token", "type", "email"}


@dataclass
class InvitationParams:
    token: str
    flow: str  # invite | recovery
    email: Optional[str] = None


def _strip(pairs: List[Tuple[str, str]], consumed: set) -> str:
    return urlencode([(k, v) for k, v in pairs if k not in consumed])


def parse_invitation(url: str) -> Tuple[Optional[InvitationParams], str]:
    """
    Extract an invitation or recovery token from a link.

    The fragment is checked first (``#invite_token=``, ``#recovery_token=``,
    ``#access_token=...&type=invite``), then the query string
    (``?token=...&type=invite``, ``?invite_token=``). Returns the parameters
    (or None) and the link with the consumed parameters removed.
    """
    parts = urlsplit(url)
    fragment = dict(parse_qsl(parts.fragment))
    query_pairs = parse_qsl(parts.query)
    query = dict(query_pairs)

    params = None
    if fragment.get("invite_token") or fragment.get("recovery_token"):
        flow = fragment.get("type") or ("invite" if fragment.get("invite_token") else "recovery")
        params = InvitationParams(
            token=fragment.get("invite_token") or fragment["recovery_token"],
            flow=flow,
            email=fragment.get("email"),
        )
    elif fragment.get("access_token") and fragment.get("type") == "invite":
        params = InvitationParams(token=fragment["access_token"], flow="invite", email=fragment.get("email"))

    if params is not None:
        cleaned = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))
        return params, cleaned

    token = query.get("token") or query.get("invite_token")
    if token:
        flow = query.get("type") or "invite"
        params = InvitationParams(token=token, flow=flow, email=query.get("email"))
        cleaned = urlunsplit((parts.scheme, parts.netloc, parts.path, _strip(query_pairs, _QUERY_KEYS), parts.fragment))
        return params, cleaned

    return None, url


def password_setup_path(params: InvitationParams) -> str:
    query = {"token": params.token, "type": params.flow}
    if params.email:
        query["email"] = params.email
    return f"{PASSWORD_SETUP_PATH}?{urlencode(query)}"


def check_password(password: str, confirm_password: Optional[str] = None) -> Optional[str]:
    """Return the message key of the first password rule broken, or None."""
    if len(password) < 8:
        return "password_too_short"
    if not any(c.islower() for c in password):
        return "password_lowercase"
    if not any(c.isupper() for c in password):
        return "password_uppercase"
    if not any(c.isdigit() for c in password):
        return "password_digit"
    if confirm_password is not None and password != confirm_password:
        return "passwords_mismatch"
    return None


class IdentityWidgetBridge:
    """
    Talks to the identity API on behalf of the password-setup and staff login views.

    Handlers registered with ``on()`` are called for ``init``, ``login``,
    ``signup`` and ``error``; they may be plain functions or coroutines.
    """

    def __init__(self, identity_url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self.identity_url = identity_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._handlers: Dict[str, List[Callable[..., Any]]] = {event: [] for event in EVENTS}
        self.settings: Optional[Dict[str, Any]] = None

    @property
    def initialized(self) -> bool:
        return self.settings is not None

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown identity event: {event}")
        self._handlers[event].append(handler)

    async def _emit(self, event: str, payload: Any) -> None:
        for handler in self._handlers[event]:
            result = handler(payload)
            if inspect.isawaitable(result):
                await result

    async def init(self) -> Dict[str, Any]:
        if self.settings is None:
            self.settings = await self._request("GET", "/settings")
            await self._emit("init", self.settings)
        return self.settings

    def open(self, mode: str = "login") -> Dict[str, str]:
        """Describe the widget the page should open in the given mode."""
        if mode not in WIDGET_MODES:
            raise ValidationFailed("invalid_widget_mode")
        return {"mode": mode, "script": WIDGET_SCRIPT_URL, "identity_url": self.identity_url}

    async def accept_invite(self, token: str, password: str) -> Dict[str, Any]:
        await self.init()
        session = await self._request("POST", "/verify", json={"token": token, "type": "signup", "password": password})
        user = await self._fetch_user(session)
        await self._emit("signup", user)
        await self._emit("login", user)
        return user

    async def recover(self, token: str, password: str) -> Dict[str, Any]:
        await self.init()
        session = await self._request("POST", "/verify", json={"token": token, "type": "recovery"})
        user = await self._request(
            "PUT",
            "/user",
            json={"password": password},
            headers={"Authorization": f"Bearer {session.get('access_token', '')}"},
        )
        await self._emit("login", user)
        return user

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        await self.init()
        session = await self._request(
            "POST",
            "/token",
            data={"grant_type": "password", "username": email, "password": password},
        )
        user = await self._fetch_user(session)
        await self._emit("login", user)
        return user

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _fetch_user(self, session: Dict[str, Any]) -> Dict[str, Any]:
        access_token = session.get("access_token")
        if not access_token:
            return session
        user = await self._request("GET", "/user", headers={"Authorization": f"Bearer {access_token}"})
        user.setdefault("token", {"access_token": access_token, "expires_in": session.get("expires_in")})
        return user

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.identity_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Identity service unreachable ({method} {path}): {e}")
            await self._emit("error", e)
            raise IdentityError(str(e) or "identity service unreachable")

        if response.status_code >= 400:
            detail = self._error_message(response)
            logger.warning(f"Identity service refused {method} {path}: {response.status_code} {detail}")
            error = IdentityError(detail, status_code=400 if response.status_code < 500 else 502)
            await self._emit("error", error)
            raise error

        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get("msg") or body.get("error_description") or body.get("error") or body)
        return str(body)
