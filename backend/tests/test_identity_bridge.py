"""
Staff identity bridge: invitation links, password rules and the identity API calls.
"""
import json

import httpx
import pytest

from aas_portal.core.errors import IdentityError, ValidationFailed
from aas_portal.services.identity_bridge import (
    IdentityWidgetBridge,
    InvitationParams,
    check_password,
    parse_invitation,
    password_setup_path,
)

IDENTITY_URL = "https://portal.example/.netlify/identity"


def scripted_bridge(routes):
    """Bridge whose identity service answers from ``routes[(method, path)]``."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        path = request.url.path.replace("/.netlify/identity", "", 1)
        answer = routes.get((request.method, path))
        if answer is None:
            return httpx.Response(404, json={"msg": "not found"})
        return answer(request) if callable(answer) else answer

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IdentityWidgetBridge(IDENTITY_URL, client=client), seen


@pytest.mark.parametrize(
    "url, token, flow, email, cleaned",
    [
        (
            "https://portal.example/#invite_token=abc123&email=staff%40ong.mr",
            "abc123", "invite", "staff@ong.mr", "https://portal.example/",
        ),
        (
            "https://portal.example/#recovery_token=rec456",
            "rec456", "recovery", None, "https://portal.example/",
        ),
        (
            "https://portal.example/#access_token=acc789&type=invite",
            "acc789", "invite", None, "https://portal.example/",
        ),
        (
            "https://portal.example/admin?token=q1&type=invite&email=a%40b.mr&lang=ar",
            "q1", "invite", "a@b.mr", "https://portal.example/admin?lang=ar",
        ),
        (
            "https://portal.example/?invite_token=q2",
            "q2", "invite", None, "https://portal.example/",
        ),
    ],
)
def test_parse_invitation(url, token, flow, email, cleaned):
    params, cleaned_url = parse_invitation(url)

    assert params == InvitationParams(token=token, flow=flow, email=email)
    assert cleaned_url == cleaned


def test_link_without_token_is_untouched():
    url = "https://portal.example/#access_token=xyz&type=recovery_session"
    assert parse_invitation(url) == (None, url)
    assert parse_invitation("https://portal.example/login") == (None, "https://portal.example/login")


def test_password_setup_path():
    path = password_setup_path(InvitationParams(token="abc", flow="invite", email="a@b.mr"))
    assert path == "/password-setup?token=abc&type=invite&email=a%40b.mr"


@pytest.mark.parametrize(
    "password, confirm, expected",
    [
        ("Short1", None, "password_too_short"),
        ("ALLUPPER123", None, "password_lowercase"),
        ("alllower123", None, "password_uppercase"),
        ("NoDigitsHere", None, "password_digit"),
        ("Valid123", "Valid124", "passwords_mismatch"),
        ("Valid123", "Valid123", None),
        ("Valid123", None, None),
    ],
)
def test_password_rules(password, confirm, expected):
    assert check_password(password, confirm) == expected


@pytest.mark.asyncio
async def test_accept_invite_emits_signup_then_login():
    bridge, seen = scripted_bridge({
        ("GET", "/settings"): httpx.Response(200, json={"external": {}, "disable_signup": True}),
        ("POST", "/verify"): httpx.Response(200, json={"access_token": "jwt-1", "expires_in": 3600}),
        ("GET", "/user"): httpx.Response(200, json={"id": "u1", "email": "staff@ong.mr"}),
    })
    events = []
    bridge.on("init", lambda settings: events.append(("init", settings["disable_signup"])))
    bridge.on("signup", lambda user: events.append(("signup", user["email"])))

    async def on_login(user):
        events.append(("login", user["email"]))

    bridge.on("login", on_login)

    user = await bridge.accept_invite("abc123", "Valid123")

    assert user["email"] == "staff@ong.mr"
    assert events == [("init", True), ("signup", "staff@ong.mr"), ("login", "staff@ong.mr")]
    verify = next(r for r in seen if r.url.path.endswith("/verify"))
    assert json.loads(verify.content) == {"token": "abc123", "type": "signup", "password": "Valid123"}
    user_call = next(r for r in seen if r.method == "GET" and r.url.path.endswith("/user"))
    assert user_call.headers["authorization"] == "Bearer jwt-1"


@pytest.mark.asyncio
async def test_init_runs_once():
    bridge, seen = scripted_bridge({("GET", "/settings"): httpx.Response(200, json={})})

    await bridge.init()
    await bridge.init()

    assert bridge.initialized
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_recover_sets_new_password():
    bridge, seen = scripted_bridge({
        ("GET", "/settings"): httpx.Response(200, json={}),
        ("POST", "/verify"): httpx.Response(200, json={"access_token": "jwt-r"}),
        ("PUT", "/user"): httpx.Response(200, json={"email": "staff@ong.mr"}),
    })

    user = await bridge.recover("rec456", "Valid123")

    assert user["email"] == "staff@ong.mr"
    put = next(r for r in seen if r.method == "PUT")
    assert put.headers["authorization"] == "Bearer jwt-r"
    assert json.loads(put.content) == {"password": "Valid123"}


@pytest.mark.asyncio
async def test_login_posts_password_grant():
    bridge, seen = scripted_bridge({
        ("GET", "/settings"): httpx.Response(200, json={}),
        ("POST", "/token"): httpx.Response(200, json={"access_token": "jwt-l"}),
        ("GET", "/user"): httpx.Response(200, json={"email": "staff@ong.mr"}),
    })

    user = await bridge.login("staff@ong.mr", "Valid123")

    assert user["token"]["access_token"] == "jwt-l"
    token_call = next(r for r in seen if r.url.path.endswith("/token"))
    assert b"grant_type=password" in token_call.content


@pytest.mark.asyncio
async def test_refused_invite_emits_error_and_raises():
    bridge, _ = scripted_bridge({
        ("GET", "/settings"): httpx.Response(200, json={}),
        ("POST", "/verify"): httpx.Response(422, json={"msg": "Invite token expired"}),
    })
    errors = []
    bridge.on("error", errors.append)

    with pytest.raises(IdentityError) as excinfo:
        await bridge.accept_invite("old", "Valid123")

    assert excinfo.value.detail == "Invite token expired"
    assert excinfo.value.status_code == 400
    assert len(errors) == 1


@pytest.mark.asyncio
async def test_unreachable_service_raises_identity_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    bridge = IdentityWidgetBridge(IDENTITY_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(IdentityError) as excinfo:
        await bridge.init()
    assert excinfo.value.status_code == 502


def test_open_widget_modes():
    bridge = IdentityWidgetBridge(IDENTITY_URL + "/", client=httpx.AsyncClient())

    assert bridge.open("signup")["mode"] == "signup"
    assert bridge.open()["identity_url"] == IDENTITY_URL
    with pytest.raises(ValidationFailed):
        bridge.open("recover")
    with pytest.raises(ValueError):
        bridge.on("logout", lambda _: None)
