from typing import Any

from fastapi import APIRouter, Depends

from aas_portal.api import deps
from aas_portal.core.errors import ValidationFailed
from aas_portal.schemas.identity import (
    AcceptInviteRequest,
    IdentityLoginRequest,
    InvitationLinkRequest,
    InvitationLinkResponse,
)
from aas_portal.services.identity_bridge import (
    IdentityWidgetBridge,
    check_password,
    parse_invitation,
    password_setup_path,
)

router = APIRouter()


@router.post("/invitation", response_model=InvitationLinkResponse)
async def read_invitation(link: InvitationLinkRequest) -> Any:
    """Detect an invitation or recovery token in a link and where to send the visitor."""
    params, cleaned_url = parse_invitation(link.url)
    if params is None:
        return InvitationLinkResponse(cleaned_url=cleaned_url)
    return InvitationLinkResponse(
        token=params.token,
        flow=params.flow,
        email=params.email,
        cleaned_url=cleaned_url,
        redirect_to=password_setup_path(params),
    )


@router.post("/accept-invite")
async def accept_invite(
    request: AcceptInviteRequest,
    bridge: IdentityWidgetBridge = Depends(deps.get_identity_bridge),
) -> Any:
    if not request.token:
        raise ValidationFailed("invite_token_missing")
    broken = check_password(request.password, request.confirm_password)
    if broken:
        raise ValidationFailed(broken)

    if request.type == "recovery":
        user = await bridge.recover(request.token, request.password)
    else:
        user = await bridge.accept_invite(request.token, request.password)
    return {"email": user.get("email"), "redirect_to": "/admin"}


@router.post("/login")
async def widget_login(
    credentials: IdentityLoginRequest,
    bridge: IdentityWidgetBridge = Depends(deps.get_identity_bridge),
) -> Any:
    """Staff login through the identity service, as the widget's login mode does."""
    user = await bridge.login(credentials.email, credentials.password)
    return {"email": user.get("email"), "redirect_to": "/admin"}


@router.get("/widget")
async def open_widget(
    mode: str = "login",
    bridge: IdentityWidgetBridge = Depends(deps.get_identity_bridge),
) -> Any:
    return bridge.open(mode)
