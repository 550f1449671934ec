from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse

from aas_portal.api import deps
from aas_portal.api.guard import AccessDecision, AccessDenied, evaluate_access
from aas_portal.core.cancellation import CancellationToken
from aas_portal.core.errors import NotFound
from aas_portal.models.user import User
from aas_portal.schemas.upload import UploadOutcomeResponse, UploadResponse
from aas_portal.services.session_store import SessionStore
from aas_portal.services.upload_service import (
    UPLOAD_POLICIES,
    IncomingFile,
    SelectedFile,
    UploadWorkflow,
    read_capped,
)
from aas_portal.storage.object_store import LocalObjectStorage

router = APIRouter()


def rejected(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": message, "code": "upload_rejected"})


@router.post("/{purpose}", response_model=UploadResponse)
async def upload_files(
    purpose: str,
    request: Request,
    files: Optional[List[UploadFile]] = File(None),
    user: Optional[User] = Depends(deps.get_optional_user),
    store: SessionStore = Depends(deps.get_session_store),
    storage: LocalObjectStorage = Depends(deps.get_storage),
    locale: str = Depends(deps.get_locale),
) -> Any:
    """
    Validate and store a selection of files for one form field.

    A refused selection answers 400 without storing anything; otherwise each
    file gets its own outcome and the response is 200 even if some failed.
    """
    policy = UPLOAD_POLICIES.get(purpose)
    if policy is None:
        raise NotFound("unknown_upload_purpose")

    if policy.audience != "public":
        decision = evaluate_access(
            store.loading,
            user,
            admin_only=policy.audience == "admin",
            require_verification=policy.audience == "verified",
        )
        if decision is not AccessDecision.ALLOW:
            raise AccessDenied(decision)

    selected = files or []
    workflow = UploadWorkflow(storage, policy, locale)

    # Declared sizes and types are checked before any file body is read
    rejection = workflow.validate([SelectedFile(f.filename or "", f.size or 0) for f in selected])
    if rejection:
        return rejected(rejection)

    incoming = [IncomingFile(f.filename or "", await read_capped(f, workflow.size_limit)) for f in selected]
    result = await workflow.upload(incoming, CancellationToken.for_request(request))

    if result.rejected:
        return rejected(result.rejection)

    return UploadResponse(
        purpose=purpose,
        bucket=policy.bucket,
        outcomes=[UploadOutcomeResponse(filename=o.filename, url=o.url, error=o.error) for o in result.outcomes],
        urls=result.urls,
        uploaded=len(result.urls),
        failed=len(result.failed),
    )
