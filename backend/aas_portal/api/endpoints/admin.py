"""
Staff dashboard endpoints.

Every mutation answers with the changed record and the recomputed counters so
the dashboard can patch its lists without re-fetching them.
"""
from typing import Any, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aas_portal.api.endpoints.posts import posts_with_comments
from aas_portal.api.guard import require_admin
from aas_portal.core.errors import NotFound
from aas_portal.db.session import get_db
from aas_portal.models.user import User
from aas_portal.schemas.admin import AdminDeleteResponse, AdminMutationResponse, AdminStats, VerifyUserRequest
from aas_portal.schemas.claim import AdminClaimResponse, ClaimStatusUpdate, ClaimUpdateResponse
from aas_portal.schemas.post import PostCreate, PostResponse, PostUpdate, PostWithComments
from aas_portal.schemas.user import UserResponse
from aas_portal.services.claim_service import ClaimService
from aas_portal.services.post_service import PostService
from aas_portal.services.user_service import UserService

router = APIRouter()


@router.get("/stats", response_model=AdminStats)
async def read_stats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await UserService(db).get_stats()


# Users

@router.get("/users", response_model=List[UserResponse])
async def read_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await UserService(db).list_users()


@router.get("/users/{user_id}", response_model=UserResponse)
async def read_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    user = await UserService(db).get_user(user_id)
    if not user:
        raise NotFound("user_not_found")
    return user


@router.post("/users/{user_id}/verify", response_model=AdminMutationResponse[UserResponse])
async def verify_user(
    user_id: int,
    request: VerifyUserRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = UserService(db)
    user = await service.verify_user(user_id, request.version)
    return {"item": user, "stats": await service.get_stats()}


# Claims

@router.get("/claims", response_model=List[AdminClaimResponse])
async def read_claims(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await ClaimService(db).get_all_claims(with_user=True)


@router.get("/claims/{claim_id}", response_model=AdminClaimResponse)
async def read_claim(
    claim_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    claim = await ClaimService(db).get_claim(claim_id, with_user=True)
    if not claim:
        raise NotFound("claim_not_found")
    return claim


@router.get("/claims/{claim_id}/updates", response_model=List[ClaimUpdateResponse])
async def read_claim_updates(
    claim_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = ClaimService(db)
    if not await service.get_claim(claim_id):
        raise NotFound("claim_not_found")
    return await service.get_claim_updates(claim_id)


@router.patch("/claims/{claim_id}", response_model=AdminMutationResponse[AdminClaimResponse])
async def update_claim(
    claim_id: int,
    update_in: ClaimStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    claim = await ClaimService(db).update_claim_status(
        claim_id,
        admin,
        status=update_in.status,
        progress=update_in.progress,
        expected_version=update_in.version,
        note=update_in.note,
    )
    return {"item": claim, "stats": await UserService(db).get_stats()}


# Posts

@router.get("/posts", response_model=List[PostWithComments])
async def read_posts(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await posts_with_comments(PostService(db))


@router.post("/posts", response_model=AdminMutationResponse[PostResponse], status_code=201)
async def create_post(
    post_in: PostCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    post = await PostService(db).create_post(admin, post_in)
    return {"item": post, "stats": await UserService(db).get_stats()}


@router.put("/posts/{post_id}", response_model=AdminMutationResponse[PostResponse])
async def update_post(
    post_id: int,
    post_in: PostUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    post = await PostService(db).update_post(post_id, post_in)
    return {"item": post, "stats": await UserService(db).get_stats()}


@router.delete("/posts/{post_id}", response_model=AdminDeleteResponse)
async def delete_post(
    post_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    await PostService(db).delete_post(post_id)
    return {"id": post_id, "deleted": True, "stats": await UserService(db).get_stats()}
