from typing import Any, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aas_portal.api.guard import require_user
from aas_portal.db.session import get_db
from aas_portal.models.user import User
from aas_portal.schemas.claim import ClaimCreate, ClaimFeedItem, ClaimResponse, ClaimUpdateResponse
from aas_portal.services.claim_service import ClaimService

router = APIRouter()


@router.post("/", response_model=ClaimResponse, status_code=201)
async def create_claim(
    claim_in: ClaimCreate,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = ClaimService(db)
    return await service.submit_claim(current_user, claim_in)


@router.get("/", response_model=List[ClaimResponse])
async def read_my_claims(
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = ClaimService(db)
    return await service.get_user_claims(current_user.id)


@router.get("/feed", response_model=List[ClaimFeedItem])
async def read_claims_feed(db: AsyncSession = Depends(get_db)) -> Any:
    """Public, anonymised progress of all claims."""
    service = ClaimService(db)
    return await service.get_all_claims(with_user=False)


@router.get("/{claim_id}", response_model=ClaimResponse)
async def read_claim(
    claim_id: int,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = ClaimService(db)
    return await service.get_claim_for(claim_id, current_user)


@router.get("/{claim_id}/updates", response_model=List[ClaimUpdateResponse])
async def read_claim_updates(
    claim_id: int,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Staff edit history of a claim."""
    service = ClaimService(db)
    await service.get_claim_for(claim_id, current_user)
    return await service.get_claim_updates(claim_id)
