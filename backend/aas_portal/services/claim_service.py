"""
Claim submission by members and status tracking by staff.
"""
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from aas_portal.core.errors import ClaimRejected, NotFound, PermissionDenied, PortalError, VersionConflict
from aas_portal.models.audit import ClaimUpdate
from aas_portal.models.claim import Claim, ClaimStatus
from aas_portal.models.user import User
from aas_portal.schemas.claim import ClaimCreate

logger = logging.getLogger(__name__)

MIN_ACCIDENT_IMAGES = 2


def check_submission(user: Optional[User], claim_in: ClaimCreate) -> Optional[str]:
    """
    Return the message key of the first failed submission precondition, or None.

    Checked in order: logged in, verified, at least two accident photos,
    police report and insurance receipt present.
    """
    if user is None:
        return "login_required"
    if not user.is_verified:
        return "verification_required"
    images = [url for url in claim_in.accident_images if url]
    if len(images) < MIN_ACCIDENT_IMAGES:
        return "accident_images_min"
    if not claim_in.police_report or not claim_in.insurance_receipt:
        return "documents_required"
    return None


class ClaimService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def submit_claim(self, user: Optional[User], claim_in: ClaimCreate) -> Claim:
        """Create a new claim in Pending status with progress 0."""
        failed = check_submission(user, claim_in)
        if failed:
            raise ClaimRejected(failed)

        claim = Claim(
            user_id=user.id,
            title=claim_in.title,
            description=claim_in.description,
            date=claim_in.date,
            accident_images=[url for url in claim_in.accident_images if url],
            police_report=claim_in.police_report,
            insurance_receipt=claim_in.insurance_receipt,
            status=ClaimStatus.PENDING,
            progress=0,
        )
        self.db.add(claim)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Claim insert failed for user {user.id}: {e}")
            raise PortalError("claim_submit_failed")
        await self.db.refresh(claim)
        logger.info(f"Claim {claim.id} submitted by user {user.id}")
        return claim

    async def get_claim(self, claim_id: int, with_user: bool = False) -> Optional[Claim]:
        """Get claim by ID."""
        query = select(Claim).where(Claim.id == claim_id)
        if with_user:
            query = query.options(selectinload(Claim.user)).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def get_claim_for(self, claim_id: int, user: User) -> Claim:
        """Get a claim the given user may see: their own, or any claim for staff."""
        claim = await self.get_claim(claim_id)
        if not claim:
            raise NotFound("claim_not_found")
        if not user.is_admin and claim.user_id != user.id:
            raise PermissionDenied("not_authorized")
        return claim

    async def get_user_claims(self, user_id: int) -> List[Claim]:
        result = await self.db.execute(
            select(Claim)
            .where(Claim.user_id == user_id)
            .order_by(Claim.created_at.desc(), Claim.id.desc())
        )
        return result.scalars().all()

    async def get_all_claims(self, with_user: bool = True) -> List[Claim]:
        """Get all claims newest first, optionally with the owning user loaded."""
        query = select(Claim).order_by(Claim.created_at.desc(), Claim.id.desc())
        if with_user:
            query = query.options(selectinload(Claim.user)).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_claim_updates(self, claim_id: int) -> List[ClaimUpdate]:
        """Get the staff edit history of a claim, oldest first."""
        result = await self.db.execute(
            select(ClaimUpdate)
            .where(ClaimUpdate.claim_id == claim_id)
            .order_by(ClaimUpdate.created_at, ClaimUpdate.id)
        )
        return result.scalars().all()

    async def update_claim_status(
        self,
        claim_id: int,
        admin: User,
        status: ClaimStatus,
        progress: int,
        expected_version: int,
        note: Optional[str] = None,
    ) -> Claim:
        """
        Staff edit of status/progress, recorded in the claim audit trail.

        Any status may follow any other. The update only applies when the
        claim is still at ``expected_version``.
        """
        if not admin.is_admin:
            raise PermissionDenied("admin_required")

        result = await self.db.execute(
            update(Claim)
            .where(Claim.id == claim_id, Claim.version == expected_version)
            .values(status=status, progress=progress, version=Claim.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            current = await self.get_claim(claim_id)
            if not current:
                raise NotFound("claim_not_found")
            raise VersionConflict(current_version=current.version)

        self._log_update(claim_id, admin.id, status, progress, note)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Claim {claim_id} update failed: {e}")
            raise PortalError("claim_update_failed")

        logger.info(f"Claim {claim_id} set to {status.value}/{progress}% by admin {admin.id}")
        return await self.get_claim(claim_id, with_user=True)

    def _log_update(self, claim_id: int, admin_id: int, status: ClaimStatus, progress: int, note: Optional[str]):
        self.db.add(ClaimUpdate(
            claim_id=claim_id,
            updated_by=admin_id,
            new_status=status,
            new_progress=progress,
            note=note or None,
        ))
