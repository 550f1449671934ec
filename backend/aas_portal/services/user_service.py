"""
Member registration and staff review of member accounts.
"""
import asyncio
import logging
import re
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from aas_portal.core.errors import DuplicatePhone, NotFound, PortalError, ValidationFailed, VersionConflict
from aas_portal.core.security import hash_pin
from aas_portal.models.claim import Claim, ClaimStatus
from aas_portal.models.post import Post
from aas_portal.models.user import User, UserRole
from aas_portal.schemas.admin import AdminStats
from aas_portal.schemas.user import UserRegister

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^\d{8}$")
PIN_RE = re.compile(r"^\d{4}$")


def check_registration(user_in: UserRegister) -> Optional[str]:
    if not PHONE_RE.match(user_in.phone_number):
        return "phone_invalid"
    if not PIN_RE.match(user_in.pin):
        return "pin_invalid"
    if not (user_in.profile_image and user_in.driver_license and user_in.insurance_image):
        return "documents_required"
    if not user_in.insurance_start or not user_in.insurance_end:
        return "insurance_dates_invalid"
    if user_in.insurance_end <= user_in.insurance_start:
        return "insurance_dates_invalid"
    return None


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, user_in: UserRegister) -> User:
        """Create an unverified member account; the PIN is stored hashed."""
        failed = check_registration(user_in)
        if failed:
            raise ValidationFailed(failed)

        pin_hash = await asyncio.to_thread(hash_pin, user_in.pin)
        user = User(
            full_name=user_in.full_name,
            phone_number=user_in.phone_number,
            pin_hash=pin_hash,
            car_number=user_in.car_number,
            profile_image=user_in.profile_image,
            driver_license=user_in.driver_license,
            insurance_image=user_in.insurance_image,
            insurance_start=user_in.insurance_start,
            insurance_end=user_in.insurance_end,
            is_verified=False,
            role=UserRole.USER,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicatePhone()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Registration insert failed: {e}")
            raise PortalError("registration_failed")
        await self.db.refresh(user)
        logger.info(f"Registered user {user.id}")
        return user

    async def get_user(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def list_users(self) -> List[User]:
        """All users, newest first."""
        result = await self.db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        return result.scalars().all()

    async def verify_user(self, user_id: int, expected_version: int) -> User:
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id, User.version == expected_version)
            .values(is_verified=True, version=User.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            current = await self.get_user(user_id)
            if not current:
                raise NotFound("user_not_found")
            raise VersionConflict(current_version=current.version)
        await self.db.commit()
        logger.info(f"User {user_id} verified")

        result = await self.db.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        return result.scalars().one()

    async def get_stats(self) -> AdminStats:
        """Aggregate counters shown on the staff dashboard."""

        async def count(query) -> int:
            return (await self.db.execute(query)).scalar_one()

        return AdminStats(
            total_users=await count(select(func.count(User.id))),
            verified_users=await count(select(func.count(User.id)).where(User.is_verified.is_(True))),
            total_claims=await count(select(func.count(Claim.id))),
            pending_claims=await count(select(func.count(Claim.id)).where(Claim.status == ClaimStatus.PENDING)),
            total_posts=await count(select(func.count(Post.id))),
        )
