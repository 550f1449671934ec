"""
Session store: phone/PIN login, session tokens and the current identity.

One instance is built by the application factory and started/stopped by the
application lifespan. Until ``start()`` runs the store reports ``loading``.
"""
import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

import redis.asyncio as redis
from sqlalchemy.exc import MultipleResultsFound, SQLAlchemyError
from sqlalchemy.future import select
from sqlalchemy.orm import sessionmaker

from aas_portal.core.errors import TooManyAttempts
from aas_portal.core.security import create_session_token, decode_session_token, verify_pin
from aas_portal.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class Session:
    token: str
    user: User
    expires_at: datetime


class LoginThrottle:
    """
    Redis sliding window of failed logins per phone number.

    A 4-digit PIN has only 10,000 values, so repeated guesses against one
    phone number are cut off regardless of hashing. Each phone gets a sorted
    set of failure timestamps that expires with the window.

    If Redis is unreachable the check is skipped and a warning is logged.
    """

    KEY_PREFIX = "login_failures:"

    def __init__(self, client: redis.Redis, max_attempts: int = 5, window_seconds: int = 900):
        self.client = client
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    def _key(self, phone_number: str) -> str:
        return f"{self.KEY_PREFIX}{phone_number}"

    async def is_blocked(self, phone_number: str) -> bool:
        key = self._key(phone_number)
        try:
            pipe = self.client.pipeline()
            # Remove failures that left the window
            pipe.zremrangebyscore(key, 0, time.time() - self.window_seconds)
            pipe.zcard(key)
            results = await pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Login throttle check failed: {e}")
            return False
        return results[1] >= self.max_attempts

    async def record_failure(self, phone_number: str) -> None:
        key = self._key(phone_number)
        now = time.time()
        try:
            pipe = self.client.pipeline()
            pipe.zadd(key, {f"{now}:{secrets.token_hex(4)}": now})
            pipe.expire(key, self.window_seconds)
            await pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Login throttle update failed: {e}")

    async def reset(self, phone_number: str) -> None:
        try:
            await self.client.delete(self._key(phone_number))
        except redis.RedisError as e:
            logger.warning(f"Login throttle reset failed: {e}")


class SessionStore:
    def __init__(
        self,
        session_factory: sessionmaker,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
        throttle: Optional[LoginThrottle] = None,
    ):
        self.session_factory = session_factory
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        # None disables throttling
        self.throttle = throttle
        self._loading = True
        # jti -> expiry timestamp
        self._revoked: Dict[str, float] = {}

    @property
    def loading(self) -> bool:
        return self._loading

    def start(self) -> None:
        self._loading = False
        logger.info("Session store ready")

    def stop(self) -> None:
        self._loading = True
        self._revoked.clear()
        logger.info("Session store stopped")

    async def login(self, phone_number: str, pin: str) -> Optional[Session]:
        """
        Authenticate by phone number and PIN.

        Returns None for an unknown phone, a wrong PIN or a database failure;
        callers cannot tell these apart. Raises TooManyAttempts while the
        phone number is throttled, whether or not it is registered.
        """
        if self.throttle is not None and await self.throttle.is_blocked(phone_number):
            logger.warning(f"Login throttled for phone ending {phone_number[-2:]}")
            raise TooManyAttempts()

        try:
            async with self.session_factory() as db:
                result = await db.execute(select(User).where(User.phone_number == phone_number))
                user = result.scalars().one_or_none()
        except MultipleResultsFound:
            logger.error("Login lookup matched more than one user")
            return None
        except SQLAlchemyError as e:
            logger.error(f"Login lookup failed: {e}")
            return None

        # bcrypt runs off the event loop
        if not await asyncio.to_thread(verify_pin, pin, user.pin_hash if user else None):
            if self.throttle is not None:
                await self.throttle.record_failure(phone_number)
            return None

        if self.throttle is not None:
            await self.throttle.reset(phone_number)
        token, _, expires_at = create_session_token(
            user.id, self.secret_key, self.algorithm, self.expire_minutes
        )
        logger.info(f"User {user.id} logged in")
        return Session(token=token, user=user, expires_at=expires_at)

    async def restore(self, token: Optional[str]) -> Optional[User]:
        """
        Resolve a persisted session token to the current user record.

        An unparseable, expired or revoked token is discarded (None).
        """
        if not token:
            return None
        payload = decode_session_token(token, self.secret_key, self.algorithm)
        if payload is None or payload["jti"] in self._revoked:
            return None
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            return None

        try:
            async with self.session_factory() as db:
                result = await db.execute(select(User).where(User.id == user_id))
                return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"Session restore failed: {e}")
            return None

    def logout(self, token: Optional[str]) -> None:
        if not token:
            return
        payload = decode_session_token(token, self.secret_key, self.algorithm)
        if payload is None:
            return
        now = time.time()
        self._revoked = {jti: exp for jti, exp in self._revoked.items() if exp > now}
        self._revoked[payload["jti"]] = float(payload["exp"])
