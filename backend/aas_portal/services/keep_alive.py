"""
Periodic lightweight query that keeps the data store from idling out.
"""
import asyncio
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select
from sqlalchemy.orm import sessionmaker

from aas_portal.models.user import User

logger = logging.getLogger(__name__)


class KeepAliveService:
    def __init__(self, session_factory: sessionmaker, interval_seconds: float = 600):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Send a first ping now, then one every interval."""
        if self.is_active:
            return
        self._task = asyncio.create_task(self._run(), name="keep-alive")
        logger.info(f"Keep-alive service started ({self.interval_seconds:.0f}s interval)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Keep-alive service stopped")

    async def ping(self) -> bool:
        try:
            async with self.session_factory() as db:
                await db.execute(select(User.id).limit(1))
        except SQLAlchemyError as e:
            logger.warning(f"Keep-alive ping failed: {e}")
            return False
        logger.debug("Keep-alive ping successful")
        return True

    async def _run(self) -> None:
        while True:
            await self.ping()
            await asyncio.sleep(self.interval_seconds)
