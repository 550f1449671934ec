import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from aas_portal.db.session import engine as default_engine
from aas_portal.db.base import Base
# Import all models to register with Base
import aas_portal.models.user
import aas_portal.models.claim
import aas_portal.models.audit
import aas_portal.models.post


async def init_models(engine: Optional[AsyncEngine] = None, drop: bool = False):
    engine = engine or default_engine
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


if __name__ == "__main__":
    asyncio.run(init_models())
    print("Tables created.")
