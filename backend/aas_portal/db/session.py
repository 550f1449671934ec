from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession
from sqlalchemy.orm import sessionmaker
from aas_portal.core.config import settings


def build_engine(database_uri: str = settings.SQLALCHEMY_DATABASE_URI, **kwargs) -> AsyncEngine:
    return create_async_engine(
        database_uri,
        future=True,
        echo=settings.SQL_ECHO,
        **kwargs,
    )


def build_sessionmaker(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine()

SessionLocal = build_sessionmaker(engine)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield a session from the factory the running application was built with."""
    session_factory = getattr(request.app.state, "session_factory", SessionLocal)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
