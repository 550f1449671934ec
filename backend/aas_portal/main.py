import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncEngine

from aas_portal.api import deps
from aas_portal.api.guard import AccessDenied, access_denied_handler
from aas_portal.api.pages import router as pages_router
from aas_portal.api.router import router as api_router
from aas_portal.core.config import settings
from aas_portal.core.errors import PortalError
from aas_portal.core.logging import setup_logging
from aas_portal.core.messages import translate
from aas_portal.db.init_db import init_models
from aas_portal.db.session import build_engine, build_sessionmaker
from aas_portal.services.identity_bridge import IdentityWidgetBridge
from aas_portal.services.keep_alive import KeepAliveService
from aas_portal.services.session_store import LoginThrottle, SessionStore
from aas_portal.storage.object_store import LocalObjectStorage

logger = logging.getLogger(__name__)


async def portal_error_handler(request: Request, exc: PortalError):
    locale = deps.get_locale(request)
    content = {"detail": translate(exc.message_key, locale, **exc.params), "code": exc.message_key}
    current_version = getattr(exc, "current_version", None)
    if current_version is not None:
        content["current_version"] = current_version
    return JSONResponse(status_code=exc.status_code, content=content)


def create_app(
    engine: Optional[AsyncEngine] = None,
    storage: Optional[LocalObjectStorage] = None,
    identity_bridge: Optional[IdentityWidgetBridge] = None,
    redis_client: Optional[redis.Redis] = None,
) -> FastAPI:
    """
    Build the portal application.

    Services are constructed here and started by the lifespan, so importing
    this module has no side effects.
    """
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    engine = engine or build_engine()
    session_factory = build_sessionmaker(engine)
    storage = storage or LocalObjectStorage(settings.STORAGE_ROOT, settings.PUBLIC_STORAGE_URL)
    identity_bridge = identity_bridge or IdentityWidgetBridge(settings.IDENTITY_URL)
    if redis_client is None:
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    session_store = SessionStore(
        session_factory,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        throttle=LoginThrottle(redis_client, settings.LOGIN_MAX_ATTEMPTS, settings.LOGIN_WINDOW_SECONDS),
    )
    keep_alive = KeepAliveService(session_factory, settings.KEEP_ALIVE_INTERVAL_SECONDS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.AUTO_CREATE_TABLES:
            await init_models(engine)
        session_store.start()
        if settings.KEEP_ALIVE_ENABLED:
            keep_alive.start()
        logger.info(f"{settings.PROJECT_NAME} started")
        try:
            yield
        finally:
            await keep_alive.stop()
            session_store.stop()
            await identity_bridge.aclose()
            await redis_client.aclose()
            await engine.dispose()
            logger.info(f"{settings.PROJECT_NAME} stopped")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        description="ONG A.A.S insurance awareness and claims follow-up portal",
        lifespan=lifespan,
    )

    app.state.session_factory = session_factory
    app.state.session_store = session_store
    app.state.storage = storage
    app.state.keep_alive = keep_alive
    app.state.identity_bridge = identity_bridge

    # Set all CORS enabled origins
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(AccessDenied, access_denied_handler)

    app.mount(settings.PUBLIC_STORAGE_URL, StaticFiles(directory=str(storage.root)), name="storage")
    app.include_router(api_router, prefix=settings.API_V1_STR)
    app.include_router(pages_router)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("aas_portal.main:create_app", factory=True, host="0.0.0.0", port=8000)
