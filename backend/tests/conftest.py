import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789abcdef")
os.environ["KEEP_ALIVE_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import fakeredis
import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import NullPool

from aas_portal.core.security import hash_pin
from aas_portal.db.init_db import init_models
from aas_portal.db.session import build_engine, build_sessionmaker
from aas_portal.main import create_app
from aas_portal.models.user import User, UserRole
from aas_portal.services.identity_bridge import IdentityWidgetBridge
from aas_portal.storage.object_store import LocalObjectStorage

IDENTITY_URL = "http://identity.test/.netlify/identity"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite file per test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'portal_test.db'}", poolclass=NullPool)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    """Insert a user directly; returns the committed record."""
    counter = {"n": 0}

    async def _make(
        phone_number=None,
        pin="1234",
        verified=False,
        role=UserRole.USER,
        full_name="Test Member",
    ) -> User:
        counter["n"] += 1
        async with session_factory() as session:
            user = User(
                full_name=full_name,
                phone_number=phone_number or f"{30000000 + counter['n']}",
                pin_hash=hash_pin(pin),
                car_number=f"{1000 + counter['n']}AA00",
                profile_image="/storage/profiles/p.jpg",
                driver_license="/storage/profiles/d.pdf",
                insurance_image="/storage/profiles/i.pdf",
                is_verified=verified,
                role=role,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest.fixture
def storage(tmp_path):
    return LocalObjectStorage(str(tmp_path / "storage"))


@pytest.fixture
def identity_handler():
    """Replace ``identity_handler.handler`` in a test to script the identity service."""

    class Handler:
        def __init__(self):
            self.requests = []
            self.handler = lambda request: httpx.Response(200, json={})

        def __call__(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.handler(request)

    return Handler()


@pytest.fixture
def identity_bridge(identity_handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(identity_handler))
    return IdentityWidgetBridge(IDENTITY_URL, client=client)


@pytest.fixture
def redis_client():
    """In-process Redis for the login throttle."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def app(engine, storage, identity_bridge, redis_client):
    return create_app(engine=engine, storage=storage, identity_bridge=identity_bridge, redis_client=redis_client)


@pytest_asyncio.fixture
async def client(app):
    """Client running inside the application lifespan."""
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


async def login(client: AsyncClient, phone_number: str, pin: str) -> dict:
    response = await client.post("/api/v1/auth/login", json={"phone_number": phone_number, "pin": pin})
    assert response.status_code == 200, response.text
    # Requests authenticate through the returned header only
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    async def _headers(user: User, pin: str = "1234") -> dict:
        return await login(client, user.phone_number, pin)

    return _headers
