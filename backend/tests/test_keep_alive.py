import asyncio

import pytest
from sqlalchemy.pool import NullPool

from aas_portal.db.session import build_engine, build_sessionmaker
from aas_portal.services.keep_alive import KeepAliveService


@pytest.mark.asyncio
async def test_ping_succeeds_against_store(session_factory):
    service = KeepAliveService(session_factory)
    assert await service.ping() is True


@pytest.mark.asyncio
async def test_ping_failure_is_logged_not_raised(tmp_path, caplog):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}", poolclass=NullPool)
    service = KeepAliveService(build_sessionmaker(engine))

    assert await service.ping() is False
    assert "Keep-alive ping failed" in caplog.text
    await engine.dispose()


@pytest.mark.asyncio
async def test_not_started_until_asked(session_factory):
    service = KeepAliveService(session_factory, interval_seconds=0.01)
    assert not service.is_active

    service.start()
    assert service.is_active
    await asyncio.sleep(0.05)
    assert service.is_active

    await service.stop()
    assert not service.is_active


@pytest.mark.asyncio
async def test_pings_immediately_then_every_interval(session_factory, monkeypatch):
    service = KeepAliveService(session_factory, interval_seconds=0.01)
    pings = []

    async def fake_ping():
        pings.append(True)
        return True

    monkeypatch.setattr(service, "ping", fake_ping)
    service.start()
    await asyncio.sleep(0.06)
    await service.stop()

    assert len(pings) >= 2
