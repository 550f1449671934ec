"""
Session store tests: phone/PIN login, restore, logout and throttling.
"""
import asyncio
import time

import fakeredis
import pytest
from sqlalchemy import update

from aas_portal.core.errors import TooManyAttempts
from aas_portal.core.security import create_session_token, decode_session_token, verify_pin
from aas_portal.models.user import User
from aas_portal.services import session_store as session_store_module
from aas_portal.services.session_store import LoginThrottle, SessionStore

SECRET = "unit-test-secret-0123456789abcdef0123456789"


@pytest.fixture
def store(session_factory, redis_client):
    throttle = LoginThrottle(redis_client, max_attempts=3, window_seconds=60)
    store = SessionStore(session_factory, SECRET, throttle=throttle)
    store.start()
    return store


def test_store_is_loading_until_started(session_factory):
    store = SessionStore(session_factory, SECRET)
    assert store.loading
    store.start()
    assert not store.loading
    store.stop()
    assert store.loading


@pytest.mark.asyncio
async def test_login_with_correct_pin(store, make_user):
    user = await make_user(phone_number="12345678", pin="1234")

    session = await store.login("12345678", "1234")

    assert session is not None
    assert session.user.id == user.id
    payload = decode_session_token(session.token, SECRET)
    assert payload["sub"] == str(user.id)
    assert set(payload) == {"sub", "jti", "type", "exp"}


@pytest.mark.asyncio
async def test_login_refused_for_wrong_pin_and_unknown_phone(store, make_user):
    await make_user(phone_number="12345678", pin="1234")

    assert await store.login("12345678", "9999") is None
    assert await store.login("87654321", "1234") is None


@pytest.mark.asyncio
async def test_unverified_user_can_log_in(store, make_user):
    await make_user(phone_number="12345678", pin="1234", verified=False)

    session = await store.login("12345678", "1234")

    assert session is not None
    assert session.user.is_verified is False


@pytest.mark.asyncio
async def test_login_throttled_after_repeated_failures(store, make_user):
    await make_user(phone_number="12345678", pin="1234")

    for _ in range(3):
        assert await store.login("12345678", "0000") is None

    # Even the right PIN is refused while the window is full
    with pytest.raises(TooManyAttempts):
        await store.login("12345678", "1234")


@pytest.mark.asyncio
async def test_successful_login_resets_failures(store, make_user):
    await make_user(phone_number="12345678", pin="1234")

    await store.login("12345678", "0000")
    await store.login("12345678", "0000")
    assert await store.login("12345678", "1234") is not None
    await store.login("12345678", "0000")
    await store.login("12345678", "0000")
    assert await store.login("12345678", "1234") is not None


@pytest.mark.asyncio
async def test_restore_returns_current_record(store, make_user, session_factory):
    user = await make_user(verified=False)
    session = await store.login(user.phone_number, "1234")

    async with session_factory() as db:
        await db.execute(update(User).where(User.id == user.id).values(is_verified=True))
        await db.commit()

    restored = await store.restore(session.token)
    assert restored.id == user.id
    assert restored.is_verified is True


@pytest.mark.asyncio
async def test_restore_discards_bad_tokens(store, make_user):
    user = await make_user()

    assert await store.restore(None) is None
    assert await store.restore("not-a-token") is None

    other_secret, _, _ = create_session_token(user.id, "another-secret-0123456789abcdef0123")
    assert await store.restore(other_secret) is None

    expired, _, _ = create_session_token(user.id, SECRET, expires_minutes=-1)
    assert await store.restore(expired) is None


@pytest.mark.asyncio
async def test_logout_revokes_token(store, make_user):
    user = await make_user()
    first = await store.login(user.phone_number, "1234")
    second = await store.login(user.phone_number, "1234")

    store.logout(first.token)

    assert await store.restore(first.token) is None
    assert (await store.restore(second.token)).id == user.id


@pytest.mark.asyncio
async def test_throttle_window_expires(redis_client):
    throttle = LoginThrottle(redis_client, max_attempts=2, window_seconds=1)
    await throttle.record_failure("12345678")
    await throttle.record_failure("12345678")
    assert await throttle.is_blocked("12345678")

    await asyncio.sleep(1.1)

    assert not await throttle.is_blocked("12345678")


@pytest.mark.asyncio
async def test_throttle_keys_do_not_outlive_window(redis_client):
    throttle = LoginThrottle(redis_client, max_attempts=3, window_seconds=60)

    for n in range(50):
        phone = f"{40000000 + n}"
        await throttle.record_failure(phone)
        assert await redis_client.ttl(f"{LoginThrottle.KEY_PREFIX}{phone}") <= 60

    # Checking a phone that never failed stores nothing
    await throttle.is_blocked("49999999")
    assert await redis_client.exists(f"{LoginThrottle.KEY_PREFIX}49999999") == 0
    assert await redis_client.dbsize() == 50


@pytest.mark.asyncio
async def test_successful_login_clears_throttle_key(store, make_user, redis_client):
    await make_user(phone_number="12345678", pin="1234")

    await store.login("12345678", "0000")
    assert await redis_client.dbsize() == 1

    await store.login("12345678", "1234")
    assert await redis_client.dbsize() == 0


@pytest.mark.asyncio
async def test_throttle_unavailable_does_not_block_login(session_factory, make_user):
    server = fakeredis.FakeServer()
    server.connected = False
    throttle = LoginThrottle(fakeredis.FakeAsyncRedis(server=server), max_attempts=1)
    store = SessionStore(session_factory, SECRET, throttle=throttle)
    store.start()
    await make_user(phone_number="12345678", pin="1234")

    assert await store.login("12345678", "0000") is None
    assert await store.login("12345678", "1234") is not None


@pytest.mark.asyncio
async def test_pin_check_does_not_stall_event_loop(store, make_user, monkeypatch):
    await make_user(phone_number="12345678", pin="1234")

    def slow_verify(pin, pin_hash):
        time.sleep(0.3)
        return verify_pin(pin, pin_hash)

    monkeypatch.setattr(session_store_module, "verify_pin", slow_verify)

    gaps = []

    async def ticker():
        last = time.monotonic()
        while True:
            await asyncio.sleep(0.01)
            now = time.monotonic()
            gaps.append(now - last)
            last = now

    task = asyncio.create_task(ticker())
    try:
        await asyncio.sleep(0.02)
        assert await store.login("12345678", "1234") is not None
    finally:
        task.cancel()

    assert gaps
    assert max(gaps) < 0.2
