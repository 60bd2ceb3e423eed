"""Tests for access-token refresh in SessionService."""

import asyncio

import pytest

from tunesmith.core.core import Core
from tunesmith.core.modules.session.models import SessionId
from tunesmith.core.modules.session.store import InMemorySessionStore
from tunesmith.errors import NotAuthenticatedError, RefreshFailedError

pytestmark = pytest.mark.anyio


class PausingSessionStore(InMemorySessionStore):
    """Store whose reads yield to the event loop, like a networked backend."""

    async def get(self, session_id):
        await asyncio.sleep(0)
        return await super().get(session_id)


class TestGetValidAccess:
    async def test_fresh_token_is_returned_without_network(self, core, session_store, profile, fake_spotify):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 3600)

        grant = await core.services.session.get_valid_access(session_id)

        assert grant.access_token == "access-0"
        assert grant.session.id == session_id
        assert fake_spotify.requests == []

    async def test_missing_session_is_not_an_error(self, core, fake_spotify):
        assert await core.services.session.get_valid_access(SessionId("missing")) is None
        assert await core.services.session.get_valid_access(None) is None
        assert fake_spotify.requests == []

    async def test_stale_token_triggers_exactly_one_refresh(self, core, session_store, profile, fake_spotify):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 15)

        grant = await core.services.session.get_valid_access(session_id)

        assert grant.access_token == "access-refreshed-1"
        assert fake_spotify.refresh_count == 1
        stored = await session_store.get(session_id)
        assert stored.access_token == "access-refreshed-1"
        assert stored.refresh_token == "refresh-0"
        assert not stored.is_expired()

        # The renewed token is now used as-is
        again = await core.services.session.get_valid_access(session_id)
        assert again.access_token == "access-refreshed-1"
        assert fake_spotify.refresh_count == 1

    async def test_refresh_sends_refresh_token(self, core, session_store, profile, fake_spotify):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 0)
        await core.services.session.get_valid_access(session_id)

        (request,) = fake_spotify.calls("/api/token")
        body = request.content.decode()
        assert "grant_type=refresh_token" in body
        assert "refresh_token=refresh-0" in body

    async def test_failed_refresh_keeps_session(self, core, session_store, profile, fake_spotify):
        fake_spotify.refresh_status = 400
        session_id = await session_store.create(profile, "access-0", "refresh-0", 0)
        before = await session_store.get(session_id)

        with pytest.raises(RefreshFailedError, match="Token refresh failed"):
            await core.services.session.get_valid_access(session_id)

        assert await session_store.get(session_id) == before

    async def test_concurrent_refreshes_share_one_call(self, core, session_store, profile, fake_spotify):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 0)

        grants = await asyncio.gather(*(core.services.session.get_valid_access(session_id) for _ in range(5)))

        assert fake_spotify.refresh_count == 1
        assert {grant.access_token for grant in grants} == {"access-refreshed-1"}
        assert len({grant.session.expires_at for grant in grants}) == 1
        stored = await session_store.get(session_id)
        assert stored.expires_at == grants[0].session.expires_at

    async def test_session_deleted_during_refresh(self, core, session_store, profile, fake_spotify):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 0)
        fake_spotify.on_request = lambda request: session_store._sessions.pop(session_id, None)

        assert await core.services.session.get_valid_access(session_id) is None
        assert fake_spotify.refresh_count == 1
        assert await session_store.get(session_id) is None


    async def test_stale_snapshot_after_finished_refresh(self, core, session_store, profile, fake_spotify):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 0)
        stale = await session_store.get(session_id)
        await core.services.session.get_valid_access(session_id)

        refreshed = await core.services.session._refresh(stale)

        assert refreshed.access_token == "access-refreshed-1"
        assert fake_spotify.refresh_count == 1

    async def test_concurrent_refreshes_with_pausing_store(self, config, http_client, profile, fake_spotify):
        store = PausingSessionStore()
        core = Core(config, session_store=store, http_client=http_client)
        session_id = await store.create(profile, "access-0", "refresh-0", 0)

        grants = await asyncio.gather(*(core.services.session.get_valid_access(session_id) for _ in range(5)))

        assert fake_spotify.refresh_count == 1
        assert {grant.access_token for grant in grants} == {"access-refreshed-1"}

class TestCallWithAccess:
    async def test_passes_valid_token_to_call(self, core, session_store, profile):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 3600)
        seen = []

        async def call(access_token):
            seen.append(access_token)
            return "result"

        assert await core.services.session.call_with_access(session_id, call) == "result"
        assert seen == ["access-0"]

    async def test_refreshes_before_call(self, core, session_store, profile):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 0)

        async def call(access_token):
            return access_token

        assert await core.services.session.call_with_access(session_id, call) == "access-refreshed-1"

    async def test_not_authenticated(self, core):
        async def call(access_token):
            raise AssertionError("must not be called")

        with pytest.raises(NotAuthenticatedError):
            await core.services.session.call_with_access(SessionId("missing"), call)


class TestSessionLookup:
    async def test_get_session_user(self, core, session_store, profile):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 3600)
        user = await core.services.session.get_session_user(session_id)
        assert user.display_name == "Test User"
        assert user.image_url == "https://img.test/avatar.png"

    async def test_get_session_user_does_not_refresh(self, core, session_store, profile, fake_spotify):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 0)
        assert await core.services.session.get_session_user(session_id) is not None
        assert fake_spotify.requests == []

    async def test_require_session(self, core, session_store, profile):
        session_id = await session_store.create(profile, "access-0", "refresh-0", 3600)
        session = await core.services.session.require_session(session_id)
        assert session.id == session_id
        with pytest.raises(NotAuthenticatedError):
            await core.services.session.require_session(None)
