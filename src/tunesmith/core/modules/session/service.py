import asyncio
from collections.abc import Awaitable, Callable

import structlog

from tunesmith.core.core import Service
from tunesmith.core.modules.session.models import AccessGrant, Session, SessionId, SessionUser, UserProfile
from tunesmith.core.modules.session.store import SessionStore
from tunesmith.core.modules.spotify.models import TokenGrant
from tunesmith.errors import NotAuthenticatedError, RefreshFailedError
from tunesmith.utils import mask_sensitive

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Service for managing user sessions and keeping their access tokens fresh."""

    def __init__(self) -> None:
        super().__init__()
        self._refreshes: dict[SessionId, asyncio.Task[Session | None]] = {}

    @property
    def store(self) -> SessionStore:
        return self.core.session_store

    async def create_session(self, profile: UserProfile, grant: TokenGrant) -> SessionId:
        session_id = await self.store.create(profile, grant.access_token, grant.refresh_token or "", grant.expires_in)
        logger.info("session_created", session=mask_sensitive(session_id), user_id=profile.user_id)
        return session_id

    async def get_session(self, session_id: SessionId | None) -> Session | None:
        if not session_id:
            return None
        return await self.store.get(session_id)

    async def require_session(self, session_id: SessionId | None) -> Session:
        """Get the session or raise NotAuthenticatedError. Never touches the network."""
        session = await self.get_session(session_id)
        if session is None:
            raise NotAuthenticatedError
        return session

    async def get_session_user(self, session_id: SessionId | None) -> SessionUser | None:
        session = await self.get_session(session_id)
        return SessionUser.from_domain(session) if session else None

    async def invalidate_session(self, session_id: SessionId | None) -> None:
        """Remove a session; unknown ids are ignored."""
        if not session_id:
            return
        await self.store.delete(session_id)
        logger.info("session_invalidated", session=mask_sensitive(session_id))

    async def get_valid_access(self, session_id: SessionId | None) -> AccessGrant | None:
        """Return a usable access token for the session, refreshing it when stale.

        Returns None when there is no such session. Raises RefreshFailedError when
        the provider rejects the refresh; the stored session is left as it was.
        """
        session = await self.get_session(session_id)
        if session is None:
            return None
        if not session.is_expired():
            return AccessGrant(session.access_token, session)

        refreshed = await self._refresh(session)
        if refreshed is None:
            return None
        return AccessGrant(refreshed.access_token, refreshed)

    async def call_with_access[T](self, session_id: SessionId | None, call: Callable[[str], Awaitable[T]]) -> T:
        """Run a provider call with a valid access token for the session."""
        grant = await self.get_valid_access(session_id)
        if grant is None:
            raise NotAuthenticatedError
        return await call(grant.access_token)

    async def _refresh(self, session: Session) -> Session | None:
        # Single flight per session: concurrent callers await the same task.
        task = self._refreshes.get(session.id)
        if task is None:
            # The snapshot may predate a refresh that has already finished
            current = await self.store.get(session.id)
            if current is None or not current.is_expired():
                return current
            task = self._refreshes.get(session.id) or self._start_refresh(current)
        # A disconnecting client must not cancel a refresh other requests are waiting on
        return await asyncio.shield(task)

    def _start_refresh(self, session: Session) -> asyncio.Task[Session | None]:
        task = asyncio.create_task(self._refresh_session(session))
        self._refreshes[session.id] = task
        task.add_done_callback(lambda done: self._forget_refresh(session.id, done))
        return task

    def _forget_refresh(self, session_id: SessionId, task: asyncio.Task[Session | None]) -> None:
        if self._refreshes.get(session_id) is task:
            del self._refreshes[session_id]
        if not task.cancelled():
            task.exception()  # mark as retrieved when every waiter went away

    async def _refresh_session(self, session: Session) -> Session | None:
        try:
            grant = await self.core.services.spotify.refresh_access_token(session.refresh_token)
        except RefreshFailedError as e:
            logger.warning("access_token_refresh_failed", session=mask_sensitive(session.id), error=str(e))
            raise

        updated = await self.store.update(session.id, grant.access_token, grant.expires_in, grant.refresh_token)
        if updated is None:
            logger.info("session_gone_during_refresh", session=mask_sensitive(session.id))
            return None
        logger.info("access_token_refreshed", session=mask_sensitive(session.id), expires_in=grant.expires_in)
        return updated
