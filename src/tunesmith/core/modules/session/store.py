"""Session storage.

``SessionStore`` is the narrow interface every backend implements; callers
only ever see ``Session`` snapshots and never mutate them. Absence is not an
error: ``get`` and ``update`` return ``None`` for unknown ids.
"""

import secrets
from typing import Protocol, runtime_checkable

from tunesmith.core.modules.session.models import Session, SessionId, UserProfile, expiry_from_ttl


@runtime_checkable
class SessionStore(Protocol):
    async def create(self, profile: UserProfile, access_token: str, refresh_token: str, ttl: int) -> SessionId: ...

    async def get(self, session_id: SessionId) -> Session | None: ...

    async def update(
        self, session_id: SessionId, access_token: str, ttl: int, refresh_token: str | None = None
    ) -> Session | None: ...

    async def delete(self, session_id: SessionId) -> None: ...


class InMemorySessionStore:
    """Process-local store.

    Each write replaces the whole immutable ``Session`` in a single dict
    assignment, so readers see either the old or the new snapshot.
    """

    def __init__(self) -> None:
        self._sessions: dict[SessionId, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self, profile: UserProfile, access_token: str, refresh_token: str, ttl: int) -> SessionId:
        session_id = SessionId(secrets.token_urlsafe(32))
        while session_id in self._sessions:
            session_id = SessionId(secrets.token_urlsafe(32))
        self._sessions[session_id] = Session(
            id=session_id,
            user_id=profile.user_id,
            display_name=profile.display_name,
            image_url=profile.image_url,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expiry_from_ttl(ttl),
        )
        return session_id

    async def get(self, session_id: SessionId) -> Session | None:
        return self._sessions.get(session_id)

    async def update(
        self, session_id: SessionId, access_token: str, ttl: int, refresh_token: str | None = None
    ) -> Session | None:
        current = self._sessions.get(session_id)
        if current is None:
            return None
        changes: dict[str, object] = {"access_token": access_token, "expires_at": expiry_from_ttl(ttl)}
        if refresh_token:
            changes["refresh_token"] = refresh_token
        updated = current.model_copy(update=changes)
        self._sessions[session_id] = updated
        return updated

    async def delete(self, session_id: SessionId) -> None:
        self._sessions.pop(session_id, None)
