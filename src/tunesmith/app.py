from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from tunesmith.config import Config
from tunesmith.core.core import Core
from tunesmith.core.modules.llm.models import SuggestedTrack
from tunesmith.core.modules.oauth.models import LoginRedirect
from tunesmith.core.modules.playlist.models import PlaylistResult
from tunesmith.core.modules.playlist.service import parse_playlist_tracks, validate_playlist_request
from tunesmith.core.modules.session.models import SessionId, SessionUser
from tunesmith.core.modules.session.store import SessionStore


class App:
    """Facade for all application operations, checks the session before delegating to Core."""

    def __init__(
        self,
        config: Config,
        session_store: SessionStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._core = Core(config, session_store=session_store, http_client=http_client)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Authentication ===
    def begin_login(self) -> LoginRedirect:
        """Start an OAuth attempt and return the provider URL with its state token."""
        return self._core.services.oauth.begin_login()

    async def complete_login(
        self, code: str | None, state: str | None, cookie_state: str | None, provider_error: str | None = None
    ) -> SessionId:
        """Finish an OAuth attempt and create the session."""
        return await self._core.services.oauth.complete_callback(code, state, cookie_state, provider_error)

    async def logout(self, session_id: SessionId | None) -> None:
        """Invalidate the session, if there is one."""
        await self._core.services.oauth.logout(session_id)

    async def get_session_user(self, session_id: SessionId | None) -> SessionUser | None:
        """Get the public profile of the current session, or None when not logged in."""
        return await self._core.services.session.get_session_user(session_id)

    # === Suggestions ===
    async def suggest_tracks(self, prompt: str | None) -> list[SuggestedTrack]:
        """Generate track suggestions for a mood prompt (no authentication needed)."""
        return await self._core.services.llm.suggest(prompt)

    # === Playlists ===
    async def create_playlist(
        self, session_id: SessionId | None, name: str | None, tracks: list[Any] | None
    ) -> PlaylistResult:
        """Create a playlist on the provider from suggested tracks (requires session).

        The session is checked before the tracks are validated, so an anonymous
        caller always gets NotAuthenticatedError.
        """
        await self._core.services.session.require_session(session_id)
        suggestions = parse_playlist_tracks(tracks)
        validate_playlist_request(name, suggestions)
        playlist = self._core.services.playlist
        return await self._core.services.session.call_with_access(
            session_id, lambda access_token: playlist.create_playlist(access_token, name or "", suggestions)
        )
