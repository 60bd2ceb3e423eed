"""Authorization-code flow against the provider.

A flow is PENDING from ``begin_login`` until the provider redirects back, and
COMPLETE after ``complete_callback``. The callback either creates a session or
fails without leaving anything behind.
"""

import secrets

import structlog

from tunesmith.core.core import Service
from tunesmith.core.modules.oauth.models import LoginRedirect, PendingAuthorization
from tunesmith.core.modules.session.models import SessionId
from tunesmith.errors import AuthStateMismatchError, InvalidRequestError
from tunesmith.utils import mask_sensitive

logger = structlog.get_logger(__name__)


def _states_match(returned_state: str | None, cookie_state: str | None) -> bool:
    if not returned_state or not cookie_state:
        return False
    return secrets.compare_digest(returned_state.encode(), cookie_state.encode())


class OAuthService(Service):
    """Drives the three-legged OAuth exchange and hands the result to the session service."""

    def __init__(self) -> None:
        super().__init__()
        self._pending: dict[str, PendingAuthorization] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def begin_login(self) -> LoginRedirect:
        """Issue a fresh state token and build the provider authorization URL."""
        self._prune_expired()
        self._evict_oldest(self.core.config.oauth_max_pending - 1)
        state = secrets.token_urlsafe(16)
        self._pending[state] = PendingAuthorization(state=state)
        logger.debug("oauth_login_started", state=mask_sensitive(state))
        return LoginRedirect(url=self.core.services.spotify.authorize_url(state), state=state)

    async def complete_callback(
        self,
        code: str | None,
        returned_state: str | None,
        cookie_state: str | None,
        provider_error: str | None = None,
    ) -> SessionId:
        """Validate the state, exchange the code, fetch the profile and create the session."""
        self._consume_state(returned_state, cookie_state)

        if provider_error:
            raise InvalidRequestError(f"Authorization denied: {provider_error}")
        if not code:
            raise InvalidRequestError("Missing authorization code")

        spotify = self.core.services.spotify
        grant = await spotify.exchange_code(code)
        profile = await spotify.get_profile(grant.access_token)
        session_id = await self.core.services.session.create_session(profile, grant)
        logger.info("oauth_login_completed", user_id=profile.user_id, expires_in=grant.expires_in)
        return session_id

    async def logout(self, session_id: SessionId | None) -> None:
        await self.core.services.session.invalidate_session(session_id)

    def _consume_state(self, returned_state: str | None, cookie_state: str | None) -> None:
        if not _states_match(returned_state, cookie_state):
            logger.warning("oauth_state_mismatch", returned=mask_sensitive(returned_state), cookie=mask_sensitive(cookie_state))
            raise AuthStateMismatchError

        pending = self._pending.pop(returned_state or "", None)
        if pending is None or pending.is_expired(self.core.config.oauth_state_ttl):
            logger.warning("oauth_state_unknown_or_expired", state=mask_sensitive(returned_state))
            raise AuthStateMismatchError

    def _prune_expired(self) -> None:
        ttl = self.core.config.oauth_state_ttl
        expired = [state for state, pending in self._pending.items() if pending.is_expired(ttl)]
        for state in expired:
            del self._pending[state]

    def _evict_oldest(self, keep: int) -> None:
        # Insertion order is issue order
        while len(self._pending) > max(0, keep):
            state = next(iter(self._pending))
            del self._pending[state]
            logger.debug("oauth_login_evicted", state=mask_sensitive(state))
