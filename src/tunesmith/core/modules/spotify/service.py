"""Spotify accounts and Web API client.

Every method performs exactly one request on the shared ``httpx.AsyncClient``
and is never retried. Transport errors and timeouts are reported with the same
error class as a rejected response for that call.
"""

from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from tunesmith.core.core import Service
from tunesmith.core.modules.session.models import UserProfile
from tunesmith.core.modules.spotify.models import CreatedPlaylist, TokenGrant
from tunesmith.errors import (
    AddTracksFailedError,
    PlaylistCreateFailedError,
    ProfileFetchFailedError,
    RefreshFailedError,
    TokenExchangeFailedError,
    UserError,
)

logger = structlog.get_logger(__name__)


def _error_text(response: httpx.Response) -> str:
    return f"{response.status_code} {response.text[:200]}".strip()


def _bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


class SpotifyService(Service):
    """Thin client for the provider's OAuth token endpoint and REST catalog/playlist API."""

    @property
    def _accounts_url(self) -> str:
        return self.core.config.spotify_accounts_url.rstrip("/")

    @property
    def _api_url(self) -> str:
        return self.core.config.spotify_api_url.rstrip("/")

    async def on_start(self) -> None:
        config = self.core.config
        if not config.spotify_client_id or not config.spotify_client_secret:
            logger.warning(
                "spotify_credentials_missing",
                hint="set TUNESMITH_SPOTIFY_CLIENT_ID and TUNESMITH_SPOTIFY_CLIENT_SECRET",
            )

    def authorize_url(self, state: str) -> str:
        """Build the provider consent URL for the authorization-code flow."""
        config = self.core.config
        query = {
            "response_type": "code",
            "client_id": config.spotify_client_id,
            "scope": " ".join(config.spotify_scopes),
            "redirect_uri": config.spotify_redirect_uri,
            "state": state,
        }
        return f"{self._accounts_url}/authorize?{urlencode(query)}"

    async def exchange_code(self, code: str) -> TokenGrant:
        """Trade an authorization code for an access/refresh token pair."""
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.core.config.spotify_redirect_uri,
        }
        return await self._request_token(payload, TokenExchangeFailedError, "Token exchange failed")

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Obtain a new access token using a refresh token."""
        payload = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        return await self._request_token(payload, RefreshFailedError, "Token refresh failed")

    async def get_profile(self, access_token: str) -> UserProfile:
        """Fetch the current user's id, display name and avatar."""
        try:
            response = await self.core.http_client.get(f"{self._api_url}/me", headers=_bearer(access_token))
        except httpx.HTTPError as e:
            raise ProfileFetchFailedError(f"Profile fetch failed: {e}") from e
        if not response.is_success:
            raise ProfileFetchFailedError(f"Profile fetch failed: {_error_text(response)}")

        try:
            data = response.json()
            user_id = data.get("id")
            if not user_id:
                raise ProfileFetchFailedError("Profile fetch failed: response has no user id")
            images = data.get("images") or []
            return UserProfile(
                user_id=user_id,
                display_name=data.get("display_name") or user_id,
                image_url=images[0].get("url") if images else None,
            )
        except (ValueError, LookupError, AttributeError, TypeError) as e:
            raise ProfileFetchFailedError("Profile fetch failed: malformed profile response") from e

    async def search_track_uri(self, access_token: str, title: str, artist: str) -> str | None:
        """Return the URI of the best catalog match for a title/artist pair, or None."""
        params = {"q": f"track:{title} artist:{artist}", "type": "track", "limit": "1"}
        try:
            response = await self.core.http_client.get(
                f"{self._api_url}/search", params=params, headers=_bearer(access_token)
            )
        except httpx.HTTPError as e:
            logger.warning("spotify_search_error", error=str(e))
            return None
        if not response.is_success:
            logger.warning("spotify_search_rejected", status=response.status_code)
            return None

        try:
            items = (response.json().get("tracks") or {}).get("items") or []
            return (items[0].get("uri") or None) if items else None
        except (ValueError, LookupError, AttributeError, TypeError):
            logger.warning("spotify_search_malformed", preview=response.text[:120])
            return None

    async def create_playlist(self, access_token: str, name: str, description: str, public: bool = False) -> CreatedPlaylist:
        """Create an empty playlist owned by the current user."""
        body = {"name": name, "public": public, "description": description}
        try:
            response = await self.core.http_client.post(
                f"{self._api_url}/me/playlists", json=body, headers=_bearer(access_token)
            )
        except httpx.HTTPError as e:
            raise PlaylistCreateFailedError(f"Create playlist failed: {e}") from e
        if not response.is_success:
            raise PlaylistCreateFailedError(f"Create playlist failed: {_error_text(response)}")

        try:
            return CreatedPlaylist.model_validate(response.json())
        except ValueError as e:
            raise PlaylistCreateFailedError("Create playlist failed: response has no playlist id") from e

    async def add_items(self, access_token: str, playlist_id: str, uris: list[str]) -> None:
        """Append track URIs to a playlist in the given order."""
        try:
            response = await self.core.http_client.post(
                f"{self._api_url}/playlists/{playlist_id}/tracks", json={"uris": uris}, headers=_bearer(access_token)
            )
        except httpx.HTTPError as e:
            raise AddTracksFailedError(f"Add tracks failed: {e}") from e
        if not response.is_success:
            raise AddTracksFailedError(f"Add tracks failed: {_error_text(response)}")

    async def _request_token(self, payload: dict[str, Any], error_class: type[UserError], prefix: str) -> TokenGrant:
        config = self.core.config
        data = {**payload, "client_id": config.spotify_client_id, "client_secret": config.spotify_client_secret}
        try:
            response = await self.core.http_client.post(f"{self._accounts_url}/api/token", data=data)
        except httpx.HTTPError as e:
            raise error_class(f"{prefix}: {e}") from e
        if not response.is_success:
            raise error_class(f"{prefix}: {_error_text(response)}")

        try:
            return TokenGrant.model_validate(response.json())
        except ValueError as e:
            raise error_class(f"{prefix}: malformed token response") from e
