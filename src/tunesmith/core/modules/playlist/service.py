import asyncio
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from tunesmith.core.core import Service
from tunesmith.core.modules.llm.models import SuggestedTrack
from tunesmith.core.modules.playlist.models import PLAYLIST_DESCRIPTION, PlaylistResult, ResolvedTrack
from tunesmith.errors import AddTracksFailedError, InvalidRequestError

logger = structlog.get_logger(__name__)


_tracks_adapter = TypeAdapter(list[SuggestedTrack])


def parse_playlist_tracks(raw: list[Any] | None) -> list[SuggestedTrack]:
    """Validate raw track objects from a request body."""
    try:
        return _tracks_adapter.validate_python(raw or [])
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in ("tracks", *first.get("loc", ())))
        raise InvalidRequestError(f"Invalid request: {location} {first.get('msg', '')}".strip()) from e


def validate_playlist_request(name: str | None, tracks: list[SuggestedTrack] | None) -> None:
    """Reject a request without a name or without tracks."""
    if not name or not name.strip() or not tracks:
        raise InvalidRequestError("Missing name or tracks")


class PlaylistService(Service):
    """Resolves suggestions against the catalog and assembles them into a playlist."""

    async def resolve_tracks(self, access_token: str, tracks: list[SuggestedTrack]) -> list[ResolvedTrack]:
        """Search the catalog for every track concurrently; the result keeps input order."""
        spotify = self.core.services.spotify
        semaphore = asyncio.Semaphore(max(1, self.core.config.search_concurrency))

        async def resolve(track: SuggestedTrack) -> ResolvedTrack:
            async with semaphore:
                uri = await spotify.search_track_uri(access_token, track.title, track.artist)
            return ResolvedTrack(track, uri)

        return list(await asyncio.gather(*(resolve(track) for track in tracks)))

    async def create_playlist(self, access_token: str, name: str, tracks: list[SuggestedTrack]) -> PlaylistResult:
        """
        Create a private playlist holding the best catalog match for each track.

        Unmatched tracks are dropped. If adding the items is rejected the playlist
        already exists, so it is still returned (empty) instead of failing.
        """
        validate_playlist_request(name, tracks)
        spotify = self.core.services.spotify

        resolved = await self.resolve_tracks(access_token, tracks)
        uris = [item.uri for item in resolved if item.uri]
        dropped = len(resolved) - len(uris)

        playlist = await spotify.create_playlist(access_token, name.strip(), PLAYLIST_DESCRIPTION, public=False)

        added = 0
        if uris:
            try:
                await spotify.add_items(access_token, playlist.id, uris)
                added = len(uris)
            except AddTracksFailedError as e:
                logger.warning("playlist_add_tracks_failed", playlist_id=playlist.id, track_count=len(uris), error=str(e))

        logger.info("playlist_created", playlist_id=playlist.id, added=added, dropped=dropped)
        return PlaylistResult(id=playlist.id, url=playlist.url, added=added, dropped=dropped)
