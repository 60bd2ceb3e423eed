from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tunesmith.core.modules.playlist.models import PlaylistResult
from tunesmith.web.deps import AppDep, SessionIdDep
from tunesmith.web.openapi import ErrorResponse

router = APIRouter(prefix="/spotify", tags=["spotify"])


class CreatePlaylistRequest(BaseModel):
    """Request to create a playlist from suggested tracks."""

    name: str | None = Field(None, description="Playlist name")
    # Items are validated by the app after the session check
    tracks: list[Any] = Field(default_factory=list, description="Tracks in playlist order, each {title, artist}")


@router.post(
    "/create-playlist",
    summary="Create playlist",
    description=(
        "Resolve each track against the Spotify catalog and create a private playlist with the matches. "
        "Tracks without a match are skipped."
    ),
    operation_id="createPlaylist",
    responses={
        200: {"description": "Playlist created"},
        400: {"model": ErrorResponse, "description": "Missing name or tracks"},
        401: {"model": ErrorResponse, "description": "Not authenticated or session expired"},
        500: {"model": ErrorResponse, "description": "Spotify rejected the request"},
    },
)
async def create_playlist(request: CreatePlaylistRequest, app: AppDep, session_id: SessionIdDep) -> PlaylistResult:
    return await app.create_playlist(session_id, request.name, request.tracks)
