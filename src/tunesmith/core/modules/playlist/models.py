from typing import NamedTuple

from pydantic import BaseModel, Field

from tunesmith.core.modules.llm.models import SuggestedTrack

PLAYLIST_DESCRIPTION = "Generated by AI Spotify"


class ResolvedTrack(NamedTuple):
    """A suggestion and the provider URI it resolved to, if any."""

    track: SuggestedTrack
    uri: str | None


class PlaylistResult(BaseModel):
    """Created playlist (API representation)."""

    id: str = Field(..., description="Provider playlist id")
    url: str = Field(..., description="Public web URL, empty if the provider did not return one")
    added: int = Field(..., description="Number of tracks placed in the playlist", ge=0)
    dropped: int = Field(..., description="Suggestions without a catalog match", ge=0)
