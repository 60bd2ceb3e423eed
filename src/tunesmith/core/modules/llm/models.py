from pydantic import BaseModel, ConfigDict, Field

# Upper bound on suggestions handed to the playlist assembler.
MAX_SUGGESTIONS = 20


class SuggestedTrack(BaseModel):
    """A model-generated (title, artist) pair. Untrusted input."""

    title: str = Field(..., min_length=1, description="Track title")
    artist: str = Field(..., min_length=1, description="Primary artist")

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class TrackSuggestions(BaseModel):
    """Suggestion result (API representation)."""

    tracks: list[SuggestedTrack] = Field(..., description=f"Suggested tracks, at most {MAX_SUGGESTIONS}")
