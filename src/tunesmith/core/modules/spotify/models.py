from pydantic import BaseModel, Field


class TokenGrant(BaseModel):
    """Token endpoint response for both the authorization-code and refresh grants."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str | None = None  # Only present when the provider issues or rotates one
    expires_in: int = 3600
    token_type: str = "Bearer"
    scope: str | None = None


class ExternalUrls(BaseModel):
    spotify: str = ""


class CreatedPlaylist(BaseModel):
    """Subset of the playlist object returned by the create endpoint."""

    id: str
    external_urls: ExternalUrls = Field(default_factory=ExternalUrls)

    @property
    def url(self) -> str:
        return self.external_urls.spotify
