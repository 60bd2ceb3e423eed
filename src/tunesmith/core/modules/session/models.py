"""Session management models."""

from datetime import datetime, timedelta
from typing import NamedTuple, NewType

from pydantic import BaseModel, ConfigDict, Field

from tunesmith.utils import now

SessionId = NewType("SessionId", str)

# Subtracted from the provider-reported token lifetime so a token is treated
# as stale before the provider starts rejecting it.
TOKEN_EXPIRY_SKEW = timedelta(seconds=15)


class UserProfile(BaseModel):
    """Provider account the session belongs to."""

    user_id: str
    display_name: str
    image_url: str | None = None


class Session(BaseModel):
    """Authenticated user session holding the provider credentials.

    Instances are immutable; the store swaps in a new instance on every update.
    """

    id: SessionId
    user_id: str
    display_name: str
    image_url: str | None = None
    access_token: str
    refresh_token: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=now)

    model_config = ConfigDict(frozen=True)

    def is_expired(self, at: datetime | None = None) -> bool:
        """Whether the access token must be refreshed before use."""
        return (at or now()) >= self.expires_at


class SessionUser(BaseModel):
    """Public view of a session (API representation)."""

    display_name: str = Field(..., description="Display name on the provider")
    image_url: str | None = Field(None, description="Avatar URL, if the provider has one")

    @classmethod
    def from_domain(cls, session: Session) -> "SessionUser":
        """Create view model from domain model."""
        return cls(display_name=session.display_name, image_url=session.image_url)


class AccessGrant(NamedTuple):
    """A usable access token together with the session it came from."""

    access_token: str
    session: Session


def expiry_from_ttl(ttl: int, issued_at: datetime | None = None) -> datetime:
    """Compute the stored expiry for a token valid for *ttl* seconds."""
    return (issued_at or now()) + timedelta(seconds=ttl) - TOKEN_EXPIRY_SKEW
