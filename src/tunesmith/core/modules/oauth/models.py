from datetime import datetime, timedelta
from typing import NamedTuple

from pydantic import BaseModel, Field

from tunesmith.utils import now


class PendingAuthorization(BaseModel):
    """An OAuth attempt waiting for the provider to redirect back."""

    state: str
    created_at: datetime = Field(default_factory=now)

    def is_expired(self, ttl: int, at: datetime | None = None) -> bool:
        return (at or now()) - self.created_at > timedelta(seconds=ttl)


class LoginRedirect(NamedTuple):
    """Where to send the browser, and the state token to pin in its cookie."""

    url: str
    state: str
