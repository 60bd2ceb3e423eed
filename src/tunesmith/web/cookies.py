"""Signed cookies carrying the OAuth state and the session id.

Values are signed with the configured cookie secret; anything that fails
verification is treated as if the cookie were absent.
"""

from typing import Literal

from fastapi import Response
from itsdangerous import BadSignature, TimestampSigner

from tunesmith.config import Config

STATE_COOKIE = "oauth_state"
SESSION_COOKIE = "sid"

_SAMESITE: Literal["lax"] = "lax"


class CookieSigner:
    def __init__(self, secret: str) -> None:
        self._signer = TimestampSigner(secret, salt="tunesmith.cookie")

    def sign(self, value: str) -> str:
        return self._signer.sign(value).decode("utf-8")

    def unsign(self, value: str | None, max_age: int | None = None) -> str | None:
        """Return the original value, or None if missing, tampered with or older than *max_age* seconds."""
        if not value:
            return None
        try:
            return self._signer.unsign(value, max_age=max_age).decode("utf-8")
        except BadSignature:
            return None


def set_state_cookie(response: Response, signer: CookieSigner, config: Config, state: str) -> None:
    response.set_cookie(
        key=STATE_COOKIE,
        value=signer.sign(state),
        max_age=config.oauth_state_ttl,
        httponly=True,
        samesite=_SAMESITE,
        secure=config.cookie_secure,
    )


def clear_state_cookie(response: Response, config: Config) -> None:
    response.delete_cookie(STATE_COOKIE, httponly=True, samesite=_SAMESITE, secure=config.cookie_secure)


def set_session_cookie(response: Response, signer: CookieSigner, config: Config, session_id: str) -> None:
    # Browser-session cookie: sessions do not outlive the process anyway
    response.set_cookie(
        key=SESSION_COOKIE,
        value=signer.sign(session_id),
        httponly=True,
        samesite=_SAMESITE,
        secure=config.cookie_secure,
    )


def clear_session_cookie(response: Response, config: Config) -> None:
    response.delete_cookie(SESSION_COOKIE, httponly=True, samesite=_SAMESITE, secure=config.cookie_secure)
