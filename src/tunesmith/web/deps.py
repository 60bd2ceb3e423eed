from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie

from tunesmith.app import App
from tunesmith.config import Config
from tunesmith.core.modules.session.models import SessionId
from tunesmith.web.cookies import SESSION_COOKIE, CookieSigner

# Security scheme
session_cookie_scheme = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_config(request: Request) -> Config:
    return cast(Config, request.app.state.config)


async def get_cookie_signer(request: Request) -> CookieSigner:
    return cast(CookieSigner, request.app.state.cookie_signer)


async def get_session_id(
    signer: Annotated[CookieSigner, Depends(get_cookie_signer)],
    session_cookie: Annotated[str | None, Depends(session_cookie_scheme)] = None,
) -> SessionId | None:
    """Read the session id from the signed cookie. Missing or forged cookies yield None."""
    session_id = signer.unsign(session_cookie)
    return SessionId(session_id) if session_id else None


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
ConfigDep = Annotated[Config, Depends(get_config)]
CookieSignerDep = Annotated[CookieSigner, Depends(get_cookie_signer)]
SessionIdDep = Annotated[SessionId | None, Depends(get_session_id)]
