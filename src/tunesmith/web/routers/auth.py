from typing import Annotated

from fastapi import APIRouter, Cookie, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field

from tunesmith.web.cookies import (
    STATE_COOKIE,
    clear_session_cookie,
    clear_state_cookie,
    set_session_cookie,
    set_state_cookie,
)
from tunesmith.web.deps import AppDep, ConfigDep, CookieSignerDep, SessionIdDep
from tunesmith.web.openapi import ErrorResponse

router = APIRouter(prefix="/auth", tags=["auth"])


class OkResponse(BaseModel):
    ok: bool = Field(True, description="Always true")


@router.get(
    "/login",
    summary="Start Spotify login",
    description="Redirect the browser to the Spotify consent page and pin the anti-forgery state in a cookie.",
    operation_id="login",
    status_code=302,
    responses={302: {"description": "Redirect to the provider authorization URL"}},
)
async def login(app: AppDep, config: ConfigDep, signer: CookieSignerDep) -> RedirectResponse:
    redirect = app.begin_login()
    response = RedirectResponse(redirect.url, status_code=302)
    set_state_cookie(response, signer, config, redirect.state)
    return response


@router.get(
    "/callback",
    summary="OAuth callback",
    description="Provider redirect target. Validates the state, exchanges the code and starts a session.",
    operation_id="oauthCallback",
    status_code=302,
    responses={
        302: {"description": "Logged in, redirect to the client"},
        400: {"model": ErrorResponse, "description": "Invalid OAuth state or authorization denied"},
        500: {"model": ErrorResponse, "description": "Token exchange or profile fetch failed"},
    },
)
async def callback(
    app: AppDep,
    config: ConfigDep,
    signer: CookieSignerDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    oauth_state: Annotated[str | None, Cookie(alias=STATE_COOKIE)] = None,
) -> RedirectResponse:
    cookie_state = signer.unsign(oauth_state, max_age=config.oauth_state_ttl)
    session_id = await app.complete_login(code, state, cookie_state, provider_error=error)

    response = RedirectResponse(config.client_origin, status_code=302)
    clear_state_cookie(response, config)
    set_session_cookie(response, signer, config, session_id)
    return response


@router.post(
    "/logout",
    summary="End session",
    description="Forget the current session, if any, and clear the session cookie.",
    operation_id="logout",
)
async def logout(app: AppDep, config: ConfigDep, session_id: SessionIdDep, response: Response) -> OkResponse:
    await app.logout(session_id)
    clear_session_cookie(response, config)
    return OkResponse()
