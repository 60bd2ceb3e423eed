from fastapi import APIRouter
from pydantic import BaseModel, Field

from tunesmith.core.modules.session.models import SessionUser
from tunesmith.web.deps import AppDep, SessionIdDep

router = APIRouter(tags=["session"])


class SessionStatus(BaseModel):
    authenticated: bool = Field(..., description="Whether the caller has a live session")
    user: SessionUser | None = Field(None, description="Profile of the logged-in user")


@router.get(
    "/session",
    summary="Get session status",
    description="Report whether the caller is logged in and, if so, who they are. Never fails.",
    operation_id="getSession",
    response_model_exclude_none=True,
)
async def get_session(app: AppDep, session_id: SessionIdDep) -> SessionStatus:
    user = await app.get_session_user(session_id)
    if user is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, user=user)
