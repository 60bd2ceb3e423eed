from fastapi import APIRouter
from pydantic import BaseModel

from tunesmith.core.modules.llm.models import TrackSuggestions
from tunesmith.web.deps import AppDep
from tunesmith.web.openapi import ErrorResponse

router = APIRouter(prefix="/ai", tags=["ai"])


class SuggestRequest(BaseModel):
    prompt: str | None = None


@router.post(
    "/suggest",
    summary="Suggest tracks",
    description="Ask the local language model for tracks matching a mood description.",
    operation_id="suggestTracks",
    responses={
        400: {"model": ErrorResponse, "description": "Missing prompt"},
        500: {"model": ErrorResponse, "description": "Model server unreachable or invalid model response"},
    },
)
async def suggest(request: SuggestRequest, app: AppDep) -> TrackSuggestions:
    return TrackSuggestions(tracks=await app.suggest_tracks(request.prompt))
