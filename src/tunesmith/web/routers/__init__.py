from tunesmith.web.routers.ai import router as ai_router
from tunesmith.web.routers.auth import router as auth_router
from tunesmith.web.routers.session import router as session_router
from tunesmith.web.routers.spotify import router as spotify_router

__all__ = [
    "ai_router",
    "auth_router",
    "session_router",
    "spotify_router",
]
