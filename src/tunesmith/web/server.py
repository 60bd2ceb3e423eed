from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from tunesmith.app import App
from tunesmith.config import Config
from tunesmith.errors import UserError
from tunesmith.web.cookies import CookieSigner
from tunesmith.web.error_handlers import general_exception_handler, request_validation_error_handler, user_error_handler
from tunesmith.web.openapi import set_custom_openapi
from tunesmith.web.routers import ai_router, auth_router, session_router, spotify_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(title="Tunesmith API", lifespan=lifespan)

    # Handlers read these from request.app.state
    app.state.app = app_instance
    app.state.config = config
    app.state.cookie_signer = CookieSigner(config.cookie_secret)

    # The frontend sends the session cookie cross-origin during development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.client_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health", tags=["health"], operation_id="health")
    async def health_check() -> dict[str, bool]:
        return {"ok": True}

    app.include_router(auth_router, prefix="/api")
    app.include_router(session_router, prefix="/api")
    app.include_router(ai_router, prefix="/api")
    app.include_router(spotify_router, prefix="/api")

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
