from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import cast

import httpx

from tunesmith.config import Config
from tunesmith.core.modules.session.store import InMemorySessionStore, SessionStore


class Service:
    """Base class for services sharing the core context."""

    def __init__(self) -> None:
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from tunesmith.core.modules.llm.service import LLMService  # noqa: PLC0415
    from tunesmith.core.modules.oauth.service import OAuthService  # noqa: PLC0415
    from tunesmith.core.modules.playlist.service import PlaylistService  # noqa: PLC0415
    from tunesmith.core.modules.session.service import SessionService  # noqa: PLC0415
    from tunesmith.core.modules.spotify.service import SpotifyService  # noqa: PLC0415

    spotify: SpotifyService
    session: SessionService
    oauth: OAuthService
    llm: LLMService
    playlist: PlaylistService

    def __init__(self) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for startup - the provider client comes first
        service_configs = [
            ("spotify", "tunesmith.core.modules.spotify.service", "SpotifyService"),
            ("session", "tunesmith.core.modules.session.service", "SessionService"),
            ("oauth", "tunesmith.core.modules.oauth.service", "OAuthService"),
            ("llm", "tunesmith.core.modules.llm.service", "LLMService"),
            ("playlist", "tunesmith.core.modules.playlist.service", "PlaylistService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class()
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services in reverse order."""
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, the outbound HTTP client, the session store and all service instances."""

    config: Config
    http_client: httpx.AsyncClient
    session_store: SessionStore
    services: Services

    def __init__(
        self,
        config: Config,
        session_store: SessionStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize core with config, shared HTTP client, session store and auto-registered services."""
        self.config = config
        self.session_store = session_store or InMemorySessionStore()
        self.http_client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(config.http_timeout))
        self.services = Services()
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Start all services on application startup."""
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close the HTTP client on shutdown."""
        await self.services.stop_all()
        await self.http_client.aclose()
