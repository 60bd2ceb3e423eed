"""Shared pytest fixtures."""

import json
from urllib.parse import parse_qsl

import httpx
import pytest

from tunesmith.app import App
from tunesmith.config import Config
from tunesmith.core.core import Core
from tunesmith.core.modules.session.models import UserProfile
from tunesmith.core.modules.session.store import InMemorySessionStore
from tunesmith.web.server import create_fastapi_app

CLIENT_ORIGIN = "http://client.test"


class FakeSpotify:
    """In-process stand-in for the Spotify accounts service and Web API."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_status = 200
        self.refresh_status = 200
        self.refresh_count = 0
        self.profile_status = 200
        self.profile = {
            "id": "user-1",
            "display_name": "Test User",
            "images": [{"url": "https://img.test/avatar.png"}],
        }
        self.catalog: dict[tuple[str, str], str] = {}
        self.search_status = 200
        self.create_status = 201
        self.playlist = {"id": "pl-1", "external_urls": {"spotify": "https://open.spotify.com/playlist/pl-1"}}
        self.add_status = 201
        self.added_uris: list[str] | None = None
        self.created_body: dict | None = None
        self.on_request = None
        # Paths or search queries answered with a 200 gateway page instead of JSON
        self.malformed: set[str] = set()

    def calls(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        path = request.url.path
        if path in self.malformed or request.url.params.get("q") in self.malformed:
            return httpx.Response(200, text="<html>gateway</html>")

        if path == "/api/token":
            form = dict(parse_qsl(request.content.decode()))
            if form["grant_type"] == "authorization_code":
                if self.token_status != 200:
                    return httpx.Response(self.token_status, json={"error": "invalid_grant"})
                return httpx.Response(
                    200,
                    json={"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3600, "token_type": "Bearer"},
                )
            self.refresh_count += 1
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": f"access-refreshed-{self.refresh_count}", "expires_in": 3600})

        if path == "/v1/me":
            if self.profile_status != 200:
                return httpx.Response(self.profile_status, json={"error": {"status": self.profile_status}})
            return httpx.Response(200, json=self.profile)

        if path == "/v1/search":
            if self.search_status != 200:
                return httpx.Response(self.search_status)
            query = request.url.params["q"]
            uri = next((uri for (title, artist), uri in self.catalog.items() if query == f"track:{title} artist:{artist}"), None)
            return httpx.Response(200, json={"tracks": {"items": [{"uri": uri}] if uri else []}})

        if path == "/v1/me/playlists" and request.method == "POST":
            self.created_body = json.loads(request.content)
            if self.create_status >= 400:
                return httpx.Response(self.create_status, text="Forbidden")
            return httpx.Response(self.create_status, json=self.playlist)

        if path.startswith("/v1/playlists/") and path.endswith("/tracks"):
            if self.add_status >= 400:
                return httpx.Response(self.add_status, text="Bad request")
            self.added_uris = json.loads(request.content)["uris"]
            return httpx.Response(self.add_status, json={"snapshot_id": "snap"})

        return httpx.Response(404)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config():
    """Configuration pointing every provider at fake hosts."""
    return Config(
        _env_file=None,
        cookie_secret="test-secret",
        client_origin=CLIENT_ORIGIN,
        spotify_client_id="client-id",
        spotify_client_secret="client-secret",
        spotify_redirect_uri="http://testserver/api/auth/callback",
        spotify_accounts_url="https://accounts.test",
        spotify_api_url="https://api.test/v1",
        llm_model="ollama_chat/llama3.1:8b",
        llm_api_base="http://llm.test",
    )


@pytest.fixture
def fake_spotify():
    return FakeSpotify()


@pytest.fixture
async def http_client(fake_spotify):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_spotify.handler)) as client:
        yield client


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def core(config, session_store, http_client):
    return Core(config, session_store=session_store, http_client=http_client)


@pytest.fixture
def profile():
    return UserProfile(user_id="user-1", display_name="Test User", image_url="https://img.test/avatar.png")


@pytest.fixture
def fastapi_app(config, session_store, http_client):
    return create_fastapi_app(App(config, session_store=session_store, http_client=http_client), config)


@pytest.fixture
async def client(fastapi_app):
    """Async HTTP client bound to the FastAPI app."""
    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
