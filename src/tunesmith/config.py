from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    host: str = "127.0.0.1"
    port: int = 3001
    debug: bool = False
    cookie_secret: str = "dev-secret"  # Signs the session and OAuth state cookies
    cookie_secure: bool = False  # Set to True in production with HTTPS
    client_origin: str = "http://127.0.0.1:5173"  # Frontend origin, used for CORS and the post-login redirect

    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_redirect_uri: str = "http://127.0.0.1:3001/api/auth/callback"
    spotify_scopes: list[str] = ["playlist-modify-private", "playlist-modify-public", "user-read-email"]
    spotify_accounts_url: str = "https://accounts.spotify.com"
    spotify_api_url: str = "https://api.spotify.com/v1"

    llm_model: str = "ollama_chat/llama3.1:8b"  # litellm model identifier
    llm_api_base: str = "http://localhost:11434"  # Base URL of the local model server
    llm_temperature: float = 0.6
    llm_timeout: float = 120.0  # Seconds; local models can be slow on first load

    http_timeout: float = 15.0  # Seconds, applies to every Spotify call
    oauth_state_ttl: int = 600  # Seconds a login attempt stays valid
    oauth_max_pending: int = 1000  # Open login attempts kept; the oldest are evicted first
    search_concurrency: int = 5  # Parallel catalog searches per playlist

    # Build metadata injected during Docker build via environment variables
    git_commit_hash: str = "unknown"
    build_time: str = "unknown"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "TUNESMITH_",
        "extra": "ignore",
    }
