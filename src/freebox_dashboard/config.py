"""Configuration management for the Freebox dashboard.

Loads settings from the environment (and a project-level .env file).
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from dotenv import load_dotenv


DEFAULT_HOST = "mafreebox.freebox.fr"


class AppIdentity(BaseModel):
    """Identity announced to the Freebox when registering and logging in."""
    app_id: str = "fr.freeboxos.dashboard"
    app_name: str = "Freebox Dashboard"
    app_version: str = "1.0.0"
    device_name: str = "Dashboard Web App"


class Settings(BaseModel):
    """Application settings loaded from environment variables."""
    url: str = Field(default=f"https://{DEFAULT_HOST}", description="Freebox base URL")
    local_ip: str = Field(default="192.168.1.254", description="Freebox LAN address (alternate base URL)")
    use_local: bool = Field(default=False, description="Talk to the Freebox on its LAN address instead of url")
    identity: AppIdentity = Field(default_factory=AppIdentity)
    api_version: str = Field(default="v4", description="Default API version path segment")
    request_timeout: float = Field(default=10.0, description="Per-request ceiling in seconds")
    token_file: str = Field(default=".freebox_token", description="Where the app token is persisted")
    mock_model: str = Field(default="", description="Simulated hardware family (testing only)")
    capabilities_ttl: int = Field(default=300, description="Capability cache freshness window in seconds")
    models_file: str = Field(default="", description="Override for the bundled hardware table")
    poll_interval: float = Field(default=1.0, description="Registration polling cadence in seconds")
    poll_timeout: float = Field(default=120.0, description="Registration polling budget in seconds")

    @property
    def local_url(self) -> str:
        return f"https://{self.local_ip}"

    @property
    def base_url(self) -> str:
        """Address the dashboard connects to."""
        return self.local_url if self.use_local else self.url

    @property
    def token_path(self) -> Path:
        """Absolute token file path; relative paths resolve against the cwd."""
        path = Path(self.token_file).expanduser()
        if path.is_absolute():
            return path
        return Path.cwd() / path


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (where pyproject.toml lives)."""
    current = Path(__file__).resolve().parent
    for parent in [current, *current.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def _default_token_file(project_root: Path) -> str:
    return str(project_root / ".freebox_token")


def _load_settings(project_root: Path | None = None) -> Settings:
    """Load settings from environment variables.

    FREEBOX_URL wins over FREEBOX_HOST, which only sets the host name.
    """
    project_root = project_root or _find_project_root()
    host = _env("FREEBOX_HOST", default=DEFAULT_HOST)
    return Settings(
        url=_env("FREEBOX_URL", default=f"https://{host}").rstrip("/"),
        local_ip=_env("FREEBOX_LOCAL_IP", default="192.168.1.254"),
        use_local=_env("FREEBOX_USE_LOCAL").lower() in ("1", "true", "yes"),
        identity=AppIdentity(
            app_id=_env("FREEBOX_APP_ID", default="fr.freeboxos.dashboard"),
            app_name=_env("FREEBOX_APP_NAME", default="Freebox Dashboard"),
            app_version=_env("FREEBOX_APP_VERSION", default="1.0.0"),
            device_name=_env("FREEBOX_DEVICE_NAME", default="Dashboard Web App"),
        ),
        api_version=_env("FREEBOX_API_VERSION", default="v4"),
        request_timeout=float(_env("FREEBOX_REQUEST_TIMEOUT", default="10")),
        token_file=_env("FREEBOX_TOKEN_FILE", default=_default_token_file(project_root)),
        mock_model=_env("MOCK_FREEBOX_MODEL").lower(),
        capabilities_ttl=int(_env("FREEBOX_CAPABILITIES_TTL", default="300")),
        models_file=_env("FREEBOX_MODELS_FILE"),
        poll_interval=float(_env("FREEBOX_POLL_INTERVAL", default="1")),
        poll_timeout=float(_env("FREEBOX_POLL_TIMEOUT", default="120")),
    )


@lru_cache(maxsize=1)
def get_config() -> Settings:
    """Load and cache the application settings."""
    project_root = _find_project_root()

    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return _load_settings(project_root)
