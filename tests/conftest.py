"""Shared fixtures for the freebox-dashboard test suite."""
from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any

import httpx
import pytest

from freebox_dashboard.config import AppIdentity, Settings
from freebox_dashboard.dashboard import FreeboxDashboard
from freebox_dashboard.token_store import TokenStore
from freebox_dashboard.transport import FreeboxTransport

BASE_URL = "https://fbx.test"


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _ok(result: Any = None) -> httpx.Response:
    body: dict[str, Any] = {"success": True}
    if result is not None:
        body["result"] = result
    return httpx.Response(200, json=body)


def _fail(status: int, error_code: str, msg: str = "") -> httpx.Response:
    return httpx.Response(status, json={"success": False, "error_code": error_code, "msg": msg})


class FakeFreebox:
    """In-process stand-in for the Freebox OS API."""

    def __init__(
        self,
        app_token: str = "app-token-123",
        version_info: dict[str, Any] | None = None,
        statuses: list[str] | None = None,
        permissions: dict[str, bool] | None = None,
    ) -> None:
        self.app_token = app_token
        self.version_info = version_info if version_info is not None else {
            "box_model_name": "Freebox v9 (r1)",
            "box_flavor": "full",
            "api_version": "11.1",
        }
        self.statuses = list(statuses or ["granted"])
        self.permissions = permissions or {"settings": True, "downloads": True}
        self.routes: dict[str, Any] = {}
        self.calls: list[tuple[str, str]] = []
        self.bodies: list[Any] = []
        self.challenge = "challenge-0"
        self.session_token: str | None = None
        self._logins = 0

    def calls_to(self, path: str) -> int:
        return sum(1 for _, p in self.calls if p == path)

    def expire_session(self) -> None:
        self.session_token = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        body = json.loads(request.content) if request.content else None
        self.bodies.append(body)

        if path == "/api_version":
            return httpx.Response(200, json=self.version_info)

        route = path.split("/", 3)[3] if path.startswith("/api/") else path
        route = "/" + route
        header = request.headers.get("X-Fbx-App-Auth")
        authed = self.session_token is not None and header == self.session_token

        if route == "/login/authorize/" and request.method == "POST":
            return _ok({"app_token": self.app_token, "track_id": 42})
        if route.startswith("/login/authorize/"):
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            return _ok({"status": status, "challenge": self.challenge})
        if route == "/login/":
            return _ok({"logged_in": authed, "challenge": self.challenge})
        if route == "/login/session/":
            expected = hmac.new(self.app_token.encode(), self.challenge.encode(), hashlib.sha1).hexdigest()
            if body.get("password") != expected:
                return _fail(403, "invalid_token", "Invalid password")
            self._logins += 1
            self.session_token = f"session-{self._logins}"
            self.challenge = f"challenge-{self._logins}"
            return _ok({
                "session_token": self.session_token,
                "challenge": self.challenge,
                "permissions": dict(self.permissions),
            })
        if route == "/login/logout/":
            self.session_token = None
            return _ok()

        if not authed:
            return _fail(403, "auth_required", "Invalid session token, or no session token sent")
        if route not in self.routes:
            return _fail(404, "invalid_request", f"No route {route}")
        return _ok(self.routes[route])


@pytest.fixture
def fake_box() -> FakeFreebox:
    return FakeFreebox()


@pytest.fixture
def fake_settings(tmp_path) -> Settings:
    return Settings(
        url=BASE_URL,
        identity=AppIdentity(
            app_id="fr.test.dashboard",
            app_name="Test Dashboard",
            app_version="0.1.0",
            device_name="pytest",
        ),
        token_file=str(tmp_path / "data" / "token.json"),
        request_timeout=2.0,
        poll_interval=0.0,
        poll_timeout=5.0,
    )


@pytest.fixture
def token_store(fake_settings) -> TokenStore:
    return TokenStore(fake_settings.token_path)


@pytest.fixture
def make_transport():
    """Factory: a FreeboxTransport whose requests go to `handler`."""
    def _make(handler, timeout: float = 2.0, api_version: str = "v4") -> FreeboxTransport:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return FreeboxTransport(BASE_URL, api_version=api_version, timeout=timeout, http=http)
    return _make


@pytest.fixture
def transport(fake_box, make_transport) -> FreeboxTransport:
    return make_transport(fake_box.handler)


@pytest.fixture
def dashboard(fake_settings, transport, token_store) -> FreeboxDashboard:
    return FreeboxDashboard(fake_settings, transport=transport, token_store=token_store)
