"""Tests for client.py — session header, fail-fast, expiry handling."""
import pytest

from freebox_dashboard.auth import AuthManager
from freebox_dashboard.client import FreeboxClient
from freebox_dashboard.models.auth import AuthState


@pytest.fixture
def auth(transport, token_store, fake_settings, fake_box):
    token_store.save(fake_box.app_token)
    return AuthManager(transport, token_store, fake_settings.identity)


@pytest.fixture
def client(auth, transport):
    return FreeboxClient(auth, transport)


@pytest.mark.anyio
async def test_authenticated_call_without_session_fails_locally(client, fake_box):
    resp = await client.call("GET", "/system/")

    assert resp.success is False
    assert resp.error_code == "auth_required"
    assert fake_box.calls == []


@pytest.mark.anyio
async def test_authenticated_call_attaches_session(client, auth, fake_box):
    fake_box.routes["/system/"] = {"firmware_version": "4.8.7"}
    await auth.login()

    resp = await client.call("GET", "/system/")
    assert resp.success is True
    assert resp.result == {"firmware_version": "4.8.7"}


@pytest.mark.anyio
async def test_unauthenticated_call_skips_session(client, fake_box):
    resp = await client.call("GET", "/login/", authenticated=False)
    assert resp.success is True
    assert resp.result["logged_in"] is False


@pytest.mark.anyio
async def test_wifi_routed_to_v2(client, auth, fake_box):
    fake_box.routes["/wifi/config/"] = {"enabled": True}
    await auth.login()

    await client.get("/wifi/config/")
    assert ("GET", "/api/v2/wifi/config/") in fake_box.calls


@pytest.mark.anyio
async def test_method_is_uppercased(client, auth, fake_box):
    fake_box.routes["/system/"] = {}
    await auth.login()
    await client.call("get", "/system/")
    assert fake_box.calls[-1] == ("GET", "/api/v4/system/")


@pytest.mark.anyio
async def test_expired_session_invalidated(client, auth, fake_box):
    fake_box.routes["/system/"] = {}
    await auth.login()
    fake_box.expire_session()

    resp = await client.get("/system/")
    assert resp.error_code == "auth_required"
    assert auth.is_logged_in() is False
    assert auth.state == AuthState.LOGGED_OUT


@pytest.mark.anyio
async def test_other_failures_keep_session(client, auth, fake_box):
    await auth.login()
    resp = await client.get("/does/not/exist/")
    assert resp.success is False
    assert resp.error_code == "invalid_request"
    assert auth.is_logged_in() is True


@pytest.mark.anyio
async def test_convenience_methods_send_body(client, auth, fake_box):
    fake_box.routes["/wifi/config/"] = {"enabled": False}
    await auth.login()

    await client.put("/wifi/config/", {"enabled": False})
    assert fake_box.calls[-1] == ("PUT", "/api/v2/wifi/config/")
    assert fake_box.bodies[-1] == {"enabled": False}

    await client.post("/wifi/config/", {"x": 1})
    assert fake_box.calls[-1][0] == "POST"

    await client.delete("/wifi/config/")
    assert fake_box.calls[-1][0] == "DELETE"
    assert fake_box.bodies[-1] is None
