"""End-to-end tests for dashboard.py against the in-process Freebox."""
import pytest

from freebox_dashboard.dashboard import FreeboxDashboard
from freebox_dashboard.models.auth import AuthState
from freebox_dashboard.models.capabilities import FreeboxModel, VmSupport
from freebox_dashboard.utils.errors import NotRegisteredError


@pytest.fixture
def registered(fake_settings, transport, token_store, fake_box):
    token_store.save(fake_box.app_token)
    return FreeboxDashboard(fake_settings, transport=transport, token_store=token_store)


# ── Registration to logout ───────────────────────────────────────────

@pytest.mark.anyio
async def test_full_lifecycle(dashboard, fake_box, fake_settings):
    fake_box.statuses = ["pending", "pending", "pending", "granted"]

    registration = await dashboard.auth.register()
    assert registration.track_id == 42
    assert dashboard.auth.state == AuthState.PENDING_APPROVAL

    status = await dashboard.auth.wait_for_authorization(
        registration.track_id,
        interval=fake_settings.poll_interval,
        timeout=fake_settings.poll_timeout,
    )
    assert status.status.value == "granted"
    assert fake_box.calls_to("/api/v4/login/authorize/42") == 4

    summary = await dashboard.login()
    assert summary.permissions["settings"] is True
    assert summary.capabilities.model == FreeboxModel.ULTRA
    assert await dashboard.auth.check_session() is True

    await dashboard.logout()
    assert await dashboard.auth.check_session() is False
    assert dashboard.auth.state == AuthState.LOGGED_OUT


@pytest.mark.anyio
async def test_token_survives_new_dashboard(dashboard, fake_settings, token_store, make_transport, fake_box):
    await dashboard.auth.register()

    restarted = FreeboxDashboard(fake_settings, transport=make_transport(fake_box.handler), token_store=token_store)
    assert restarted.auth.is_registered() is True
    await restarted.login()
    assert restarted.auth.is_logged_in() is True


@pytest.mark.anyio
async def test_login_unregistered(dashboard, fake_box):
    with pytest.raises(NotRegisteredError):
        await dashboard.login()
    assert fake_box.calls == []


# ── Capabilities ─────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_login_detects_pop(registered, fake_box):
    dashboard = registered
    fake_box.version_info = {"box_model_name": "Freebox Pop", "box_flavor": "light"}

    summary = await dashboard.login()
    caps = summary.capabilities
    assert caps.model == FreeboxModel.POP
    assert caps.vm_support == VmSupport.NONE
    assert caps.max_vms == 0
    assert caps.wifi6ghz is False
    assert dashboard.detector.supports_vm() is False


@pytest.mark.anyio
async def test_logout_clears_capabilities(registered, fake_box):
    dashboard = registered
    await dashboard.login()
    assert dashboard.detector.get_capabilities() is not None

    await dashboard.logout()
    assert dashboard.detector.get_capabilities() is None


@pytest.mark.anyio
async def test_session_context_logs_out(registered, fake_box):
    dashboard = registered
    async with dashboard.session() as summary:
        assert summary.capabilities.model == FreeboxModel.ULTRA
        assert dashboard.auth.is_logged_in() is True
    assert dashboard.auth.is_logged_in() is False
    assert fake_box.calls_to("/api/v4/login/logout/") == 1


@pytest.mark.anyio
async def test_simulated_model_from_settings(fake_settings, transport, token_store, fake_box):
    settings = fake_settings.model_copy(update={"mock_model": "delta"})
    dashboard = FreeboxDashboard(settings, transport=transport, token_store=token_store)

    caps = await dashboard.detector.detect_model()
    assert caps.model == FreeboxModel.DELTA
    assert caps.simulated is True
    assert fake_box.calls_to("/api_version") == 0


@pytest.mark.anyio
async def test_fallback_hook_wired(fake_settings, make_transport, token_store):
    seen = []

    def broken(request):
        raise ConnectionError("unreachable")

    dashboard = FreeboxDashboard(
        fake_settings,
        transport=make_transport(broken),
        token_store=token_store,
        on_fallback=lambda reason, exc: seen.append(reason),
    )
    caps = await dashboard.detector.detect_model()
    assert caps.model == FreeboxModel.UNKNOWN
    assert len(seen) == 1


# ── check() ──────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_check_unregistered(dashboard, fake_box):
    status = await dashboard.check()
    assert status.is_registered is False
    assert status.is_logged_in is False
    assert status.capabilities is None
    assert fake_box.calls == []


@pytest.mark.anyio
async def test_check_logged_in(registered, fake_box):
    dashboard = registered
    await dashboard.login()

    status = await dashboard.check()
    assert status.is_registered is True
    assert status.is_logged_in is True
    assert status.permissions == {"settings": True, "downloads": True}
    assert status.capabilities.model == FreeboxModel.ULTRA


# ── Base URL ─────────────────────────────────────────────────────────

def test_set_base_url(dashboard):
    dashboard.set_base_url("https://192.168.1.254/")
    assert dashboard.transport.base_url == "https://192.168.1.254"
    assert dashboard.transport.build_url("/system/") == "https://192.168.1.254/api/v4/system/"


@pytest.mark.anyio
async def test_use_local_connects_to_lan_address(fake_settings, token_store):
    settings = fake_settings.model_copy(update={"use_local": True, "local_ip": "192.168.1.254"})
    async with FreeboxDashboard(settings, token_store=token_store) as dashboard:
        assert dashboard.transport.base_url == "https://192.168.1.254"
