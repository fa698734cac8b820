"""Composition root for the dashboard core.

Wires the transport, session manager, request façade, model detector and
services for one Freebox. Construct one per appliance; nothing here is a
module-level singleton.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from freebox_dashboard.auth import AuthManager
from freebox_dashboard.capabilities import FallbackHook, ModelDetector, load_hardware_table
from freebox_dashboard.client import FreeboxClient
from freebox_dashboard.config import Settings
from freebox_dashboard.models.auth import DashboardStatus, LoginSummary
from freebox_dashboard.services.system import SystemService
from freebox_dashboard.services.vm import VmService
from freebox_dashboard.services.wifi import WifiService
from freebox_dashboard.token_store import TokenStore
from freebox_dashboard.transport import FreeboxTransport

logger = logging.getLogger(__name__)


class FreeboxDashboard:
    """Everything the dashboard needs to talk to one Freebox."""

    def __init__(
        self,
        settings: Settings,
        transport: FreeboxTransport | None = None,
        token_store: TokenStore | None = None,
        on_fallback: FallbackHook | None = None,
    ) -> None:
        self.settings = settings
        self.transport = transport or FreeboxTransport(
            settings.base_url,
            api_version=settings.api_version,
            timeout=settings.request_timeout,
        )
        self.token_store = token_store or TokenStore(settings.token_path)
        self.auth = AuthManager(self.transport, self.token_store, settings.identity)
        self.client = FreeboxClient(self.auth, self.transport)
        self.detector = ModelDetector(
            self.transport,
            table=load_hardware_table(settings.models_file or None),
            ttl=settings.capabilities_ttl,
            mock_model=settings.mock_model,
            on_fallback=on_fallback,
        )
        self.system = SystemService(self.client)
        self.wifi = WifiService(self.client, self.detector, self.auth)
        self.vm = VmService(self.client, self.detector)

    async def login(self) -> LoginSummary:
        """Open a session, then detect the hardware."""
        session = await self.auth.login()
        capabilities = await self.detector.detect_model()
        return LoginSummary(permissions=session.permissions, capabilities=capabilities)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[LoginSummary]:
        """Logged-in scope: login on entry, logout on exit."""
        summary = await self.login()
        try:
            yield summary
        finally:
            await self.logout()

    async def logout(self) -> None:
        """Close the session; capabilities are session-scoped."""
        await self.auth.logout()
        self.detector.clear_cache()

    async def check(self) -> DashboardStatus:
        """Registration/session overview, with capabilities when logged in."""
        is_logged_in = await self.auth.check_session()
        capabilities = await self.detector.detect_model() if is_logged_in else None
        return DashboardStatus(
            is_registered=self.auth.is_registered(),
            is_logged_in=is_logged_in,
            permissions=self.auth.get_permissions(),
            capabilities=capabilities,
        )

    def set_base_url(self, url: str) -> None:
        """Point at another address for the same box (e.g. its LAN IP)."""
        self.transport.base_url = url
        logger.info("Freebox base URL set to %s", self.transport.base_url)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> FreeboxDashboard:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
