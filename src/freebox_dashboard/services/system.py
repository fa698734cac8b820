"""System information service."""

from __future__ import annotations

from freebox_dashboard.client import FreeboxClient
from freebox_dashboard.models.api import ApiResponse


class SystemService:
    """Service for Freebox system info and reboot."""

    def __init__(self, client: FreeboxClient) -> None:
        self._client = client

    async def get_info(self) -> ApiResponse:
        """Firmware, uptime, temperatures, fans."""
        return await self._client.get("/system/")

    async def reboot(self) -> ApiResponse:
        return await self._client.post("/system/reboot/")
