"""WiFi service, adapted to the bands the detected hardware offers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from freebox_dashboard.auth import AuthManager
from freebox_dashboard.capabilities import ModelDetector
from freebox_dashboard.client import FreeboxClient
from freebox_dashboard.models.api import ApiResponse

logger = logging.getLogger(__name__)

WPS_SESSIONS = "/wifi/wps/sessions/"


def _is_6ghz(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    band = entry.get("band") or (entry.get("config") or {}).get("band") or ""
    return "6g" in str(band).lower()


def _result_or(response: ApiResponse | BaseException, default: Any) -> Any:
    if isinstance(response, ApiResponse) and response.success and response.result is not None:
        return response.result
    return default


class WifiService:
    """Service for WiFi configuration, access points and BSS."""

    def __init__(self, client: FreeboxClient, detector: ModelDetector, auth: AuthManager) -> None:
        self._client = client
        self._detector = detector
        self._auth = auth

    async def get_config(self) -> ApiResponse:
        return await self._client.get("/wifi/config/")

    async def set_enabled(self, enabled: bool) -> ApiResponse:
        """Turn the WiFi on or off globally."""
        return await self._client.put("/wifi/config/", {"enabled": enabled})

    async def list_aps(self) -> ApiResponse:
        return await self._client.get("/wifi/ap/")

    async def list_bss(self) -> ApiResponse:
        return await self._client.get("/wifi/bss/")

    async def set_bss_enabled(self, bss_id: str, enabled: bool) -> ApiResponse:
        return await self._client.put(f"/wifi/bss/{bss_id}", {"config": {"enabled": enabled}})

    async def get_full_status(self) -> dict[str, Any]:
        """Config, access points and BSS in one go.

        Each part degrades to an empty value on failure. 6 GHz radios are
        hidden on hardware without 6 GHz support.
        """
        config, aps, bss = await asyncio.gather(
            self.get_config(), self.list_aps(), self.list_bss(), return_exceptions=True
        )
        aps_data = _result_or(aps, [])
        bss_data = _result_or(bss, [])

        caps = await self._detector.detect_model()
        if not caps.wifi6ghz:
            aps_data = [ap for ap in aps_data if not _is_6ghz(ap)]
            bss_data = [b for b in bss_data if not _is_6ghz(b)]

        return {
            "config": _result_or(config, None),
            "aps": aps_data,
            "bss": bss_data,
            "wifi6ghz": caps.wifi6ghz,
        }

    async def start_wps(self) -> ApiResponse:
        """Start a WPS session. Needs the 'settings' permission."""
        if not self._auth.get_permissions().get("settings"):
            return ApiResponse.failure(
                "insufficient_rights",
                "The 'settings' permission is required. Re-register the app and grant all rights on the Freebox.",
            )
        response = await self._client.post(WPS_SESSIONS, {"bss_id": 0})
        if not response.success and response.error_code == "wps_disabled":
            logger.warning("WPS is disabled in Freebox OS")
        return response

    async def stop_wps(self) -> ApiResponse:
        return await self._client.delete(WPS_SESSIONS)
