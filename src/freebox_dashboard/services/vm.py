"""Virtual machine service, gated on the detected hardware."""

from __future__ import annotations

from typing import Any

from freebox_dashboard.capabilities import ModelDetector
from freebox_dashboard.client import FreeboxClient
from freebox_dashboard.models.api import ApiResponse
from freebox_dashboard.models.capabilities import VmSupport


class VmService:
    """Service for listing and driving Freebox VMs."""

    def __init__(self, client: FreeboxClient, detector: ModelDetector) -> None:
        self._client = client
        self._detector = detector

    async def _unsupported(self) -> ApiResponse | None:
        caps = await self._detector.detect_model()
        if caps.vm_support == VmSupport.NONE:
            return ApiResponse.failure(
                "vm_not_supported",
                f"Virtual machines are not supported on {caps.model_name}",
            )
        return None

    async def list(self) -> ApiResponse:
        return await self._unsupported() or await self._client.get("/vm/")

    async def get(self, vm_id: int) -> ApiResponse:
        return await self._unsupported() or await self._client.get(f"/vm/{vm_id}")

    async def start(self, vm_id: int) -> ApiResponse:
        return await self._unsupported() or await self._client.post(f"/vm/{vm_id}/start")

    async def stop(self, vm_id: int) -> ApiResponse:
        return await self._unsupported() or await self._client.post(f"/vm/{vm_id}/powerbutton")

    async def create(self, vm: dict[str, Any]) -> ApiResponse:
        """Create a VM, enforcing the model's VM count ceiling."""
        unsupported = await self._unsupported()
        if unsupported:
            return unsupported

        caps = await self._detector.detect_model()
        if caps.vm_support == VmSupport.LIMITED:
            existing = await self._client.get("/vm/")
            if existing.success and isinstance(existing.result, list) and len(existing.result) >= caps.max_vms:
                return ApiResponse.failure(
                    "vm_limit_reached",
                    f"{caps.model_name} supports at most {caps.max_vms} VM(s), "
                    f"{len(existing.result)} already exist",
                )
        return await self._client.post("/vm/", vm)
