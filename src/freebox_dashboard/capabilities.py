"""Freebox model detection.

Identifies the hardware family from /api_version and derives the feature
matrix the rest of the dashboard adapts to. Detection never fails: any
error degrades to the generic 'unknown' profile.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

import yaml

from freebox_dashboard.models.capabilities import (
    BoxFlavor,
    FeatureSummary,
    FreeboxCapabilities,
    FreeboxModel,
    ModelBaseCapabilities,
    VmSupport,
)
from freebox_dashboard.transport import FreeboxTransport

logger = logging.getLogger(__name__)


DEFAULT_TABLE_PATH = Path(__file__).resolve().parent / "hardware.yaml"
CACHE_DURATION = 300  # seconds

# Keys of /api_version that may carry the model name, by preference
MODEL_NAME_KEYS = ("box_model_name", "box_model", "device_name")

FallbackHook = Callable[[str, BaseException | None], None]


@dataclass(frozen=True)
class SimulatedModel:
    name: str
    flavor: BoxFlavor


class HardwareTable:
    """Ordered classification rules plus the static capability table."""

    def __init__(
        self,
        rules: list[tuple[FreeboxModel, tuple[str, ...]]],
        models: dict[FreeboxModel, ModelBaseCapabilities],
        simulated: dict[FreeboxModel, SimulatedModel],
    ) -> None:
        self.rules = rules
        self.models = models
        self.simulated = simulated

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HardwareTable:
        rules = [
            (FreeboxModel(rule["model"]), tuple(str(m).lower() for m in rule.get("match", [])))
            for rule in data.get("rules", [])
        ]
        models = {
            FreeboxModel(key): ModelBaseCapabilities.model_validate({**(entry or {}), "model": key})
            for key, entry in data.get("models", {}).items()
        }
        models.setdefault(FreeboxModel.UNKNOWN, ModelBaseCapabilities())
        simulated = {
            FreeboxModel(key): SimulatedModel(name=entry["name"], flavor=BoxFlavor(entry.get("flavor", "light")))
            for key, entry in data.get("simulated", {}).items()
        }
        return cls(rules, models, simulated)

    @classmethod
    def load(cls, path: str | Path) -> HardwareTable:
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(yaml.safe_load(f) or {})

    def classify(self, model_name: str) -> FreeboxModel:
        """Map a model name to a family. First matching rule wins."""
        lower = model_name.lower()
        for model, markers in self.rules:
            if any(marker in lower for marker in markers):
                return model
        return FreeboxModel.UNKNOWN

    def base(self, model: FreeboxModel) -> ModelBaseCapabilities:
        return self.models.get(model) or self.models[FreeboxModel.UNKNOWN]

    def build(self, model: FreeboxModel, model_name: str, box_flavor: BoxFlavor) -> FreeboxCapabilities:
        """Overlay runtime observations on the family's static entry.

        Internal storage follows the reported box flavor, not the table.
        """
        data = self.base(model).model_dump()
        data.update(
            model_name=model_name,
            box_flavor=box_flavor,
            has_internal_storage=box_flavor == BoxFlavor.FULL,
        )
        return FreeboxCapabilities(**data)

    def build_simulated(self, model: FreeboxModel) -> FreeboxCapabilities:
        """The family's table entry as-is, under a synthetic display name."""
        sim = self.simulated.get(model) or SimulatedModel(name="Freebox", flavor=BoxFlavor.LIGHT)
        return FreeboxCapabilities(
            **self.base(model).model_dump(),
            model_name=f"{sim.name} (simulated)",
            box_flavor=sim.flavor,
            simulated=True,
        )


@lru_cache(maxsize=4)
def load_hardware_table(path: str | None = None) -> HardwareTable:
    """Load (and cache) the hardware table, defaulting to the bundled one."""
    return HardwareTable.load(path or DEFAULT_TABLE_PATH)


def extract_model_name(version_info: dict[str, Any]) -> str:
    for key in MODEL_NAME_KEYS:
        value = version_info.get(key)
        if value:
            return str(value)
    return "Unknown"


class ModelDetector:
    """Detects and caches the capabilities of the connected Freebox.

    Concurrent detect_model() calls on a cold cache share one in-flight
    detection.
    """

    def __init__(
        self,
        transport: FreeboxTransport,
        table: HardwareTable | None = None,
        ttl: float = CACHE_DURATION,
        mock_model: str = "",
        on_fallback: FallbackHook | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._table = table or load_hardware_table()
        self._ttl = ttl
        self._mock_model = mock_model.lower()
        self._on_fallback = on_fallback
        self._clock = clock
        self._capabilities: FreeboxCapabilities | None = None
        self._detected_at = 0.0
        self._inflight: asyncio.Future[FreeboxCapabilities] | None = None
        self._generation = 0

    @property
    def table(self) -> HardwareTable:
        return self._table

    async def detect_model(self) -> FreeboxCapabilities:
        """Return the capabilities, detecting them if the cache is cold or stale."""
        if self._capabilities is not None and self._clock() - self._detected_at < self._ttl:
            return self._capabilities

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._perform_detection(self._generation))

        task = self._inflight
        try:
            return await asyncio.shield(task)
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

    async def refresh_capabilities(self) -> FreeboxCapabilities:
        """Drop the cache and detect again."""
        self.clear_cache()
        return await self.detect_model()

    def clear_cache(self) -> None:
        """Forget cached capabilities (called on logout)."""
        self._capabilities = None
        self._inflight = None
        self._detected_at = 0.0
        self._generation += 1
        logger.info("Capability cache cleared")

    def get_capabilities(self) -> FreeboxCapabilities | None:
        """Cached capabilities, without triggering detection."""
        return self._capabilities

    async def _perform_detection(self, generation: int) -> FreeboxCapabilities:
        simulated = self._simulated_model()
        if simulated is not None:
            caps = self._table.build_simulated(simulated)
            logger.info("Simulating %s (%s)", caps.model_name, caps.model.value)
            return self._store(caps, generation)

        logger.info("Starting model detection")
        try:
            response = await self._transport.get_api_version()
        except Exception as e:
            return self._fallback("Model detection failed", e, generation)

        if not response.success or not isinstance(response.result, dict):
            return self._fallback(
                f"API version unavailable ({response.error_code or 'no result'})",
                None,
                generation,
            )

        try:
            model_name = extract_model_name(response.result)
            flavor = BoxFlavor.FULL if response.result.get("box_flavor") == "full" else BoxFlavor.LIGHT
            model = self._table.classify(model_name)
            caps = self._table.build(model, model_name, flavor)
        except Exception as e:
            return self._fallback("Malformed API version payload", e, generation)

        logger.info(
            "Detected %s -> %s (vm=%s, wifi6ghz=%s, internal_storage=%s)",
            model_name, model.value, caps.vm_support.value, caps.wifi6ghz, caps.has_internal_storage,
        )
        return self._store(caps, generation)

    def _simulated_model(self) -> FreeboxModel | None:
        if not self._mock_model:
            return None
        try:
            model = FreeboxModel(self._mock_model)
        except ValueError:
            logger.warning("Ignoring unknown simulated model %r", self._mock_model)
            return None
        return model if model in self._table.simulated else None

    def _fallback(self, reason: str, exc: BaseException | None, generation: int) -> FreeboxCapabilities:
        logger.warning("%s, using default capabilities", reason, exc_info=exc)
        if self._on_fallback is not None:
            self._on_fallback(reason, exc)
        caps = self._table.build(FreeboxModel.UNKNOWN, "Freebox", BoxFlavor.LIGHT)
        return self._store(caps, generation)

    def _store(self, caps: FreeboxCapabilities, generation: int) -> FreeboxCapabilities:
        # A clear_cache() during detection makes this result stale.
        if generation == self._generation:
            self._capabilities = caps
            self._detected_at = self._clock()
        return caps

    # ── Feature helpers ─────────────────────────────────────────────

    def supports_vm(self) -> bool:
        return self._capabilities is not None and self._capabilities.vm_support != VmSupport.NONE

    def has_full_vm_support(self) -> bool:
        return self._capabilities is not None and self._capabilities.vm_support == VmSupport.FULL

    def get_max_vms(self) -> int:
        return self._capabilities.max_vms if self._capabilities else 0

    def supports_wifi6ghz(self) -> bool:
        return self._capabilities.wifi6ghz if self._capabilities else False

    def has_internal_storage(self) -> bool:
        return self._capabilities.has_internal_storage if self._capabilities else False

    def get_model(self) -> FreeboxModel:
        return self._capabilities.model if self._capabilities else FreeboxModel.UNKNOWN

    def get_model_name(self) -> str:
        return self._capabilities.model_name if self._capabilities else "Freebox"

    def get_temperature_fields(self) -> list[str]:
        if self._capabilities:
            return list(self._capabilities.temperature_fields)
        return list(self._table.base(FreeboxModel.UNKNOWN).temperature_fields)

    def is_ultra(self) -> bool:
        return self.get_model() == FreeboxModel.ULTRA

    def is_delta(self) -> bool:
        return self.get_model() == FreeboxModel.DELTA

    def is_pop(self) -> bool:
        return self.get_model() == FreeboxModel.POP

    async def get_features(self) -> FeatureSummary:
        """Simplified feature availability, detecting if needed."""
        caps = await self.detect_model()
        return FeatureSummary(
            model=caps.model,
            model_name=caps.model_name,
            vm=caps.vm_support != VmSupport.NONE,
            vm_full=caps.vm_support == VmSupport.FULL,
            vm_limited=caps.vm_support == VmSupport.LIMITED,
            max_vms=caps.max_vms,
            wifi6ghz=caps.wifi6ghz,
            internal_storage=caps.has_internal_storage,
            max_ethernet_speed=caps.max_ethernet_speed,
        )
