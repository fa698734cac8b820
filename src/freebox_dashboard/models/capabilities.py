"""Hardware capability data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class FreeboxModel(str, Enum):
    ULTRA = "ultra"
    DELTA = "delta"
    POP = "pop"
    REVOLUTION = "revolution"
    UNKNOWN = "unknown"


class VmSupport(str, Enum):
    FULL = "full"
    LIMITED = "limited"
    NONE = "none"


class TemperatureType(str, Enum):
    QUAD_CORE = "quad_core"
    LEGACY = "legacy"


class BoxFlavor(str, Enum):
    """'full' boxes carry internal storage, 'light' ones rely on USB only."""
    FULL = "full"
    LIGHT = "light"


class ModelBaseCapabilities(BaseModel):
    """Static, per-family capability table entry.

    Defaults are those of the generic 'unknown' family so a partial table
    entry never leaves a field undefined.
    """
    model_config = {"protected_namespaces": ()}

    model: FreeboxModel = FreeboxModel.UNKNOWN
    wifi6ghz: bool = False
    wifi7: bool = False
    vm_support: VmSupport = VmSupport.NONE
    max_vms: int = 0
    max_vm_ram: int = 0  # GB
    temperature_type: TemperatureType = TemperatureType.LEGACY
    temperature_fields: list[str] = Field(default_factory=lambda: ["temp_cpum", "temp_sw", "temp_cpub"])
    has_internal_storage: bool = False
    max_ethernet_speed: int = 1000  # Mbps
    max_download_speed: int = 1000
    max_upload_speed: int = 600


class FreeboxCapabilities(ModelBaseCapabilities):
    """Full capability record: static table overlaid with runtime observations."""
    model_name: str = "Freebox"
    box_flavor: BoxFlavor = BoxFlavor.LIGHT
    simulated: bool = False


class FeatureSummary(BaseModel):
    """Simplified feature availability for quick UI checks."""
    model_config = {"protected_namespaces": ()}

    model: FreeboxModel
    model_name: str
    vm: bool
    vm_full: bool
    vm_limited: bool
    max_vms: int
    wifi6ghz: bool
    internal_storage: bool
    max_ethernet_speed: int
