"""Auth-related data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from freebox_dashboard.models.capabilities import FreeboxCapabilities


class RegistrationState(str, Enum):
    """Progress of an app registration, as reported by the Freebox."""
    UNKNOWN = "unknown"
    PENDING = "pending"
    TIMEOUT = "timeout"
    GRANTED = "granted"
    DENIED = "denied"


class AuthState(str, Enum):
    """Where the session manager stands in the trust-establishment protocol."""
    UNREGISTERED = "unregistered"
    PENDING_APPROVAL = "pending_approval"
    DENIED = "denied"
    TIMED_OUT = "timed_out"
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


class StoredToken(BaseModel):
    """On-disk layout of the persisted app token."""
    app_token: str = Field(alias="appToken")

    model_config = {"populate_by_name": True}


class RegistrationResult(BaseModel):
    """Result of /login/authorize/."""
    track_id: int
    app_token: str


class AuthorizationStatus(BaseModel):
    """Result of /login/authorize/{track_id}."""
    status: RegistrationState = RegistrationState.UNKNOWN
    challenge: str | None = None


class SessionInfo(BaseModel):
    """Result of a successful /login/session/ exchange."""
    session_token: str
    challenge: str = ""
    permissions: dict[str, bool] = Field(default_factory=dict)


class SessionStatus(BaseModel):
    """Snapshot of the session manager's in-memory state."""
    state: AuthState
    is_registered: bool
    is_logged_in: bool
    permissions: dict[str, bool] = Field(default_factory=dict)


class LoginSummary(BaseModel):
    """What a dashboard login reports back."""
    permissions: dict[str, bool] = Field(default_factory=dict)
    capabilities: FreeboxCapabilities


class DashboardStatus(BaseModel):
    """Registration, session and capability overview."""
    is_registered: bool
    is_logged_in: bool
    permissions: dict[str, bool] = Field(default_factory=dict)
    capabilities: FreeboxCapabilities | None = None
