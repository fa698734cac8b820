"""Error types and structured error output."""

from __future__ import annotations

import json
import sys
from enum import Enum

from rich.console import Console

console = Console(stderr=True)


class FreeboxError(Exception):
    """Base class for errors raised by the dashboard core."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class StateError(FreeboxError):
    """Operation attempted in the wrong session state. Raised before any I/O."""


class NotRegisteredError(StateError):
    def __init__(self, message: str = "App not registered. Please register first.") -> None:
        super().__init__(message, "not_registered")


class RegistrationError(FreeboxError):
    """The Freebox rejected an authorization request or status poll."""


class AuthorizationError(FreeboxError):
    """Registration ended without a grant (denied, timed out, or polling gave up)."""


class LoginError(FreeboxError):
    """Session opening failed at one of its steps."""


class FailureKind(str, Enum):
    """What a user can do about a failure."""
    REREGISTER = "reregister"
    UNSUPPORTED = "unsupported"
    TRANSIENT = "transient"
    SESSION = "session"
    OTHER = "other"


_FAILURE_KINDS: dict[str, FailureKind] = {
    "insufficient_rights": FailureKind.REREGISTER,
    "invalid_token": FailureKind.REREGISTER,
    "pending_token": FailureKind.REREGISTER,
    "not_registered": FailureKind.REREGISTER,
    "denied": FailureKind.REREGISTER,
    "timeout": FailureKind.REREGISTER,
    "vm_not_supported": FailureKind.UNSUPPORTED,
    "vm_limit_reached": FailureKind.UNSUPPORTED,
    "wps_disabled": FailureKind.UNSUPPORTED,
    "nodev": FailureKind.UNSUPPORTED,
    "request_failed": FailureKind.TRANSIENT,
    "invalid_response": FailureKind.TRANSIENT,
    "ratelimited": FailureKind.TRANSIENT,
    "internal_error": FailureKind.TRANSIENT,
    "auth_required": FailureKind.SESSION,
    "invalid_session": FailureKind.SESSION,
}

_HINTS: dict[FailureKind, str] = {
    FailureKind.REREGISTER: "Re-register the app (`freebox-dashboard auth register`) and grant the missing rights in Freebox OS",
    FailureKind.UNSUPPORTED: "This feature is not available on the detected Freebox model",
    FailureKind.TRANSIENT: "Freebox unreachable or busy, check the network and retry",
    FailureKind.SESSION: "Session missing or expired, run `freebox-dashboard auth login`",
}


def classify_failure(error_code: str | None) -> FailureKind:
    """Map a Freebox (or transport) error code to a recovery action."""
    if not error_code:
        return FailureKind.OTHER
    return _FAILURE_KINDS.get(error_code, FailureKind.OTHER)


def get_hint(error_code: str | None) -> str | None:
    return _HINTS.get(classify_failure(error_code))


def handle_error(error: Exception) -> None:
    """Handle an error with structured output to stdout and human-readable output to stderr.

    Outputs a JSON error object to stdout for scripted consumers:
    {"error": true, "code": "LOGIN_ERROR", "message": "...", "hint": "..."}
    """
    message = str(error)
    error_code = getattr(error, "error_code", None)
    hint = get_hint(error_code)

    if isinstance(error, StateError):
        code = "STATE_ERROR"
    elif isinstance(error, (RegistrationError, AuthorizationError)):
        code = "REGISTRATION_ERROR"
    elif isinstance(error, LoginError):
        code = "LOGIN_ERROR"
    else:
        code = "RUNTIME_ERROR"

    error_obj: dict[str, object] = {
        "error": True,
        "code": code,
        "message": message,
    }
    if error_code:
        error_obj["error_code"] = error_code
    if hint:
        error_obj["hint"] = hint

    json.dump(error_obj, sys.stdout)
    sys.stdout.write("\n")

    console.print(f"[red]Error:[/red] {message}")
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")


def response_error(response: object) -> FreeboxError:
    """Wrap a failed ApiResponse so it can go through handle_error()."""
    error_code = getattr(response, "error_code", None)
    message = getattr(response, "msg", None) or error_code or "Freebox request failed"
    return FreeboxError(message, error_code)
