"""Freebox app authentication.

Handles app registration, the challenge/HMAC session login, and session
state tracking.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
import time

from pydantic import ValidationError

from freebox_dashboard.config import AppIdentity
from freebox_dashboard.models.api import ApiResponse
from freebox_dashboard.models.auth import (
    AuthorizationStatus,
    AuthState,
    RegistrationResult,
    RegistrationState,
    SessionInfo,
    SessionStatus,
)
from freebox_dashboard.token_store import TokenStore
from freebox_dashboard.transport import FreeboxTransport
from freebox_dashboard.utils.errors import (
    AuthorizationError,
    LoginError,
    NotRegisteredError,
    RegistrationError,
)

logger = logging.getLogger(__name__)


LOGIN = "/login/"
LOGIN_AUTHORIZE = "/login/authorize/"
LOGIN_SESSION = "/login/session/"
LOGIN_LOGOUT = "/login/logout/"

_STATE_AFTER_POLL = {
    RegistrationState.PENDING: AuthState.PENDING_APPROVAL,
    RegistrationState.GRANTED: AuthState.LOGGED_OUT,
    RegistrationState.DENIED: AuthState.DENIED,
    RegistrationState.TIMEOUT: AuthState.TIMED_OUT,
}


def compute_password(app_token: str, challenge: str) -> str:
    """Session password: hex HMAC-SHA1 of the challenge keyed by the app token."""
    return hmac.new(app_token.encode(), challenge.encode(), hashlib.sha1).hexdigest()


def _failure_message(response: ApiResponse, default: str) -> str:
    return response.msg or response.error_code or default


class AuthManager:
    """Owns the app token, the session token and its permissions."""

    def __init__(
        self,
        transport: FreeboxTransport,
        token_store: TokenStore,
        identity: AppIdentity | None = None,
    ) -> None:
        self._transport = transport
        self._store = token_store
        self._identity = identity or AppIdentity()
        self._app_token: str | None = token_store.load()
        self._session_token: str | None = None
        self._challenge: str | None = None
        self._permissions: dict[str, bool] = {}
        self._state = AuthState.LOGGED_OUT if self._app_token else AuthState.UNREGISTERED
        self._login_lock = asyncio.Lock()

    # ── Registration ────────────────────────────────────────────────

    async def register(self) -> RegistrationResult:
        """Ask the Freebox for an app token.

        The user must then confirm on the box itself; poll check_status()
        with the returned track id. The token is persisted right away so a
        crash during approval does not lose it.

        Raises:
            RegistrationError: If the Freebox rejects the request.
        """
        response = await self._transport.request(
            "POST",
            LOGIN_AUTHORIZE,
            body={
                "app_id": self._identity.app_id,
                "app_name": self._identity.app_name,
                "app_version": self._identity.app_version,
                "device_name": self._identity.device_name,
            },
        )
        if not response.success or not isinstance(response.result, dict):
            raise RegistrationError(
                _failure_message(response, "Registration failed"), response.error_code
            )

        try:
            result = RegistrationResult.model_validate(response.result)
        except ValidationError as e:
            raise RegistrationError(f"Unexpected registration response: {e}", "invalid_response") from e
        self._store.save(result.app_token)
        self._app_token = result.app_token
        self._session_token = None
        self._permissions = {}
        self._state = AuthState.PENDING_APPROVAL
        logger.info("Registration requested, track id %s", result.track_id)
        return result

    async def check_status(self, track_id: int) -> AuthorizationStatus:
        """Poll the progress of a registration."""
        response = await self._transport.request("GET", f"{LOGIN_AUTHORIZE}{track_id}")
        if not response.success or not isinstance(response.result, dict):
            raise RegistrationError(
                _failure_message(response, "Failed to check registration status"),
                response.error_code,
            )

        try:
            status = AuthorizationStatus.model_validate(response.result)
        except ValidationError as e:
            raise RegistrationError(f"Unexpected registration status: {e}", "invalid_response") from e
        if status.challenge:
            self._challenge = status.challenge
        if status.status in _STATE_AFTER_POLL:
            self._state = _STATE_AFTER_POLL[status.status]
        return status

    async def wait_for_authorization(
        self,
        track_id: int,
        interval: float = 1.0,
        timeout: float = 120.0,
    ) -> AuthorizationStatus:
        """Poll check_status() until the registration is granted.

        Each poll starts only after the previous one returned.

        Raises:
            AuthorizationError: If the user denies the app, the box times the
                request out, or `timeout` seconds elapse first.
        """
        deadline = time.monotonic() + timeout
        while True:
            status = await self.check_status(track_id)
            if status.status == RegistrationState.GRANTED:
                logger.info("Registration %s granted", track_id)
                return status
            if status.status == RegistrationState.DENIED:
                raise AuthorizationError("Registration denied on the Freebox", "denied")
            if status.status == RegistrationState.TIMEOUT:
                raise AuthorizationError("Registration not confirmed in time on the Freebox", "timeout")
            if time.monotonic() + interval > deadline:
                raise AuthorizationError(
                    f"Gave up waiting for registration {track_id} after {timeout:g}s",
                    "timeout",
                )
            await asyncio.sleep(interval)

    # ── Session ─────────────────────────────────────────────────────

    async def get_challenge(self) -> str:
        """Fetch a fresh login challenge."""
        response = await self._transport.request("GET", LOGIN)
        challenge = response.result.get("challenge") if isinstance(response.result, dict) else None
        if not response.success or not challenge:
            raise LoginError(
                _failure_message(response, "Failed to get challenge"), response.error_code
            )
        self._challenge = challenge
        return challenge

    async def login(self) -> SessionInfo:
        """Open a session.

        Raises:
            NotRegisteredError: No app token; raised before any request.
            LoginError: The challenge fetch or the session exchange failed.
        """
        if not self._app_token:
            raise NotRegisteredError()

        async with self._login_lock:
            challenge = await self.get_challenge()
            password = compute_password(self._app_token, challenge)

            response = await self._transport.request(
                "POST",
                LOGIN_SESSION,
                body={
                    "app_id": self._identity.app_id,
                    "app_version": self._identity.app_version,
                    "password": password,
                },
            )
            if not response.success or not isinstance(response.result, dict):
                raise LoginError(_failure_message(response, "Login failed"), response.error_code)

            try:
                session = SessionInfo.model_validate(response.result)
            except ValidationError as e:
                raise LoginError(f"Unexpected session response: {e}", "invalid_response") from e
            self._session_token = session.session_token
            self._challenge = session.challenge or None
            self._permissions = dict(session.permissions)
            self._state = AuthState.LOGGED_IN

        logger.info("Login successful")
        return session

    async def logout(self) -> None:
        """Close the session. Local state is cleared even if the call fails."""
        if not self._session_token:
            return

        response = await self._transport.request(
            "POST", LOGIN_LOGOUT, session_token=self._session_token
        )
        if not response.success:
            logger.warning("Logout call failed (%s), clearing session anyway", response.error_code)
        self.invalidate_session()
        logger.info("Logged out")

    async def check_session(self) -> bool:
        """Return True if the Freebox still accepts the session token."""
        if not self._session_token:
            return False
        try:
            response = await self._transport.request(
                "GET", LOGIN, session_token=self._session_token
            )
        except Exception as e:
            logger.warning("Session check failed: %s", e)
            return False
        return (
            response.success
            and isinstance(response.result, dict)
            and response.result.get("logged_in") is True
        )

    def invalidate_session(self) -> None:
        """Drop the in-memory session (logout or expiry)."""
        self._session_token = None
        self._permissions = {}
        if self._app_token:
            self._state = AuthState.LOGGED_OUT

    # ── Accessors ───────────────────────────────────────────────────

    @property
    def session_token(self) -> str | None:
        return self._session_token

    @property
    def state(self) -> AuthState:
        return self._state

    def is_registered(self) -> bool:
        return self._app_token is not None

    def is_logged_in(self) -> bool:
        return self._session_token is not None

    def get_permissions(self) -> dict[str, bool]:
        return dict(self._permissions)

    def get_status(self) -> SessionStatus:
        """Get the current session status."""
        return SessionStatus(
            state=self._state,
            is_registered=self.is_registered(),
            is_logged_in=self.is_logged_in(),
            permissions=self.get_permissions(),
        )
