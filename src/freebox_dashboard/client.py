"""Request façade for the Freebox API.

Every dashboard call goes through FreeboxClient.call(), which attaches the
session token and returns a normalized ApiResponse instead of raising.
"""

from __future__ import annotations

import logging
from typing import Any

from freebox_dashboard.auth import AuthManager
from freebox_dashboard.models.api import ApiResponse
from freebox_dashboard.transport import FreeboxTransport

logger = logging.getLogger(__name__)


# Error codes meaning the Freebox no longer accepts our session token
SESSION_EXPIRED_CODES = frozenset({"auth_required", "invalid_session"})


class FreeboxClient:
    """Authenticated access to the Freebox API."""

    def __init__(self, auth: AuthManager, transport: FreeboxTransport) -> None:
        self._auth = auth
        self._transport = transport

    async def call(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        authenticated: bool = True,
    ) -> ApiResponse:
        """Make an API call.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            endpoint: API path below /api/vN (e.g. "/system/").
            body: JSON request body.
            authenticated: Attach the session token. Fails locally, without
                any request, when there is no session.

        Returns:
            The normalized response; failures carry error_code and msg.
        """
        session_token = None
        if authenticated:
            session_token = self._auth.session_token
            if not session_token:
                return ApiResponse.failure("auth_required", "Not logged in")

        response = await self._transport.request(
            method.upper(), endpoint, body=body, session_token=session_token
        )

        if authenticated and not response.success and response.error_code in SESSION_EXPIRED_CODES:
            logger.warning("Session rejected by the Freebox (%s)", response.error_code)
            self._auth.invalidate_session()

        return response

    async def get(self, endpoint: str, **kwargs: Any) -> ApiResponse:
        """Convenience method for GET requests."""
        return await self.call("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        """Convenience method for POST requests."""
        return await self.call("POST", endpoint, body, **kwargs)

    async def put(self, endpoint: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        """Convenience method for PUT requests."""
        return await self.call("PUT", endpoint, body, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> ApiResponse:
        """Convenience method for DELETE requests."""
        return await self.call("DELETE", endpoint, **kwargs)
