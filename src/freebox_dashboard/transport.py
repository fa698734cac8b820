"""HTTP transport to the Freebox API.

Handles URL construction, JSON encoding, the request timeout, and folds
transport failures into the appliance's {success, result, error_code, msg}
envelope.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from freebox_dashboard.models.api import ApiResponse

logger = logging.getLogger(__name__)


# Session header mandated by the Freebox OS API
AUTH_HEADER = "X-Fbx-App-Auth"

API_VERSION_PATH = "/api_version"

# Endpoint families still served under an older API revision
VERSION_OVERRIDES: dict[str, str] = {
    "/wifi": "v2",
}


class FreeboxTransport:
    """Async HTTP transport bound to a single Freebox.

    The Freebox serves a self-signed certificate, so certificate
    verification is disabled on this client only.
    """

    def __init__(
        self,
        base_url: str,
        api_version: str = "v4",
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_version = api_version
        self._timeout = timeout
        self._http = http or httpx.AsyncClient(timeout=timeout, verify=False)

    @property
    def base_url(self) -> str:
        return self._base_url

    @base_url.setter
    def base_url(self, url: str) -> None:
        """Switch between mafreebox.freebox.fr and the LAN address."""
        self._base_url = url.rstrip("/")

    @property
    def timeout(self) -> float:
        return self._timeout

    def build_url(self, endpoint: str) -> str:
        """Build the full API URL, honoring per-family version overrides."""
        version = self._api_version
        for prefix, override in VERSION_OVERRIDES.items():
            if endpoint.startswith(prefix):
                version = override
                break
        return f"{self._base_url}/api/{version}{endpoint}"

    async def request(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        session_token: str | None = None,
    ) -> ApiResponse:
        """Send one request; never raises for network or decoding failures."""
        url = self.build_url(endpoint)
        headers = {"Content-Type": "application/json"}
        if session_token:
            headers[AUTH_HEADER] = session_token

        try:
            response = await asyncio.wait_for(
                self._http.request(method, url, headers=headers, json=body),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Request timed out after %.1fs: %s %s", self._timeout, method, url)
            return ApiResponse.failure("request_failed", f"Request timed out after {self._timeout:g}s")
        except httpx.HTTPError as e:
            logger.warning("Request failed: %s %s: %s", method, url, e)
            return ApiResponse.failure("request_failed", str(e) or type(e).__name__)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            logger.warning(
                "Non-JSON response: %s %s (%s): %s",
                method, url, response.status_code, response.text[:200],
            )
            return ApiResponse.failure(
                "invalid_response",
                f"API returned non-JSON response ({response.status_code})",
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("Undecodable JSON from %s %s: %s", method, url, e)
            return ApiResponse.failure("request_failed", f"Malformed JSON response: {e}")

        if not isinstance(data, dict):
            return ApiResponse.failure("invalid_response", "API returned an unexpected payload")

        try:
            return ApiResponse(
                success=bool(data.get("success")),
                result=data.get("result"),
                error_code=data.get("error_code"),
                msg=data.get("msg"),
            )
        except ValidationError as e:
            logger.warning("Malformed envelope from %s %s: %s", method, url, e)
            return ApiResponse.failure("invalid_response", "API returned a malformed response envelope")

    async def get_api_version(self) -> ApiResponse:
        """Fetch /api_version (unauthenticated, not wrapped in an envelope)."""
        url = f"{self._base_url}{API_VERSION_PATH}"
        try:
            response = await asyncio.wait_for(self._http.get(url), timeout=self._timeout)
            data = response.json()
        except (asyncio.TimeoutError, httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to get API version from %s: %s", url, e)
            return ApiResponse.failure("request_failed", "Failed to get API version")

        if not isinstance(data, dict):
            return ApiResponse.failure("invalid_response", "API version payload is not an object")
        return ApiResponse(success=True, result=data)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
