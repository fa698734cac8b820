"""Response envelope shared by every Freebox call."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Normalized Freebox response.

    The appliance wraps every answer as {success, result, error_code, msg};
    transport failures are folded into the same shape.
    """
    success: bool
    result: Any = None
    error_code: str | None = None
    msg: str | None = None

    @classmethod
    def failure(cls, error_code: str, msg: str | None = None) -> "ApiResponse":
        return cls(success=False, error_code=error_code, msg=msg)
