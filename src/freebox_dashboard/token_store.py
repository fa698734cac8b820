"""Durable storage for the Freebox app token."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from freebox_dashboard.models.auth import StoredToken

logger = logging.getLogger(__name__)


class TokenStore:
    """Reads and writes the app token as a small JSON document.

    Writes go through a temp file in the same directory followed by an
    atomic rename, so load() never sees a half-written file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str | None:
        """Return the persisted token, or None if missing or unreadable."""
        if not self._path.exists():
            logger.info("No token file at %s, registration required", self._path)
            return None

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            token = StoredToken.model_validate(data).app_token
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable token file %s: %s", self._path, e)
            return None

        if not token:
            logger.warning("Token file %s holds an empty token", self._path)
            return None

        logger.info("Loaded app token from %s", self._path)
        return token

    def save(self, token: str) -> None:
        """Persist the token; durable once this returns."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = StoredToken(app_token=token).model_dump(by_alias=True)

        fd, tmp_name = tempfile.mkstemp(prefix=".token-", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Saved app token to %s", self._path)

    def clear(self) -> None:
        """Forget the persisted token."""
        self._path.unlink(missing_ok=True)
