"""
adapters.cli.session - Local token cache for the CLI.

A login token is stored in ~/.cosmo-cli-token.json (overridable with
TOKEN_CACHE_PATH) together with the backend URL it was issued for and its
expiry, so the user stays logged in between CLI invocations without
re-entering their password every time.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Refresh slightly before the backend would reject the token.
EXPIRY_MARGIN_SECONDS = 60


@dataclass
class CachedToken:
    access_token: str
    base_url: str
    expires_at: float

    def is_valid_for(self, base_url: str, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return (
            self.base_url.rstrip("/") == base_url.rstrip("/")
            and self.expires_at - EXPIRY_MARGIN_SECONDS > now
        )


class FileCredentialStore:
    """JSON token cache readable only by the current user.

    Implements CredentialStore (structural typing — no explicit inheritance).
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self, base_url: str) -> Optional[str]:
        """Return the cached token for base_url, or None if absent or expired."""
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            cached = CachedToken(
                access_token=data["access_token"],
                base_url=data["base_url"],
                expires_at=float(data["expires_at"]),
            )
        except Exception as e:
            logger.warning("Ignoring unreadable token cache %s: %s", self._path, e)
            return None
        if not cached.is_valid_for(base_url):
            logger.info("Cached token is expired or for another backend")
            return None
        return cached.access_token

    def save(self, token: str, base_url: str, expires_in: int) -> None:
        cached = CachedToken(
            access_token=token,
            base_url=base_url.rstrip("/"),
            expires_at=time.time() + expires_in,
        )
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(asdict(cached), indent=2), encoding="utf-8")
        try:
            os.chmod(self._path, 0o600)
        except OSError as e:
            logger.warning("Could not restrict permissions on %s: %s", self._path, e)

    def clear(self) -> bool:
        """Delete the cache. Returns True if a file was removed."""
        if not self._path.exists():
            return False
        self._path.unlink()
        return True
