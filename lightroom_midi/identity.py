"""Persistence of the client GUID Lightroom issues on first registration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .constants import DEFAULT_IDENTITY_PATH

LOGGER = logging.getLogger(__name__)


class IdentityStore:
    """Stores the opaque identity token as plain text.

    A missing file is the normal first-run case and yields ``None``.
    """

    def __init__(self, path: Path = DEFAULT_IDENTITY_PATH) -> None:
        self.path = Path(path).expanduser()
        self._cached: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self._cached

    def load(self) -> Optional[str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self._cached = None
            return None
        except OSError as exc:
            LOGGER.warning("Could not load client identity from %s: %s", self.path, exc)
            self._cached = None
            return None

        token = raw.strip() or None
        self._cached = token
        return token

    def save(self, token: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(token, encoding="utf-8")
        except OSError as exc:
            LOGGER.error("Could not save client identity to %s: %s", self.path, exc)
            raise
        self._cached = token
        LOGGER.info("Stored Lightroom client identity at %s", self.path)
