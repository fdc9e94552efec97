"""Routing of Lightroom push notifications to standing observers."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from .protocols import ObserverCallback

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ObserverRegistration:
    observer_id: str
    callback: ObserverCallback


class ObserverRegistry:
    """Keeps observer callbacks until they are explicitly unregistered."""

    def __init__(self) -> None:
        self._observers: dict[str, ObserverRegistration] = {}

    def __len__(self) -> int:
        return len(self._observers)

    def __contains__(self, observer_id: object) -> bool:
        return observer_id in self._observers

    def register(
        self, callback: ObserverCallback, observer_id: Optional[str] = None
    ) -> str:
        observer_id = observer_id or str(uuid.uuid4())
        if observer_id in self._observers:
            raise ValueError(f"Observer already registered: {observer_id}")
        self._observers[observer_id] = ObserverRegistration(observer_id, callback)
        return observer_id

    def unregister(self, observer_id: str) -> bool:
        return self._observers.pop(observer_id, None) is not None

    async def dispatch(self, observer_id: str, data: Any) -> bool:
        registration = self._observers.get(observer_id)
        if registration is None:
            LOGGER.debug("Dropping push for unknown observerId=%s", observer_id)
            return False

        try:
            result = registration.callback(data)
            if asyncio.iscoroutine(result):
                await result
        except Exception:
            LOGGER.exception("Observer %s callback failed", observer_id)
        return True
