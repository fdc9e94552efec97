"""Request/response correlation over the Lightroom websocket.

Every outgoing request gets a fresh identifier and an entry in the pending
table. The entry leaves the table exactly once: when a response carrying the
same ``requestId`` arrives, or when the timeout fires first. Anything that
turns up for an identifier no longer in the table is ignored.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Sequence

from .errors import RemoteError, RequestTimeoutError

LOGGER = logging.getLogger(__name__)

TransmitType = Callable[[dict[str, Any]], Awaitable[None]]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


SchedulerType = Callable[..., TimerHandle]


@dataclass(slots=True)
class PendingRequest:
    request_id: str
    method: str
    future: asyncio.Future[Any]
    created_at: float
    timeout_handle: Optional[TimerHandle] = None


class RequestCorrelator:
    """Turns websocket request/response traffic into awaitable calls."""

    def __init__(
        self,
        transmit: TransmitType,
        *,
        timeout: float = 10.0,
        scheduler: Optional[SchedulerType] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._transmit = transmit
        self.timeout = timeout
        self._scheduler = scheduler
        self._id_factory = id_factory
        self._pending: dict[str, PendingRequest] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, request_id: str) -> bool:
        return request_id in self._pending

    async def send_request(
        self,
        method: str,
        params: Sequence[Any] = (),
        *,
        object_handle: Optional[str] = None,
    ) -> Any:
        """Send ``method`` and wait for its response payload.

        Raises:
            RemoteError: Lightroom answered with ``success: false``.
            RequestTimeoutError: No answer arrived within ``timeout`` seconds.
        """

        loop = asyncio.get_running_loop()
        request_id = self._new_request_id()
        future: asyncio.Future[Any] = loop.create_future()
        entry = PendingRequest(
            request_id=request_id,
            method=method,
            future=future,
            created_at=time.monotonic(),
        )
        self._pending[request_id] = entry

        envelope = {
            "requestId": request_id,
            "object": object_handle,
            "message": method,
            "params": list(params),
        }

        try:
            await self._transmit(envelope)
            if self._pending.get(request_id) is entry:
                schedule = self._scheduler or loop.call_later
                entry.timeout_handle = schedule(self.timeout, self._expire, request_id)
            LOGGER.debug("Sent %s (requestId=%s)", method, request_id)
            return await future
        finally:
            # Covers transmit failures and cancelled callers.
            if self._pending.get(request_id) is entry:
                self._discard(request_id)

    def resolve(self, envelope: Mapping[str, Any]) -> bool:
        """Complete the pending request named by ``envelope["requestId"]``.

        Returns ``False`` when the identifier is unknown, which covers late
        responses to requests that already timed out.
        """

        request_id = envelope.get("requestId")
        if not isinstance(request_id, str):
            return False

        entry = self._discard(request_id)
        if entry is None:
            LOGGER.debug("Ignoring response for unknown requestId=%s", request_id)
            return False

        if entry.future.done():
            return True

        if envelope.get("success"):
            entry.future.set_result(envelope.get("response"))
        else:
            error = envelope.get("error") or "Request failed"
            entry.future.set_exception(
                RemoteError(str(error), request_id=request_id, method=entry.method)
            )
        return True

    def _expire(self, request_id: str) -> None:
        entry = self._pending.pop(request_id, None)
        if entry is None:
            return

        elapsed = time.monotonic() - entry.created_at
        LOGGER.warning(
            "Lightroom request %s timed out after %.1fs (requestId=%s)",
            entry.method,
            elapsed,
            request_id,
        )
        if not entry.future.done():
            entry.future.set_exception(
                RequestTimeoutError(
                    f"Request {entry.method!r} timed out after {self.timeout:.1f}s",
                    request_id=request_id,
                    method=entry.method,
                )
            )

    def _discard(self, request_id: str) -> Optional[PendingRequest]:
        entry = self._pending.pop(request_id, None)
        if entry is not None and entry.timeout_handle is not None:
            entry.timeout_handle.cancel()
        return entry

    def _new_request_id(self) -> str:
        request_id = self._id_factory()
        while request_id in self._pending:
            request_id = self._id_factory()
        return request_id
