"""Protocol definitions for Lightroom transports and callbacks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, Sequence

if TYPE_CHECKING:
    from .models import MidiEvent


ObserverCallback = Callable[[Any], Awaitable[None] | None]
EventCallback = Callable[["MidiEvent"], None]
DeviceStateCallback = Callable[[bool, str], None]


class LightroomTransport(Protocol):
    """Minimal contract for anything that can deliver a Lightroom request."""

    async def send(self, message: str, params: Sequence[Any] = ()) -> Any:
        """Send ``message`` and return the response payload.

        Raises:
            NotConnectedError: If the session is not registered.
            RemoteError: If Lightroom rejected the request.
            RequestTimeoutError: If no response arrived in time.
        """
        ...
