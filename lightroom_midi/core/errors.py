"""Exception hierarchy shared by the transport and dispatch layers."""

from __future__ import annotations

from typing import Optional


class LightroomError(RuntimeError):
    """Base class for errors raised by lightroom-midi."""


class LightroomConnectionError(LightroomError, ConnectionError):
    """Raised when the websocket channel cannot be opened or fails."""


class RegistrationError(LightroomError):
    """Raised when Lightroom rejects or never answers the register request."""


class NotConnectedError(LightroomError):
    """Raised when a request is sent while the session is not connected."""


class RequestError(LightroomError):
    """Base class for errors tied to a single outstanding request."""

    def __init__(
        self,
        message: str,
        *,
        request_id: Optional[str] = None,
        method: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.request_id = request_id
        self.method = method


class RequestTimeoutError(RequestError, TimeoutError):
    """Raised when no response arrives within the request timeout."""


class RemoteError(RequestError):
    """Raised when Lightroom answers a request with ``success: false``."""


class MalformedMessageError(LightroomError):
    """Raised when an inbound frame is not a JSON object."""


class ProfileError(LightroomError):
    """Raised when a profile file cannot be parsed."""


class ProfileNotFoundError(LightroomError):
    """Raised when switching to a profile that was never loaded."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Profile not found: {name}")
        self.name = name


class UnknownActionError(LightroomError):
    """Raised when a mapping carries an action type with no executor."""


class UnknownCommandError(LightroomError):
    """Raised when a command action names a command that is not registered."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Unknown Lightroom command: {command}")
        self.command = command


class MidiDeviceError(LightroomError):
    """Raised when no usable MIDI input port can be opened."""
