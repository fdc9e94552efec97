"""Core primitives for lightroom-midi."""

from .api import LightroomApi
from .correlator import PendingRequest, RequestCorrelator
from .errors import (
    LightroomConnectionError,
    LightroomError,
    MalformedMessageError,
    MidiDeviceError,
    NotConnectedError,
    ProfileError,
    ProfileNotFoundError,
    RegistrationError,
    RemoteError,
    RequestError,
    RequestTimeoutError,
    UnknownActionError,
    UnknownCommandError,
)
from .models import MidiEvent
from .observers import ObserverRegistration, ObserverRegistry
from .protocols import (
    DeviceStateCallback,
    EventCallback,
    LightroomTransport,
    ObserverCallback,
)
from .transform import ScaleRange, scale_value

__all__ = [
    "DeviceStateCallback",
    "EventCallback",
    "LightroomApi",
    "LightroomConnectionError",
    "LightroomError",
    "LightroomTransport",
    "MalformedMessageError",
    "MidiDeviceError",
    "MidiEvent",
    "NotConnectedError",
    "ObserverCallback",
    "ObserverRegistration",
    "ObserverRegistry",
    "PendingRequest",
    "ProfileError",
    "ProfileNotFoundError",
    "RegistrationError",
    "RemoteError",
    "RequestCorrelator",
    "RequestError",
    "RequestTimeoutError",
    "ScaleRange",
    "UnknownActionError",
    "UnknownCommandError",
    "scale_value",
]
