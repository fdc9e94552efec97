"""MIDI input adapter built on mido.

mido delivers messages on its own backend thread; events are handed to the
asyncio loop with ``call_soon_threadsafe`` so the dispatcher only ever runs on
the loop thread.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

import mido

from ..core import DeviceStateCallback, EventCallback, MidiDeviceError, MidiEvent

LOGGER = logging.getLogger(__name__)

PITCH_OFFSET = 8192


def list_input_ports() -> list[str]:
    """List all available MIDI input ports."""
    return mido.get_input_names()


def parse_midi_message(msg: Any, *, timestamp: Optional[float] = None) -> Optional[MidiEvent]:
    """Convert a mido message into a :class:`MidiEvent`.

    Message types without a mapping counterpart (clock, sysex, ...) yield ``None``.
    """

    stamp = time.time() if timestamp is None else timestamp

    if msg.type == "note_on":
        return MidiEvent(
            type="noteon",
            channel=msg.channel,
            note=msg.note,
            velocity=msg.velocity,
            timestamp=stamp,
        )
    if msg.type == "note_off":
        return MidiEvent(
            type="noteoff",
            channel=msg.channel,
            note=msg.note,
            velocity=msg.velocity,
            timestamp=stamp,
        )
    if msg.type == "control_change":
        return MidiEvent(
            type="cc",
            channel=msg.channel,
            controller=msg.control,
            value=msg.value,
            timestamp=stamp,
        )
    if msg.type == "program_change":
        return MidiEvent(
            type="program",
            channel=msg.channel,
            number=msg.program,
            timestamp=stamp,
        )
    if msg.type == "pitchwheel":
        return MidiEvent(
            type="pitch",
            channel=msg.channel,
            value=msg.pitch + PITCH_OFFSET,
            timestamp=stamp,
        )
    return None


def select_port(
    available: list[str],
    device_name: Optional[str] = None,
    *,
    preferred_match: Optional[str] = None,
) -> str:
    """Pick the input port to open.

    An explicit ``device_name`` must be present. Otherwise the first port whose
    name contains ``preferred_match`` wins, falling back to the first port.
    """

    if not available:
        raise MidiDeviceError("No MIDI devices found")

    if device_name:
        if device_name not in available:
            raise MidiDeviceError(f"MIDI device not found: {device_name}")
        return device_name

    if preferred_match:
        for port_name in available:
            if preferred_match in port_name:
                return port_name

    return available[0]


class MidiInput:
    """A single MIDI input port feeding events to a callback on the loop."""

    def __init__(
        self,
        device_name: Optional[str] = None,
        *,
        preferred_match: Optional[str] = None,
    ) -> None:
        self.device_name = device_name
        self.preferred_match = preferred_match
        self._port: Optional[Any] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._callback: Optional[EventCallback] = None
        self._state_callbacks: list[DeviceStateCallback] = []

    @property
    def is_open(self) -> bool:
        return self._port is not None

    def register_state_callback(self, callback: DeviceStateCallback) -> None:
        """Register callback invoked with ``(connected, device_name)``."""
        self._state_callbacks.append(callback)

    def start(self, callback: EventCallback) -> str:
        """Open the port and deliver parsed events to ``callback``.

        Must be called from a running event loop; ``callback`` runs on that loop.

        Raises:
            MidiDeviceError: If no suitable port exists or it cannot be opened.
        """

        if self._port is not None:
            raise RuntimeError("MIDI input already started")

        port_name = select_port(
            list_input_ports(),
            self.device_name,
            preferred_match=self.preferred_match,
        )

        self._loop = asyncio.get_running_loop()
        self._callback = callback

        LOGGER.info("Connecting to MIDI device: %s", port_name)
        try:
            self._port = mido.open_input(port_name, callback=self._on_message)
        except (OSError, RuntimeError, ValueError) as exc:
            raise MidiDeviceError(f"Failed to open MIDI device {port_name}: {exc}") from exc

        self.device_name = port_name
        self._notify(True)
        return port_name

    def close(self) -> None:
        port = self._port
        if port is None:
            return

        self._port = None
        try:
            port.close()
        except Exception:  # pragma: no cover - backend specific
            LOGGER.warning("Failed to close MIDI port %s", self.device_name, exc_info=True)
        self._notify(False)
        LOGGER.info("MIDI device disconnected")

    def _on_message(self, msg: Any) -> None:
        # Runs on the mido backend thread.
        event = parse_midi_message(msg)
        loop = self._loop
        if event is None or loop is None or self._callback is None:
            return
        try:
            loop.call_soon_threadsafe(self._callback, event)
        except RuntimeError:
            # Loop already closed during shutdown.
            pass

    def _notify(self, connected: bool) -> None:
        for callback in list(self._state_callbacks):
            try:
                callback(connected, self.device_name or "")
            except Exception:
                LOGGER.warning("MIDI state callback failed", exc_info=True)
