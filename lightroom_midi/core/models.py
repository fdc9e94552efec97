"""Shared data models."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional

NOTE_EVENT_TYPES = frozenset({"noteon", "noteoff"})
CONTROL_CHANGE_EVENT = "cc"


@dataclass(frozen=True, slots=True)
class MidiEvent:
    """A single control surface event as delivered by the MIDI input."""

    type: str
    channel: int
    note: Optional[int] = None
    controller: Optional[int] = None
    velocity: Optional[int] = None
    value: Optional[int] = None
    number: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def data_value(self) -> int:
        """Continuous value of the event, falling back to note velocity."""
        if self.value is not None:
            return self.value
        if self.velocity is not None:
            return self.velocity
        return 0

    def __str__(self) -> str:
        if self.type in NOTE_EVENT_TYPES:
            return f"{self.type} ch={self.channel} note={self.note} vel={self.velocity}"
        if self.type == CONTROL_CHANGE_EVENT:
            return f"cc ch={self.channel} cc={self.controller} val={self.value}"
        if self.type == "program":
            return f"program ch={self.channel} prog={self.number}"
        return f"{self.type} ch={self.channel} val={self.value}"
