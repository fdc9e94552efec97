"""Adapter modules for external integrations."""

from .lightroom import ConnectionState, LightroomClient
from .midi import MidiInput, list_input_ports, parse_midi_message, select_port

__all__ = [
    "ConnectionState",
    "LightroomClient",
    "MidiInput",
    "list_input_ports",
    "parse_midi_message",
    "select_port",
]
