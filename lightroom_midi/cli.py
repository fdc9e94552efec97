"""Command-line interface for lightroom-midi."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .adapters import LightroomClient, MidiInput
from .app import LightroomMidiApp
from .config import ControllerConfig, load_config
from .core import LightroomError, MidiDeviceError, MidiEvent
from .identity import IdentityStore
from .logging import configure_logging
from .profiles import suggest_mapping

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lightroom-midi",
        description="Control Lightroom Classic from a MIDI control surface",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("start", help="Start routing MIDI events to Lightroom")

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    subparsers.add_parser(
        "learn", help="Print a suggested profile mapping for each incoming MIDI event"
    )

    subparsers.add_parser(
        "parameters", help="List Lightroom develop parameters with ranges and defaults"
    )

    return parser


def format_learned_event(event: MidiEvent) -> Optional[str]:
    """Render a learned event and its suggested mapping, or ``None`` to skip it."""

    mapping = suggest_mapping(event)
    if mapping is None:
        if event.type == "program":
            return f"Type: program\nChannel: {event.channel}\nProgram: {event.number}"
        return None

    lines = [f"Type: {event.type}", f"Channel: {event.channel}"]
    if event.type == "cc":
        lines += [f"Controller: {event.controller}", f"Value: {event.value}"]
    else:
        lines += [f"Note: {event.note}", f"Velocity: {event.velocity}"]
    lines += ["", "JSON mapping:", json.dumps(mapping, indent=2)]
    return "\n".join(lines)


async def _learn(config: ControllerConfig) -> int:
    midi_input = MidiInput(
        config.midi.device, preferred_match=config.midi.preferred_match
    )
    queue: asyncio.Queue[MidiEvent] = asyncio.Queue()

    try:
        port_name = midi_input.start(queue.put_nowait)
    except MidiDeviceError as exc:
        LOGGER.error("Failed to connect to MIDI device: %s", exc)
        return 1

    print(f"Listening on {port_name}; press buttons or move controls (Ctrl+C to exit)")
    try:
        while True:
            event = await queue.get()
            text = format_learned_event(event)
            if text:
                print("-" * 40)
                print(text)
    finally:
        midi_input.close()


async def _list_parameters(config: ControllerConfig) -> int:
    client = LightroomClient(
        config.lightroom, identity_store=IdentityStore(config.identity.path)
    )
    try:
        await client.connect()
        names = await client.get_parameter_names() or []
        print(f"Found {len(names)} parameters\n")

        for name in names:
            try:
                low, high, precision, small_step, large_step = await client.get_range(name)
                default = await client.get_default(name)
                label = await client.get_label(name)
                kind = await client.get_parameter_type(name)
            except (LightroomError, TypeError, ValueError) as exc:
                print(f"Parameter: {name}\n  Error: {exc}\n")
                continue

            print(f"Parameter: {name}")
            print(f"  Label: {label}")
            print(f"  Type: {kind}")
            print(f"  Range: {low} to {high}")
            print(f"  Precision: {precision} decimal places")
            print(f"  Default: {default}")
            print(f"  Increments: {small_step} (small), {large_step} (large)\n")
    except LightroomError as exc:
        LOGGER.error("Failed to list parameters: %s", exc)
        return 1
    finally:
        await client.aclose()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    if args.command == "start":
        return LightroomMidiApp.start(config)

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    configure_logging(config.logging.level, log_network=config.logging.log_network)

    if args.command == "learn":
        try:
            return asyncio.run(_learn(config))
        except KeyboardInterrupt:
            return 0

    if args.command == "parameters":
        return asyncio.run(_list_parameters(config))

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
