"""Main application entry-point for lightroom-midi."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from .adapters import ConnectionState, LightroomClient, MidiInput
from .config import ControllerConfig, load_config
from .core import (
    LightroomConnectionError,
    MidiDeviceError,
    MidiEvent,
    RegistrationError,
)
from .dispatcher import MappingDispatcher
from .identity import IdentityStore
from .logging import configure_logging
from .profiles import load_profiles

LOGGER = logging.getLogger(__name__)


class LightroomMidiApp:
    """Coordinates application startup and shutdown.

    This class wires the MIDI input to the mapping dispatcher and the
    dispatcher to the Lightroom session. Events are queued as they arrive and
    processed one at a time, so calls that target the same parameter are never
    reordered.

    The client and MIDI input can be injected for testing.
    """

    def __init__(
        self,
        config: Optional[ControllerConfig] = None,
        *,
        client: Optional[LightroomClient] = None,
        midi_input: Optional[MidiInput] = None,
        identity_store: Optional[IdentityStore] = None,
    ) -> None:
        self._config = config or load_config()
        self._identity_store = identity_store or IdentityStore(self._config.identity.path)
        self._client = client or LightroomClient(
            self._config.lightroom, identity_store=self._identity_store
        )
        self._midi_input = midi_input or MidiInput(
            self._config.midi.device,
            preferred_match=self._config.midi.preferred_match,
        )
        self._dispatcher = MappingDispatcher(self._client)
        self._queue: Optional[asyncio.Queue[MidiEvent]] = None
        self._shutdown_event: Optional[asyncio.Event] = None
        self._consumer_task: Optional[asyncio.Task[None]] = None

        self._client.register_state_callback(self._on_connection_change)
        self._midi_input.register_state_callback(self._on_device_change)

    @property
    def dispatcher(self) -> MappingDispatcher:
        return self._dispatcher

    async def run(self) -> int:
        """Run until :meth:`stop` is called; returns a process exit code."""

        self._shutdown_event = asyncio.Event()
        self._queue = asyncio.Queue()

        LOGGER.info("lightroom-midi starting with config: %s", self._config.path)
        self.reload_profiles()
        if not self._dispatcher.profile_names:
            LOGGER.warning(
                "No profiles found in %s; events will be ignored",
                self._config.profiles.directory,
            )

        try:
            await self._client.connect()
        except (LightroomConnectionError, RegistrationError) as exc:
            LOGGER.error("Failed to connect to Lightroom: %s", exc)
            LOGGER.error(
                "Make sure Lightroom is running and 'Enable external controllers' "
                "is checked in its preferences"
            )
            await self._client.aclose()
            return 1

        try:
            self._midi_input.start(self.enqueue)
        except MidiDeviceError as exc:
            LOGGER.error("Failed to connect to MIDI device: %s", exc)
            await self._client.aclose()
            return 1

        self._consumer_task = asyncio.create_task(self._consume_events())
        LOGGER.info("Controller active; awaiting shutdown signal")

        try:
            await self._shutdown_event.wait()
        except asyncio.CancelledError:
            LOGGER.info("lightroom-midi received shutdown signal")
            raise
        finally:
            await self._stop_services()
        return 0

    def stop(self) -> None:
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    def enqueue(self, event: MidiEvent) -> None:
        """Queue an event for processing; called on the loop thread."""
        if self._queue is None:
            return
        LOGGER.debug("MIDI: %s", event)
        self._queue.put_nowait(event)

    def reload_profiles(self) -> None:
        """Re-read the profile directory and replace the mapping tables."""
        profiles = load_profiles(self._config.profiles.directory)
        self._dispatcher.load(profiles, default=self._config.profiles.default)
        for name in self._dispatcher.profile_names:
            marker = " (active)" if name == self._dispatcher.active_profile_name else ""
            LOGGER.info("Profile available: %s%s", name, marker)

    @classmethod
    def start(cls, config: Optional[ControllerConfig] = None) -> int:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            log_path=instance._config.logging.path,
            log_network=instance._config.logging.log_network,
        )
        try:
            return asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("lightroom-midi received shutdown signal")
            return 0

    async def _consume_events(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            try:
                await self._dispatcher.process_event(event)
            finally:
                self._queue.task_done()

    async def _stop_services(self) -> None:
        LOGGER.info("Shutting down")
        self._midi_input.close()

        if self._consumer_task is not None:
            self._consumer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer_task
            self._consumer_task = None

        await self._client.aclose()

    def _on_connection_change(self, state: ConnectionState) -> None:
        if state == ConnectionState.CONNECTED:
            LOGGER.info("Status: Lightroom connected")
        elif state == ConnectionState.DISCONNECTED:
            LOGGER.warning("Status: Lightroom disconnected")

    def _on_device_change(self, connected: bool, device_name: str) -> None:
        if connected:
            LOGGER.info("Status: MIDI connected to %s", device_name)
        else:
            LOGGER.warning("Status: MIDI disconnected")
