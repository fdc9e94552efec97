"""Lightroom adapter providing the websocket session to the controller API."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence

import aiohttp

from ..config import LightroomConfig
from ..core import (
    LightroomApi,
    LightroomConnectionError,
    MalformedMessageError,
    NotConnectedError,
    ObserverCallback,
    ObserverRegistry,
    RegistrationError,
    RequestCorrelator,
    RequestError,
)
from ..core.correlator import SchedulerType
from ..identity import IdentityStore
from ..lightroom_command_names import LightroomCommandNames

LOGGER = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Current state of the Lightroom session."""

    DISCONNECTED = "disconnected"
    """No websocket is open."""

    CONNECTING = "connecting"
    """Opening the websocket."""

    REGISTERING = "registering"
    """Websocket open, register request outstanding."""

    CONNECTED = "connected"
    """Registered; requests may be sent."""


StateCallback = Callable[[ConnectionState], Awaitable[None] | None]
SleepType = Callable[[float], Awaitable[Any]]


class LightroomClient(LightroomApi):
    """Long-lived websocket session with Lightroom's controller API.

    The session registers on connect, correlates responses to requests, routes
    observer pushes, and schedules a single reconnect attempt after the channel
    closes unless :meth:`disconnect` was requested.
    """

    def __init__(
        self,
        config: LightroomConfig,
        *,
        identity_store: Optional[IdentityStore] = None,
        session: Optional[aiohttp.ClientSession] = None,
        reconnect_delay: Optional[float] = None,
        sleep: SleepType = asyncio.sleep,
        scheduler: Optional[SchedulerType] = None,
    ) -> None:
        self.config = config
        self.identity_store = identity_store
        self.reconnect_delay = (
            config.reconnect_delay_seconds if reconnect_delay is None else reconnect_delay
        )
        self._sleep = sleep

        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._listener_task: Optional[asyncio.Task[None]] = None
        self._reconnect_task: Optional[asyncio.Task[None]] = None
        self._closing = False
        self._state = ConnectionState.DISCONNECTED
        self._state_callbacks: list[StateCallback] = []

        self._correlator = RequestCorrelator(
            self._transmit,
            timeout=config.request_timeout_seconds,
            scheduler=scheduler,
        )
        self._observers = ObserverRegistry()
        self._observer_tasks: set[asyncio.Task[bool]] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def pending_count(self) -> int:
        return self._correlator.pending_count

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    def register_state_callback(self, callback: StateCallback) -> None:
        """Register callback invoked with every connection state change."""
        self._state_callbacks.append(callback)

    def register_observer(self, callback: ObserverCallback) -> str:
        """Route pushes carrying the returned ``observerId`` to ``callback``."""
        return self._observers.register(callback)

    def unregister_observer(self, observer_id: str) -> bool:
        return self._observers.unregister(observer_id)

    async def connect(self) -> Any:
        """Open the websocket and register with Lightroom.

        Returns:
            The register response payload.

        Raises:
            LightroomConnectionError: If the websocket cannot be opened.
            RegistrationError: If Lightroom rejects or ignores registration.
        """

        if self._state != ConnectionState.DISCONNECTED:
            raise LightroomConnectionError(
                f"Cannot connect while {self._state.value}"
            )

        self._closing = False
        await self._set_state(ConnectionState.CONNECTING)
        LOGGER.info("Connecting to Lightroom at %s", self.config.url)

        try:
            session = await self._ensure_session()
            ws = await session.ws_connect(self.config.url)
        except (aiohttp.ClientError, OSError) as exc:
            await self._set_state(ConnectionState.DISCONNECTED)
            raise LightroomConnectionError(
                f"Could not connect to Lightroom at {self.config.url}: {exc}"
            ) from exc
        except asyncio.CancelledError:
            await self._set_state(ConnectionState.DISCONNECTED)
            raise

        self._ws = ws
        listener = asyncio.create_task(self._listen(ws))
        self._listener_task = listener
        await self._set_state(ConnectionState.REGISTERING)

        register_task = asyncio.create_task(self._register())
        try:
            await asyncio.wait(
                {register_task, listener}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            register_task.cancel()
            await self._close_channel()
            raise

        if not register_task.done():
            register_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await register_task
            raise LightroomConnectionError(
                "Lightroom closed the connection during registration"
            )

        try:
            response = register_task.result()
        except RequestError as exc:
            LOGGER.error("Lightroom registration failed: %s", exc)
            await self._close_channel()
            raise RegistrationError(f"Registration failed: {exc}") from exc
        except (NotConnectedError, aiohttp.ClientError, OSError) as exc:
            await self._close_channel()
            raise LightroomConnectionError(
                f"Lightroom connection lost during registration: {exc}"
            ) from exc

        if listener.done():
            raise LightroomConnectionError(
                "Lightroom closed the connection during registration"
            )

        await self._set_state(ConnectionState.CONNECTED)
        LOGGER.info("Connected to Lightroom at %s", self.config.url)
        return response

    async def disconnect(self) -> None:
        """Close the websocket without scheduling a reconnect.

        Requests already in flight are not cancelled; they time out.
        """

        self._closing = True
        task = self._reconnect_task
        self._reconnect_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        await self._close_channel()

    async def aclose(self) -> None:
        await self.disconnect()
        for task in list(self._observer_tasks):
            task.cancel()
        if self._observer_tasks:
            await asyncio.gather(*self._observer_tasks, return_exceptions=True)
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def send(self, message: str, params: Sequence[Any] = ()) -> Any:
        if self._state != ConnectionState.CONNECTED:
            raise NotConnectedError("Not connected to Lightroom")
        return await self._correlator.send_request(message, params)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=None)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def _register(self) -> Any:
        params: list[Any] = [self.config.app_name, self.config.app_version]
        identity = self.identity_store.load() if self.identity_store else None
        if identity:
            params.append(identity)

        response = await self._correlator.send_request(
            LightroomCommandNames.REGISTER, params
        )

        client_guid = response.get("clientGUID") if isinstance(response, dict) else None
        if client_guid and self.identity_store is not None and client_guid != identity:
            try:
                self.identity_store.save(str(client_guid))
            except OSError:
                # Logged by the store; the session itself is usable.
                pass
        return response

    async def _transmit(self, envelope: dict[str, Any]) -> None:
        ws = self._ws
        if ws is None or ws.closed:
            raise NotConnectedError("Lightroom websocket is not open")
        await ws.send_str(json.dumps(envelope))

    async def _listen(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for message in ws:
                if message.type == aiohttp.WSMsgType.TEXT:
                    await self._handle_frame(message.data)
                elif message.type == aiohttp.WSMsgType.BINARY:
                    await self._handle_frame(message.data.decode("utf-8", "replace"))
                elif message.type == aiohttp.WSMsgType.ERROR:
                    LOGGER.warning("Lightroom websocket error: %s", ws.exception())
                    break
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # pragma: no cover - defensive net handling
            LOGGER.warning("Lightroom websocket listener failed: %s", exc)
        finally:
            await self._handle_closed(ws)

    async def _handle_frame(self, raw_data: str) -> None:
        try:
            payload = _decode_frame(raw_data)
        except MalformedMessageError as exc:
            LOGGER.error("Dropping malformed Lightroom message: %s", exc)
            return

        if "requestId" in payload:
            self._correlator.resolve(payload)

        observer_id = payload.get("observerId")
        if isinstance(observer_id, str):
            # Callbacks may issue requests whose responses this listener delivers.
            task = asyncio.create_task(
                self._observers.dispatch(observer_id, payload.get("data"))
            )
            self._observer_tasks.add(task)
            task.add_done_callback(self._observer_tasks.discard)

    async def _handle_closed(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        if self._ws is not ws:
            return

        self._ws = None
        self._listener_task = None
        if not ws.closed:
            with contextlib.suppress(Exception):
                await ws.close()

        was_connected = self._state == ConnectionState.CONNECTED
        LOGGER.info("Disconnected from Lightroom")
        await self._set_state(ConnectionState.DISCONNECTED)

        # Failures before registration completes belong to whoever called connect().
        if was_connected and not self._closing:
            self._schedule_reconnect()

    async def _close_channel(self) -> None:
        ws = self._ws
        listener = self._listener_task
        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close()
        if listener is not None and listener is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await listener

        if ws is not None and self._ws is ws:
            # Listener never ran its cleanup (e.g. cancelled before starting).
            await self._handle_closed(ws)
        elif ws is None and self._state != ConnectionState.DISCONNECTED:
            await self._set_state(ConnectionState.DISCONNECTED)

    def _schedule_reconnect(self) -> None:
        if self.reconnect_pending:
            LOGGER.debug("Reconnect already scheduled")
            return
        LOGGER.info("Reconnecting to Lightroom in %.1fs", self.reconnect_delay)
        self._reconnect_task = asyncio.create_task(self._reconnect_loop())

    async def _reconnect_loop(self) -> None:
        while not self._closing:
            await self._sleep(self.reconnect_delay)
            if self._closing:
                return

            LOGGER.info("Attempting to reconnect to Lightroom")
            try:
                await self.connect()
            except (LightroomConnectionError, RegistrationError) as exc:
                LOGGER.warning(
                    "Reconnect failed: %s, retrying in %.1fs", exc, self.reconnect_delay
                )
                continue

            if self._state == ConnectionState.CONNECTED:
                return

    async def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return

        previous = self._state
        self._state = state
        LOGGER.debug("Lightroom session %s -> %s", previous.value, state.value)

        for callback in list(self._state_callbacks):
            try:
                result = callback(state)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                LOGGER.warning("Connection state callback failed", exc_info=True)


def _decode_frame(raw_data: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw_data)
    except (TypeError, ValueError) as exc:
        raise MalformedMessageError(f"invalid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise MalformedMessageError(
            f"expected a JSON object, got {type(payload).__name__}"
        )
    return payload
