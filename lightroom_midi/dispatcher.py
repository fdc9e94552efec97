"""Event-to-action dispatch against the active profile."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .commands import CommandRegistry, default_registry
from .core import (
    LightroomApi,
    MidiEvent,
    ProfileNotFoundError,
    UnknownActionError,
    UnknownCommandError,
    scale_value,
)
from .profiles import (
    Action,
    ColorLabelAction,
    CommandAction,
    DecrementAction,
    FlagAction,
    FlagType,
    IncrementAction,
    MappingRule,
    Profile,
    RatingAction,
    SetValueAction,
    SwitchProfileAction,
    UnknownAction,
)

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ProfileSession:
    """Mutable dispatch state: the loaded profiles and what is active."""

    profiles: dict[str, Profile] = field(default_factory=dict)
    active_name: Optional[str] = None
    tracking_parameter: Optional[str] = None

    @property
    def active_profile(self) -> Optional[Profile]:
        if self.active_name is None:
            return None
        return self.profiles.get(self.active_name)


class ActionExecutor:
    """Translates a matched action into Lightroom API calls."""

    def __init__(
        self,
        api: LightroomApi,
        dispatcher: MappingDispatcher,
        commands: Optional[CommandRegistry] = None,
    ) -> None:
        self._api = api
        self._dispatcher = dispatcher
        self._commands = commands or default_registry()

    async def execute(self, action: Action, event: MidiEvent) -> None:
        if isinstance(action, SwitchProfileAction):
            self._dispatcher.switch_profile(action.profile)
            return

        # Cleanup from an earlier switch must reach Lightroom before new calls.
        await self._dispatcher.drain()

        if isinstance(action, SetValueAction):
            await self._execute_set_value(action, event)
            return

        if isinstance(action, IncrementAction):
            await self._api.increment(action.parameter, action.amount)
            return

        if isinstance(action, DecrementAction):
            await self._api.decrement(action.parameter, action.amount)
            return

        if isinstance(action, CommandAction):
            await self._execute_command(action)
            return

        if isinstance(action, RatingAction):
            await self._api.set_rating(action.rating)
            return

        if isinstance(action, FlagAction):
            await self._execute_flag(action.flag)
            return

        if isinstance(action, ColorLabelAction):
            await self._api.set_color_label(action.color)
            return

        if isinstance(action, UnknownAction):
            raise UnknownActionError(f"Unknown action type: {action.action_type}")

        raise UnknownActionError(f"Unsupported action: {action!r}")

    async def _execute_set_value(self, action: SetValueAction, event: MidiEvent) -> None:
        value: float = event.data_value
        if action.scale is not None:
            value = scale_value(value, action.scale)

        session = self._dispatcher.session
        if action.tracking and session.tracking_parameter != action.parameter:
            await self._api.start_tracking(action.parameter)
            session.tracking_parameter = action.parameter

        await self._api.set_value(action.parameter, value)

    async def _execute_command(self, action: CommandAction) -> None:
        try:
            await self._commands.execute(self._api, action.command, action.params)
        except UnknownCommandError as exc:
            LOGGER.warning("%s", exc)

    async def _execute_flag(self, flag: FlagType) -> None:
        if flag == FlagType.PICK:
            await self._api.flag_pick()
        elif flag == FlagType.REJECT:
            await self._api.flag_reject()
        elif flag == FlagType.UNFLAG:
            await self._api.flag_unflag()


class MappingDispatcher:
    """Matches incoming events against the active profile and runs the action.

    Events are expected one at a time from a single consumer; the dispatcher
    itself does no locking around the active profile or tracking parameter.
    """

    def __init__(
        self,
        api: LightroomApi,
        profiles: Optional[Mapping[str, Profile]] = None,
        *,
        commands: Optional[CommandRegistry] = None,
        default_profile: Optional[str] = None,
    ) -> None:
        self._api = api
        self.session = ProfileSession()
        self._executor = ActionExecutor(api, self, commands)
        self._background: set[asyncio.Task[Any]] = set()
        if profiles is not None:
            self.load(profiles, default=default_profile)

    @property
    def active_profile(self) -> Optional[Profile]:
        return self.session.active_profile

    @property
    def active_profile_name(self) -> Optional[str]:
        return self.session.active_name

    @property
    def tracking_parameter(self) -> Optional[str]:
        return self.session.tracking_parameter

    @property
    def profile_names(self) -> list[str]:
        return list(self.session.profiles)

    def load(
        self, profiles: Mapping[str, Profile], *, default: Optional[str] = None
    ) -> None:
        """Replace the loaded profiles, e.g. on startup or explicit reload."""

        previous = self.session.active_name
        self.session.profiles = dict(profiles)

        if not self.session.profiles:
            self.session.active_name = None
            self._stop_tracking()
            return

        if default is not None and default in self.session.profiles:
            target = default
        elif previous is not None and previous in self.session.profiles:
            target = previous
        else:
            if default is not None:
                LOGGER.error("Default profile not found: %s", default)
            target = next(iter(self.session.profiles))

        self.activate_profile(target)

    def activate_profile(self, name: str) -> None:
        """Make ``name`` the active profile.

        Raises:
            ProfileNotFoundError: If ``name`` was not loaded; the current
                profile stays active.
        """

        if name not in self.session.profiles:
            raise ProfileNotFoundError(name)

        self.session.active_name = name
        LOGGER.info("Switched to profile: %s", name)
        self._stop_tracking()

    def switch_profile(self, name: str) -> bool:
        try:
            self.activate_profile(name)
        except ProfileNotFoundError as exc:
            LOGGER.error("%s", exc)
            return False
        return True

    def find_mapping(self, event: MidiEvent) -> Optional[MappingRule]:
        profile = self.session.active_profile
        if profile is None:
            return None
        return profile.find_mapping(event)

    async def process_event(self, event: MidiEvent) -> None:
        """Run the first matching rule for ``event``; errors are logged, never raised."""

        rule = self.find_mapping(event)
        if rule is None:
            return

        try:
            await self._executor.execute(rule.action, event)
        except Exception as exc:
            LOGGER.error("Error executing mapping for %s: %s", event, exc)

    async def drain(self) -> None:
        """Wait for outstanding best-effort cleanup calls."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _stop_tracking(self) -> None:
        if self.session.tracking_parameter is None:
            return

        parameter = self.session.tracking_parameter
        self.session.tracking_parameter = None

        try:
            task = asyncio.get_running_loop().create_task(self._api.stop_tracking())
        except RuntimeError:
            LOGGER.debug("No running loop; skipping stopTracking for %s", parameter)
            return

        self._background.add(task)
        task.add_done_callback(self._on_stop_tracking_done)

    def _on_stop_tracking_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning("Best-effort stopTracking failed: %s", exc)
