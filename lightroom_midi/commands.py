"""Registry of Lightroom commands reachable from profile ``command`` actions."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterator, Optional

from .core import LightroomApi, UnknownCommandError
from .lightroom_command_names import LightroomCommandNames

LOGGER = logging.getLogger(__name__)

CommandHandler = Callable[..., Awaitable[Any]]


class CommandRegistry:
    """Maps command names used in profiles to handlers ``handler(api, *params)``."""

    def __init__(self, handlers: Optional[dict[str, CommandHandler]] = None) -> None:
        self._handlers: dict[str, CommandHandler] = dict(handlers or {})

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._handlers))

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, name: str, handler: CommandHandler) -> None:
        if name in self._handlers:
            raise ValueError(f"Command already registered: {name}")
        self._handlers[name] = handler

    def get(self, name: str) -> CommandHandler:
        try:
            return self._handlers[name]
        except KeyError:
            raise UnknownCommandError(name) from None

    async def execute(self, api: LightroomApi, name: str, params: tuple[Any, ...] = ()) -> Any:
        handler = self.get(name)
        LOGGER.debug("Executing command %s%r", name, params)
        return await handler(api, *params)


def default_registry() -> CommandRegistry:
    """Registry holding every supported Lightroom controller operation."""

    names = LightroomCommandNames
    return CommandRegistry(
        {
            names.SET_VALUE: LightroomApi.set_value,
            names.GET_VALUE: LightroomApi.get_value,
            names.INCREMENT: LightroomApi.increment,
            names.DECREMENT: LightroomApi.decrement,
            names.START_TRACKING: LightroomApi.start_tracking,
            names.STOP_TRACKING: LightroomApi.stop_tracking,
            names.RESET_TO_DEFAULT: LightroomApi.reset_to_default,
            names.RESET_ALL_DEVELOP_ADJUSTMENTS: LightroomApi.reset_all_develop_adjustments,
            names.SET_AUTO_TONE: LightroomApi.set_auto_tone,
            names.TOGGLE_BLACK_AND_WHITE: LightroomApi.toggle_black_and_white,
            names.SHOW_VIEW: LightroomApi.show_view,
            names.NEXT_PHOTO: LightroomApi.next_photo,
            names.PREVIOUS_PHOTO: LightroomApi.previous_photo,
            names.ZOOM_IN: LightroomApi.zoom_in,
            names.ZOOM_OUT: LightroomApi.zoom_out,
            names.TOGGLE_ZOOM: LightroomApi.toggle_zoom,
            names.FLAG_PICK: LightroomApi.flag_pick,
            names.FLAG_REJECT: LightroomApi.flag_reject,
            names.FLAG_UNFLAG: LightroomApi.flag_unflag,
            names.APPLY_PRESET: LightroomApi.apply_preset,
            names.GET_PRESET_IDS: LightroomApi.get_preset_ids,
            names.GET_PARAMETER_NAMES: LightroomApi.get_parameter_names,
            names.GET_RANGE: LightroomApi.get_range,
            names.GET_DEFAULT: LightroomApi.get_default,
            names.GET_LABEL: LightroomApi.get_label,
            names.GET_PARAMETER_TYPE: LightroomApi.get_parameter_type,
            "setRating": LightroomApi.set_rating,
            "setColorLabel": LightroomApi.set_color_label,
        }
    )
