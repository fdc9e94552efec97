"""Typed wrappers around the Lightroom controller API.

Every wrapper funnels through :meth:`LightroomApi.send`, so anything that
implements ``send`` (the websocket client, or a test double) gets the whole
API for free.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from ..lightroom_command_names import LightroomCommandNames


class LightroomApi(ABC):
    @abstractmethod
    async def send(self, message: str, params: Sequence[Any] = ()) -> Any:
        """Deliver ``message`` and return the response payload."""

    # Develop parameters
    async def set_value(self, parameter: str, value: float) -> Any:
        return await self.send(LightroomCommandNames.SET_VALUE, [parameter, value])

    async def get_value(self, parameter: str) -> Any:
        return await self.send(LightroomCommandNames.GET_VALUE, [parameter])

    async def increment(self, parameter: str, amount: float) -> Any:
        return await self.send(LightroomCommandNames.INCREMENT, [parameter, amount])

    async def decrement(self, parameter: str, amount: float) -> Any:
        return await self.send(LightroomCommandNames.DECREMENT, [parameter, amount])

    async def start_tracking(self, parameter: str) -> Any:
        return await self.send(LightroomCommandNames.START_TRACKING, [parameter])

    async def stop_tracking(self) -> Any:
        return await self.send(LightroomCommandNames.STOP_TRACKING)

    async def reset_to_default(self, parameter: str) -> Any:
        return await self.send(LightroomCommandNames.RESET_TO_DEFAULT, [parameter])

    async def reset_all_develop_adjustments(self) -> Any:
        return await self.send(LightroomCommandNames.RESET_ALL_DEVELOP_ADJUSTMENTS)

    async def set_auto_tone(self) -> Any:
        return await self.send(LightroomCommandNames.SET_AUTO_TONE)

    async def toggle_black_and_white(self) -> Any:
        return await self.send(LightroomCommandNames.TOGGLE_BLACK_AND_WHITE)

    # View and navigation
    async def show_view(self, view_name: str) -> Any:
        return await self.send(LightroomCommandNames.SHOW_VIEW, [view_name])

    async def next_photo(self) -> Any:
        return await self.send(LightroomCommandNames.NEXT_PHOTO)

    async def previous_photo(self) -> Any:
        return await self.send(LightroomCommandNames.PREVIOUS_PHOTO)

    async def zoom_in(self) -> Any:
        return await self.send(LightroomCommandNames.ZOOM_IN)

    async def zoom_out(self) -> Any:
        return await self.send(LightroomCommandNames.ZOOM_OUT)

    async def toggle_zoom(self) -> Any:
        return await self.send(LightroomCommandNames.TOGGLE_ZOOM)

    # Ratings, flags and labels
    async def set_rating(self, rating: int) -> Any:
        if rating not in range(1, 6):
            raise ValueError(f"Rating must be between 1 and 5, got {rating!r}")
        return await self.send(f"{LightroomCommandNames.RATING_PREFIX}{rating}")

    async def flag_pick(self) -> Any:
        return await self.send(LightroomCommandNames.FLAG_PICK)

    async def flag_reject(self) -> Any:
        return await self.send(LightroomCommandNames.FLAG_REJECT)

    async def flag_unflag(self) -> Any:
        return await self.send(LightroomCommandNames.FLAG_UNFLAG)

    async def set_color_label(self, color: str) -> Any:
        label = color[:1].upper() + color[1:]
        return await self.send(f"{LightroomCommandNames.COLOR_LABEL_PREFIX}{label}")

    # Presets and parameter metadata
    async def apply_preset(self, preset_id: str) -> Any:
        return await self.send(LightroomCommandNames.APPLY_PRESET, [preset_id])

    async def get_preset_ids(self) -> Any:
        return await self.send(LightroomCommandNames.GET_PRESET_IDS)

    async def get_parameter_names(self) -> Any:
        return await self.send(LightroomCommandNames.GET_PARAMETER_NAMES)

    async def get_range(self, parameter: str) -> Any:
        return await self.send(LightroomCommandNames.GET_RANGE, [parameter])

    async def get_default(self, parameter: str) -> Any:
        return await self.send(LightroomCommandNames.GET_DEFAULT, [parameter])

    async def get_label(self, parameter: str) -> Any:
        return await self.send(LightroomCommandNames.GET_LABEL, [parameter])

    async def get_parameter_type(self, parameter: str) -> Any:
        return await self.send(LightroomCommandNames.GET_PARAMETER_TYPE, [parameter])
