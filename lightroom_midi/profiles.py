"""Profile files: named, ordered lists of MIDI pattern -> action rules.

Profiles are JSON objects, one per file::

    {"name": "Edit Mode", "description": "...",
     "mappings": [{"midi": {"type": "noteon", "note": 0},
                   "action": {"type": "rating", "rating": 1}}]}

The file stem is the key used to switch profiles. Rule order matters: the
first rule whose pattern matches an event wins.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .core import MidiEvent, ProfileError, ScaleRange
from .core.models import CONTROL_CHANGE_EVENT, NOTE_EVENT_TYPES

LOGGER = logging.getLogger(__name__)

EVENT_TYPES = frozenset({"noteon", "noteoff", "cc", "program", "pitch"})
COLOR_LABELS = ("red", "yellow", "green", "blue", "purple", "none")


class FlagType(str, Enum):
    PICK = "pick"
    REJECT = "reject"
    UNFLAG = "unflag"


@dataclass(frozen=True, slots=True)
class Pattern:
    event_type: str
    channel: Optional[int] = None
    note: Optional[int] = None
    controller: Optional[int] = None

    def matches(self, event: MidiEvent) -> bool:
        if self.event_type != event.type:
            return False

        # Unset fields are wildcards.
        if self.channel is not None and self.channel != event.channel:
            return False

        if (
            self.event_type in NOTE_EVENT_TYPES
            and self.note is not None
            and self.note != event.note
        ):
            return False

        if (
            self.event_type == CONTROL_CHANGE_EVENT
            and self.controller is not None
            and self.controller != event.controller
        ):
            return False

        return True


@dataclass(frozen=True, slots=True)
class SetValueAction:
    parameter: str
    scale: Optional[ScaleRange] = None
    tracking: bool = False


@dataclass(frozen=True, slots=True)
class IncrementAction:
    parameter: str
    amount: float


@dataclass(frozen=True, slots=True)
class DecrementAction:
    parameter: str
    amount: float


@dataclass(frozen=True, slots=True)
class CommandAction:
    command: str
    params: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class RatingAction:
    rating: int


@dataclass(frozen=True, slots=True)
class FlagAction:
    flag: FlagType


@dataclass(frozen=True, slots=True)
class ColorLabelAction:
    color: str


@dataclass(frozen=True, slots=True)
class SwitchProfileAction:
    profile: str


@dataclass(frozen=True, slots=True)
class UnknownAction:
    """Placeholder for an action type this version cannot execute."""

    action_type: str


Action = Union[
    SetValueAction,
    IncrementAction,
    DecrementAction,
    CommandAction,
    RatingAction,
    FlagAction,
    ColorLabelAction,
    SwitchProfileAction,
    UnknownAction,
]


@dataclass(frozen=True, slots=True)
class MappingRule:
    pattern: Pattern
    action: Action


@dataclass(frozen=True, slots=True)
class Profile:
    name: str
    description: str
    mappings: tuple[MappingRule, ...]

    def find_mapping(self, event: MidiEvent) -> Optional[MappingRule]:
        for rule in self.mappings:
            if rule.pattern.matches(event):
                return rule
        return None


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------
def _require(data: Mapping[str, Any], key: str, context: str) -> Any:
    if key not in data:
        raise ProfileError(f"{context}: missing '{key}'")
    return data[key]


def _optional_int(data: Mapping[str, Any], key: str, context: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProfileError(f"{context}: '{key}' must be an integer")
    return value


def _number(data: Mapping[str, Any], key: str, context: str) -> float:
    value = _require(data, key, context)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProfileError(f"{context}: '{key}' must be a number")
    return value


def _string(data: Mapping[str, Any], key: str, context: str) -> str:
    value = _require(data, key, context)
    if not isinstance(value, str) or not value:
        raise ProfileError(f"{context}: '{key}' must be a non-empty string")
    return value


def parse_pattern(data: Any, context: str = "midi") -> Pattern:
    if not isinstance(data, Mapping):
        raise ProfileError(f"{context}: expected an object")

    event_type = _string(data, "type", context)
    if event_type not in EVENT_TYPES:
        raise ProfileError(f"{context}: unsupported MIDI type {event_type!r}")

    return Pattern(
        event_type=event_type,
        channel=_optional_int(data, "channel", context),
        note=_optional_int(data, "note", context),
        controller=_optional_int(data, "controller", context),
    )


def parse_scale(data: Any, context: str = "scale") -> ScaleRange:
    if not isinstance(data, Mapping):
        raise ProfileError(f"{context}: expected an object")

    scale = ScaleRange(
        lr_min=_number(data, "lrMin", context),
        lr_max=_number(data, "lrMax", context),
        midi_min=_number(data, "midiMin", context) if "midiMin" in data else 0,
        midi_max=_number(data, "midiMax", context) if "midiMax" in data else 127,
    )
    if scale.midi_min == scale.midi_max:
        raise ProfileError(f"{context}: midiMin and midiMax must differ")
    return scale


def parse_action(data: Any, context: str = "action") -> Action:
    if not isinstance(data, Mapping):
        raise ProfileError(f"{context}: expected an object")

    action_type = _string(data, "type", context)

    if action_type == "setValue":
        scale = data.get("scale")
        return SetValueAction(
            parameter=_string(data, "parameter", context),
            scale=parse_scale(scale, f"{context}.scale") if scale is not None else None,
            tracking=bool(data.get("tracking", False)),
        )

    if action_type == "increment":
        return IncrementAction(
            parameter=_string(data, "parameter", context),
            amount=_number(data, "amount", context),
        )

    if action_type == "decrement":
        return DecrementAction(
            parameter=_string(data, "parameter", context),
            amount=_number(data, "amount", context),
        )

    if action_type == "command":
        params = data.get("params") or []
        if not isinstance(params, list):
            raise ProfileError(f"{context}: 'params' must be a list")
        return CommandAction(command=_string(data, "command", context), params=tuple(params))

    if action_type == "rating":
        rating = _require(data, "rating", context)
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ProfileError(f"{context}: 'rating' must be an integer from 1 to 5")
        return RatingAction(rating=rating)

    if action_type == "flag":
        flag = _string(data, "flag", context)
        try:
            return FlagAction(flag=FlagType(flag))
        except ValueError as exc:
            raise ProfileError(
                f"{context}: 'flag' must be one of pick, reject, unflag"
            ) from exc

    if action_type == "colorLabel":
        color = _string(data, "color", context).lower()
        if color not in COLOR_LABELS:
            raise ProfileError(
                f"{context}: 'color' must be one of {', '.join(COLOR_LABELS)}"
            )
        return ColorLabelAction(color=color)

    if action_type == "switchProfile":
        return SwitchProfileAction(profile=_string(data, "profile", context))

    LOGGER.warning("%s: unknown action type %r", context, action_type)
    return UnknownAction(action_type=action_type)


def parse_profile(data: Any, *, key: str) -> Profile:
    """Build a :class:`Profile` from a decoded profile file."""

    if not isinstance(data, Mapping):
        raise ProfileError(f"{key}: profile must be a JSON object")

    mappings_data = data.get("mappings") or []
    if not isinstance(mappings_data, list):
        raise ProfileError(f"{key}: 'mappings' must be a list")

    rules: list[MappingRule] = []
    for index, entry in enumerate(mappings_data):
        context = f"{key}.mappings[{index}]"
        if not isinstance(entry, Mapping):
            raise ProfileError(f"{context}: expected an object")
        rules.append(
            MappingRule(
                pattern=parse_pattern(_require(entry, "midi", context), f"{context}.midi"),
                action=parse_action(
                    _require(entry, "action", context), f"{context}.action"
                ),
            )
        )

    return Profile(
        name=str(data.get("name") or key),
        description=str(data.get("description") or ""),
        mappings=tuple(rules),
    )


def load_profile(path: Path) -> Profile:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ProfileError(f"{path.name}: invalid JSON: {exc}") from exc
    return parse_profile(data, key=path.stem)


def load_profiles(directory: Path) -> dict[str, Profile]:
    """Load every ``*.json`` profile in ``directory``, keyed by file stem.

    Files that fail to load are logged and skipped. A missing directory is
    created and yields no profiles.
    """

    directory = Path(directory)
    LOGGER.info("Loading profiles from: %s", directory)

    if not directory.exists():
        LOGGER.warning("Profiles directory not found, creating %s", directory)
        directory.mkdir(parents=True, exist_ok=True)
        return {}

    profiles: dict[str, Profile] = {}
    for path in sorted(directory.glob("*.json")):
        try:
            profiles[path.stem] = load_profile(path)
        except (ProfileError, OSError) as exc:
            LOGGER.error("Failed to load profile %s: %s", path.name, exc)
            continue
        LOGGER.info("Loaded profile: %s", path.stem)

    return profiles


def suggest_mapping(event: MidiEvent) -> Optional[dict[str, Any]]:
    """Build a starter mapping entry for ``event``.

    Note events get a command placeholder, control changes a tracked setValue.
    Other event types return ``None``.
    """

    if event.type in NOTE_EVENT_TYPES:
        return {
            "midi": {"type": event.type, "channel": event.channel, "note": event.note},
            "action": {"type": "command", "command": "YOUR_COMMAND_HERE"},
        }

    if event.type == CONTROL_CHANGE_EVENT:
        return {
            "midi": {
                "type": event.type,
                "channel": event.channel,
                "controller": event.controller,
            },
            "action": {
                "type": "setValue",
                "parameter": "PARAMETER_NAME",
                "tracking": True,
                "scale": {"midiMin": 0, "midiMax": 127, "lrMin": -100, "lrMax": 100},
            },
        }

    return None
