"""Tests for mapping dispatch and action execution."""

import asyncio
import logging

import pytest

from lightroom_midi.commands import CommandRegistry
from lightroom_midi.core import (
    MidiEvent,
    NotConnectedError,
    ProfileNotFoundError,
    RemoteError,
)
from lightroom_midi.dispatcher import MappingDispatcher
from lightroom_midi.profiles import parse_profile


def _profile(key, *mappings, name=None):
    return parse_profile(
        {"name": name or key, "mappings": list(mappings)}, key=key
    )


def _rule(midi, action):
    return {"midi": midi, "action": action}


def _note(note, channel=0, velocity=100, kind="noteon"):
    return MidiEvent(type=kind, channel=channel, note=note, velocity=velocity)


def _cc(controller, value, channel=0):
    return MidiEvent(type="cc", channel=channel, controller=controller, value=value)


EXPOSURE_SCALE = {"midiMin": 0, "midiMax": 127, "lrMin": -5, "lrMax": 5}


@pytest.mark.asyncio
async def test_note_rule_issues_rating_call(fake_lightroom):
    profile = _profile(
        "edit",
        _rule({"type": "noteon", "note": 0}, {"type": "rating", "rating": 5}),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    await dispatcher.process_event(_note(0))

    assert fake_lightroom.calls == [("rating5", [])]


@pytest.mark.asyncio
async def test_scaled_set_value_hits_both_endpoints(fake_lightroom):
    profile = _profile(
        "edit",
        _rule(
            {"type": "cc", "controller": 10},
            {"type": "setValue", "parameter": "Exposure", "scale": EXPOSURE_SCALE},
        ),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    await dispatcher.process_event(_cc(10, 0))
    await dispatcher.process_event(_cc(10, 127))

    assert fake_lightroom.calls == [
        ("setValue", ["Exposure", -5]),
        ("setValue", ["Exposure", 5]),
    ]


@pytest.mark.asyncio
async def test_unscaled_set_value_uses_raw_data_value(fake_lightroom):
    profile = _profile(
        "edit",
        _rule({"type": "noteon"}, {"type": "setValue", "parameter": "Vibrance"}),
        _rule({"type": "pitch"}, {"type": "setValue", "parameter": "Temperature"}),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    await dispatcher.process_event(_note(3, velocity=42))
    await dispatcher.process_event(MidiEvent(type="pitch", channel=0, value=8192))

    assert fake_lightroom.calls == [
        ("setValue", ["Vibrance", 42]),
        ("setValue", ["Temperature", 8192]),
    ]


@pytest.mark.asyncio
async def test_first_matching_rule_wins(fake_lightroom):
    profile = _profile(
        "edit",
        _rule({"type": "noteon", "note": 1}, {"type": "rating", "rating": 1}),
        _rule({"type": "noteon"}, {"type": "rating", "rating": 2}),
        _rule({"type": "noteon", "note": 1}, {"type": "rating", "rating": 3}),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    await dispatcher.process_event(_note(1))
    await dispatcher.process_event(_note(9, channel=4))

    assert fake_lightroom.messages == ["rating1", "rating2"]


@pytest.mark.asyncio
async def test_channel_filter_and_type_must_match(fake_lightroom):
    profile = _profile(
        "edit",
        _rule({"type": "noteon", "channel": 1, "note": 5}, {"type": "rating", "rating": 1}),
        _rule({"type": "cc", "controller": 5}, {"type": "rating", "rating": 2}),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    await dispatcher.process_event(_note(5, channel=0))
    await dispatcher.process_event(_note(5, channel=1, kind="noteoff"))
    await dispatcher.process_event(_cc(6, 64))
    assert fake_lightroom.calls == []

    await dispatcher.process_event(_note(5, channel=1))
    await dispatcher.process_event(_cc(5, 64, channel=9))
    assert fake_lightroom.messages == ["rating1", "rating2"]


@pytest.mark.asyncio
async def test_no_active_profile_ignores_events(fake_lightroom):
    dispatcher = MappingDispatcher(fake_lightroom)

    await dispatcher.process_event(_note(0))

    assert dispatcher.active_profile is None
    assert fake_lightroom.calls == []


@pytest.mark.asyncio
async def test_unknown_command_is_logged_and_skipped(fake_lightroom, caplog):
    profile = _profile(
        "edit",
        _rule({"type": "noteon", "note": 0}, {"type": "command", "command": "doesNotExist"}),
        _rule({"type": "noteon", "note": 1}, {"type": "command", "command": "nextPhoto"}),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    with caplog.at_level(logging.WARNING):
        await dispatcher.process_event(_note(0))

    assert fake_lightroom.calls == []
    assert "doesNotExist" in caplog.text

    await dispatcher.process_event(_note(1))
    assert fake_lightroom.messages == ["nextPhoto"]


@pytest.mark.asyncio
async def test_command_params_are_passed_through(fake_lightroom):
    profile = _profile(
        "edit",
        _rule(
            {"type": "noteon", "note": 0},
            {"type": "command", "command": "showView", "params": ["develop_loupe"]},
        ),
        _rule(
            {"type": "noteon", "note": 1},
            {"type": "command", "command": "setColorLabel", "params": ["green"]},
        ),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    await dispatcher.process_event(_note(0))
    await dispatcher.process_event(_note(1))

    assert fake_lightroom.calls == [
        ("showView", ["develop_loupe"]),
        ("colorLabelGreen", []),
    ]


@pytest.mark.asyncio
async def test_custom_command_registry(fake_lightroom):
    async def double_step(api, parameter):
        await api.increment(parameter, 1)
        await api.increment(parameter, 1)

    profile = _profile(
        "edit",
        _rule(
            {"type": "noteon"},
            {"type": "command", "command": "doubleStep", "params": ["Exposure"]},
        ),
    )
    dispatcher = MappingDispatcher(
        fake_lightroom,
        {"edit": profile},
        commands=CommandRegistry({"doubleStep": double_step}),
    )

    await dispatcher.process_event(_note(0))

    assert fake_lightroom.calls == [
        ("increment", ["Exposure", 1]),
        ("increment", ["Exposure", 1]),
    ]


@pytest.mark.asyncio
async def test_every_action_type_reaches_the_api(fake_lightroom):
    profile = _profile(
        "edit",
        _rule({"type": "noteon", "note": 0}, {"type": "increment", "parameter": "Exposure", "amount": 0.1}),
        _rule({"type": "noteon", "note": 1}, {"type": "decrement", "parameter": "Contrast", "amount": 5}),
        _rule({"type": "noteon", "note": 2}, {"type": "flag", "flag": "pick"}),
        _rule({"type": "noteon", "note": 3}, {"type": "flag", "flag": "reject"}),
        _rule({"type": "noteon", "note": 4}, {"type": "flag", "flag": "unflag"}),
        _rule({"type": "noteon", "note": 5}, {"type": "colorLabel", "color": "red"}),
        _rule({"type": "noteon", "note": 6}, {"type": "colorLabel", "color": "none"}),
        _rule({"type": "noteon", "note": 7}, {"type": "rating", "rating": 3}),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    for note in range(8):
        await dispatcher.process_event(_note(note))

    assert fake_lightroom.calls == [
        ("increment", ["Exposure", 0.1]),
        ("decrement", ["Contrast", 5]),
        ("flagPick", []),
        ("flagReject", []),
        ("flagUnflag", []),
        ("colorLabelRed", []),
        ("colorLabelNone", []),
        ("rating3", []),
    ]


@pytest.mark.asyncio
async def test_unknown_action_type_is_logged_not_raised(fake_lightroom, caplog):
    profile = _profile(
        "edit",
        _rule({"type": "noteon", "note": 0}, {"type": "teleport"}),
        _rule({"type": "noteon", "note": 1}, {"type": "rating", "rating": 2}),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    with caplog.at_level(logging.ERROR):
        await dispatcher.process_event(_note(0))
    assert "teleport" in caplog.text

    await dispatcher.process_event(_note(1))
    assert fake_lightroom.messages == ["rating2"]


@pytest.mark.asyncio
async def test_remote_errors_do_not_stop_processing(fake_lightroom):
    fake_lightroom.failures["nextPhoto"] = RemoteError("nope")
    fake_lightroom.failures["previousPhoto"] = NotConnectedError("offline")
    profile = _profile(
        "edit",
        _rule({"type": "noteon", "note": 0}, {"type": "command", "command": "nextPhoto"}),
        _rule({"type": "noteon", "note": 1}, {"type": "command", "command": "previousPhoto"}),
        _rule({"type": "noteon", "note": 2}, {"type": "rating", "rating": 1}),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    for note in range(3):
        await dispatcher.process_event(_note(note))

    assert fake_lightroom.messages == ["nextPhoto", "previousPhoto", "rating1"]


@pytest.mark.asyncio
async def test_tracking_starts_once_per_parameter(fake_lightroom):
    profile = _profile(
        "edit",
        _rule(
            {"type": "cc", "controller": 1},
            {"type": "setValue", "parameter": "Exposure", "tracking": True, "scale": EXPOSURE_SCALE},
        ),
        _rule(
            {"type": "cc", "controller": 2},
            {"type": "setValue", "parameter": "Contrast", "tracking": True},
        ),
    )
    dispatcher = MappingDispatcher(fake_lightroom, {"edit": profile})

    await dispatcher.process_event(_cc(1, 0))
    await dispatcher.process_event(_cc(1, 127))
    await dispatcher.process_event(_cc(2, 10))

    assert fake_lightroom.calls == [
        ("startTracking", ["Exposure"]),
        ("setValue", ["Exposure", -5]),
        ("setValue", ["Exposure", 5]),
        ("startTracking", ["Contrast"]),
        ("setValue", ["Contrast", 10]),
    ]
    assert dispatcher.tracking_parameter == "Contrast"


@pytest.mark.asyncio
async def test_switch_profile_to_unknown_name_keeps_active(fake_lightroom, caplog):
    dispatcher = MappingDispatcher(
        fake_lightroom, {"edit": _profile("edit"), "culling": _profile("culling")}
    )
    assert dispatcher.active_profile_name == "edit"

    with caplog.at_level(logging.ERROR):
        assert dispatcher.switch_profile("nonexistent") is False

    assert dispatcher.active_profile_name == "edit"
    assert "Profile not found: nonexistent" in caplog.text

    with pytest.raises(ProfileNotFoundError):
        dispatcher.activate_profile("nonexistent")


@pytest.mark.asyncio
async def test_switch_profile_action_changes_active_profile(fake_lightroom):
    edit = _profile(
        "edit",
        _rule({"type": "noteon", "note": 0}, {"type": "switchProfile", "profile": "culling"}),
        _rule({"type": "noteon", "note": 1}, {"type": "rating", "rating": 1}),
    )
    culling = _profile(
        "culling",
        _rule({"type": "noteon", "note": 1}, {"type": "flag", "flag": "pick"}),
    )
    dispatcher = MappingDispatcher(
        fake_lightroom, {"edit": edit, "culling": culling}, default_profile="edit"
    )

    await dispatcher.process_event(_note(0))
    await dispatcher.process_event(_note(1))

    assert dispatcher.active_profile_name == "culling"
    assert dispatcher.active_profile is culling
    assert fake_lightroom.messages == ["flagPick"]


@pytest.mark.asyncio
async def test_switch_with_active_tracking_stops_it_once(fake_lightroom):
    edit = _profile(
        "edit",
        _rule({"type": "cc"}, {"type": "setValue", "parameter": "Exposure", "tracking": True}),
    )
    dispatcher = MappingDispatcher(
        fake_lightroom, {"edit": edit, "culling": _profile("culling")}, default_profile="edit"
    )

    await dispatcher.process_event(_cc(1, 64))
    assert dispatcher.switch_profile("culling") is True
    assert dispatcher.switch_profile("edit") is True
    await dispatcher.drain()

    assert fake_lightroom.messages.count("stopTracking") == 1
    assert dispatcher.tracking_parameter is None


@pytest.mark.asyncio
async def test_failing_stop_tracking_does_not_block_switch(fake_lightroom, caplog):
    fake_lightroom.failures["stopTracking"] = RemoteError("no tracking session")
    edit = _profile(
        "edit",
        _rule({"type": "cc"}, {"type": "setValue", "parameter": "Exposure", "tracking": True}),
    )
    dispatcher = MappingDispatcher(
        fake_lightroom, {"edit": edit, "culling": _profile("culling")}, default_profile="edit"
    )

    await dispatcher.process_event(_cc(1, 64))
    with caplog.at_level(logging.WARNING):
        assert dispatcher.switch_profile("culling") is True
        await dispatcher.drain()
        await asyncio.sleep(0)

    assert dispatcher.active_profile_name == "culling"
    assert fake_lightroom.messages.count("stopTracking") == 1
    assert "stopTracking failed" in caplog.text


@pytest.mark.asyncio
async def test_stop_tracking_precedes_next_profile_calls(fake_lightroom):
    edit = _profile(
        "edit",
        _rule({"type": "cc", "controller": 1}, {"type": "setValue", "parameter": "Exposure", "tracking": True}),
        _rule({"type": "noteon", "note": 0}, {"type": "switchProfile", "profile": "color"}),
    )
    color = _profile(
        "color",
        _rule({"type": "cc", "controller": 1}, {"type": "setValue", "parameter": "Contrast", "tracking": True}),
    )
    dispatcher = MappingDispatcher(
        fake_lightroom, {"edit": edit, "color": color}, default_profile="edit"
    )

    # Back to back, as the app's consumer delivers them.
    await dispatcher.process_event(_cc(1, 10))
    await dispatcher.process_event(_note(0))
    await dispatcher.process_event(_cc(1, 20))

    assert fake_lightroom.calls == [
        ("startTracking", ["Exposure"]),
        ("setValue", ["Exposure", 10]),
        ("stopTracking", []),
        ("startTracking", ["Contrast"]),
        ("setValue", ["Contrast", 20]),
    ]
    assert dispatcher.tracking_parameter == "Contrast"


@pytest.mark.asyncio
async def test_switch_without_tracking_sends_nothing(fake_lightroom):
    dispatcher = MappingDispatcher(
        fake_lightroom, {"edit": _profile("edit"), "culling": _profile("culling")}
    )

    dispatcher.switch_profile("edit")
    await dispatcher.drain()

    assert fake_lightroom.calls == []


def test_load_prefers_default_then_previous_then_first(fake_lightroom, caplog):
    profiles = {"a": _profile("a"), "b": _profile("b"), "c": _profile("c")}
    dispatcher = MappingDispatcher(fake_lightroom)

    dispatcher.load(profiles, default="b")
    assert dispatcher.active_profile_name == "b"

    dispatcher.load({"a": profiles["a"], "b": profiles["b"]})
    assert dispatcher.active_profile_name == "b"

    with caplog.at_level(logging.ERROR):
        dispatcher.load({"c": profiles["c"], "a": profiles["a"]}, default="missing")
    assert dispatcher.active_profile_name == "c"
    assert "Default profile not found: missing" in caplog.text
    assert dispatcher.profile_names == ["c", "a"]

    dispatcher.load({})
    assert dispatcher.active_profile_name is None
    assert dispatcher.profile_names == []
