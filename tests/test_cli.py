import json
from pathlib import Path

import pytest

from lightroom_midi.cli import build_parser, format_learned_event, main
from lightroom_midi.core import MidiEvent


def test_parser_accepts_subcommands():
    parser = build_parser()

    args = parser.parse_args(["-c", "custom.cfg", "learn"])
    assert args.command == "learn"
    assert args.config == Path("custom.cfg")

    for command in ("start", "show-config", "parameters"):
        assert parser.parse_args([command]).command == command


def test_parser_requires_a_subcommand():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_learned_control_change_includes_mapping():
    text = format_learned_event(MidiEvent(type="cc", channel=0, controller=19, value=64))

    header, _, mapping = text.partition("JSON mapping:\n")
    assert header.splitlines() == [
        "Type: cc",
        "Channel: 0",
        "Controller: 19",
        "Value: 64",
        "",
    ]
    assert json.loads(mapping)["action"]["type"] == "setValue"


def test_learned_note_includes_mapping():
    text = format_learned_event(MidiEvent(type="noteon", channel=1, note=36, velocity=90))

    assert "Note: 36" in text
    assert "Velocity: 90" in text
    assert '"command": "YOUR_COMMAND_HERE"' in text


def test_learned_program_and_pitch_events():
    program = format_learned_event(MidiEvent(type="program", channel=0, number=3))

    assert program == "Type: program\nChannel: 0\nProgram: 3"
    assert format_learned_event(MidiEvent(type="pitch", channel=0, value=0)) is None


def test_show_config_prints_sections(tmp_path, capsys):
    config_path = tmp_path / "lightroom-midi.cfg"
    config_path.write_text("[lightroom]\nport = 9000\n", encoding="utf-8")

    assert main(["-c", str(config_path), "show-config"]) == 0

    output = capsys.readouterr().out
    assert "[lightroom]" in output
    assert "port = 9000" in output
    assert "[profiles]" in output
