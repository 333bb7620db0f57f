"""Tests for the textual command parser."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from bfstep.commands import (
    ClearData, ClearIO, Load, Pause, Quit, Reset, Restart,
    SetData, SetDataPointer, SetInstructionPointer, SetSpeed, Start, Step,
    parse_command, parse_int, parse_speed,
)
from bfstep.errors import InvalidCommand


class TestParseInt:
    """Test integer literals in all supported radixes."""

    @pytest.mark.parametrize("text,value", [
        ("65", 65),
        ("+65", 65),
        ("-3", -3),
        ("0x41", 65),
        ("0X41", 65),
        ("41h", 65),
        ("0o101", 65),
        ("0b1000001", 65),
        ("-0x10", -16),
    ])
    def test_valid(self, text, value):
        assert parse_int(text) == value

    @pytest.mark.parametrize("text", ["", "abc", "1.5", "0x", "12 3", "0b102"])
    def test_invalid(self, text):
        with pytest.raises(InvalidCommand):
            parse_int(text)

    def test_speed_accepts_decimal(self):
        assert parse_speed("2.5") == 2.5
        assert parse_speed("20") == 20.0
        assert parse_speed(".5") == 0.5

    def test_speed_rejects_text(self):
        with pytest.raises(InvalidCommand):
            parse_speed("fast")

    def test_speed_too_large_for_float(self):
        """An integer literal beyond float range is rejected, not raised raw."""
        with pytest.raises(InvalidCommand):
            parse_command("set speed = 1" + "0" * 400)


class TestSetCommands:
    """Test set command targets."""

    @pytest.mark.parametrize("text", [
        "set ip = 3",
        "set IP=3",
        "SET instruction pointer = 3",
        "set instruction   pointer=0x3",
    ])
    def test_instruction_pointer(self, text):
        assert parse_command(text) == SetInstructionPointer(3)

    @pytest.mark.parametrize("text", ["set dp = 4", "set data pointer = 4", "Set Dp=4"])
    def test_data_pointer(self, text):
        assert parse_command(text) == SetDataPointer(4)

    def test_data_pointer_negative_parses(self):
        """Range checks happen when the command is applied."""
        assert parse_command("set dp = -1") == SetDataPointer(-1)

    @pytest.mark.parametrize("text,expected", [
        ("set data = 65", SetData(65)),
        ("set d = 65", SetData(65)),
        ("set data[2] = 65", SetData(65, index=2)),
        ("set d [ 2 ] = 0x41", SetData(65, index=2)),
        ("set data 2 = 65", SetData(65, index=2)),
        ("set DATA[0]=1", SetData(1, index=0)),
    ])
    def test_data(self, text, expected):
        assert parse_command(text) == expected

    @pytest.mark.parametrize("text,speed", [
        ("set speed = 20", 20.0),
        ("set speed = 0.5", 0.5),
    ])
    def test_speed(self, text, speed):
        assert parse_command(text) == SetSpeed(speed)


class TestOtherCommands:

    @pytest.mark.parametrize("text,expected", [
        ("clear data", ClearData()),
        ("CLEAR IO", ClearIO()),
        ("restart", Restart()),
        ("reset", Reset()),
        ("quit", Quit()),
        ("  Quit  ", Quit()),
        ("start", Start()),
        ("pause", Pause()),
        ("step", Step()),
    ])
    def test_keywords(self, text, expected):
        assert parse_command(text) == expected

    def test_load(self):
        """The path keeps its case and inner spaces."""
        assert parse_command("load My Programs/hello.bf") == Load("My Programs/hello.bf")


class TestInvalidCommands:
    """Malformed commands raise InvalidCommand."""

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "jump 3",
        "set",
        "set foo = 1",
        "set ip",
        "set ip 3",
        "set ip =",
        "set ip = three",
        "set ip = 1 2",
        "set ip[1] = 2",
        "set dp 2 = 1",
        "set speed[0] = 1",
        "set data[] = 1",
        "set data[x] = 1",
        "set data = abc",
        "set speed = fast",
        "clear",
        "clear tape",
        "restart now",
        "quit 1",
        "load",
    ])
    def test_rejected(self, text):
        with pytest.raises(InvalidCommand):
            parse_command(text)

    def test_unknown_variable_message(self):
        with pytest.raises(InvalidCommand, match="unknown variable 'foo'"):
            parse_command("set foo = 1")
