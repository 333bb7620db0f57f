"""Tests for Tape memory."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from bfstep.errors import TapeUnderflow
from bfstep.tape import Tape


@pytest.fixture
def tape():
    return Tape()


class TestTapeCreation:

    def test_default_tape(self, tape):
        """A new tape has one zero cell under the pointer."""
        assert tape.pointer == 0
        assert len(tape) == 1
        assert tape.read() == 0
        assert tape.cells() == [0]


class TestCellArithmetic:
    """Test modulo-256 cell arithmetic."""

    def test_increment(self, tape):
        tape.increment()
        tape.increment()
        assert tape.read() == 2

    def test_increment_wraps(self, tape):
        """255 + 1 wraps to 0."""
        tape.write(255)
        tape.increment()
        assert tape.read() == 0

    def test_decrement_wraps(self, tape):
        """0 - 1 wraps to 255."""
        tape.decrement()
        assert tape.read() == 255

    def test_full_cycle(self, tape):
        """256 increments return to the start value."""
        tape.write(7)
        for _ in range(256):
            tape.increment()
        assert tape.read() == 7

    def test_write_rejects_non_byte(self, tape):
        with pytest.raises(ValueError):
            tape.write(256)
        with pytest.raises(ValueError):
            tape.write(-1)
        assert tape.read() == 0


class TestPointerMovement:
    """Test move_right growth and move_left underflow."""

    def test_move_right_allocates_one_cell(self, tape):
        """Moving past the end allocates exactly one zero cell."""
        tape.move_right()
        assert tape.pointer == 1
        assert len(tape) == 2
        assert tape.read() == 0

    def test_move_right_within_allocation(self, tape):
        """Moving inside the allocated cells does not grow the tape."""
        tape.set_pointer(5)
        tape.set_pointer(0)
        tape.move_right()
        assert len(tape) == 6

    def test_move_left(self, tape):
        tape.move_right()
        tape.move_left()
        assert tape.pointer == 0

    def test_move_left_underflow(self, tape):
        """move_left at cell 0 raises and leaves the pointer at 0."""
        with pytest.raises(TapeUnderflow):
            tape.move_left()
        assert tape.pointer == 0
        assert len(tape) == 1


class TestOperatorMutation:
    """Test the command-layer entry points."""

    def test_set_pointer_grows(self, tape):
        """set_pointer beyond the end grows with zero cells."""
        tape.set_pointer(4)
        assert tape.pointer == 4
        assert tape.cells() == [0, 0, 0, 0, 0]

    def test_set_pointer_negative(self, tape):
        with pytest.raises(ValueError):
            tape.set_pointer(-1)
        assert tape.pointer == 0

    def test_set_cell(self, tape):
        """set_cell writes any index without moving the pointer."""
        tape.set_cell(2, 65)
        assert tape.cells() == [0, 0, 65]
        assert tape.pointer == 0

    def test_set_cell_rejects_value_without_growing(self, tape):
        with pytest.raises(ValueError):
            tape.set_cell(3, 300)
        assert len(tape) == 1

    def test_clear(self, tape):
        """clear zeroes every cell and keeps the pointer."""
        tape.set_cell(0, 1)
        tape.set_cell(3, 9)
        tape.set_pointer(2)
        tape.clear()
        assert tape.cells() == [0, 0, 0, 0]
        assert tape.pointer == 2

    def test_snapshot_is_copy(self, tape):
        """Snapshot does not alias the live cells."""
        tape.set_cell(1, 42)
        snapshot = tape.snapshot()
        assert snapshot == {"dp": 0, "tape": [0, 42]}
        snapshot["tape"][1] = 999
        assert tape.cells()[1] == 42
