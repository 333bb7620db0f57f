"""Tape: growable cell memory with a data pointer.

Cells are unsigned bytes and all arithmetic wraps modulo 256. The tape
starts with a single zero cell and grows to the right on demand; moving
left of cell 0 is an error rather than a clamp.

Two mutation paths exist and are kept apart:
    - Program-driven: read/write/increment/decrement/move_* (engine only)
    - Operator-driven: set_pointer/set_cell/clear (command layer only)
"""

from typing import List

from .errors import TapeUnderflow


class Tape:
    """Byte cells and the data pointer.

    Attributes:
        CELL_MODULUS: Number of distinct cell values
    """

    CELL_MODULUS = 256

    def __init__(self):
        self._cells: List[int] = [0]
        self._pointer = 0

    @property
    def pointer(self) -> int:
        """Current data pointer."""
        return self._pointer

    def __len__(self) -> int:
        return len(self._cells)

    def read(self) -> int:
        """Value of the cell under the pointer."""
        return self._cells[self._pointer]

    def write(self, value: int) -> None:
        """Overwrite the cell under the pointer.

        Raises:
            ValueError: If value is not a byte
        """
        self._cells[self._pointer] = self._check_value(value)

    def increment(self) -> None:
        self._cells[self._pointer] = (self._cells[self._pointer] + 1) % self.CELL_MODULUS

    def decrement(self) -> None:
        self._cells[self._pointer] = (self._cells[self._pointer] - 1) % self.CELL_MODULUS

    def move_right(self) -> None:
        """Advance the pointer, allocating one zero cell past the end."""
        self._pointer += 1
        if self._pointer >= len(self._cells):
            self._cells.append(0)

    def move_left(self) -> None:
        """Move the pointer back one cell.

        Raises:
            TapeUnderflow: If the pointer is already at cell 0
        """
        if self._pointer == 0:
            raise TapeUnderflow("Data pointer moved left of cell 0")
        self._pointer -= 1

    # =========================================================================
    # Operator-driven mutation
    # =========================================================================

    def set_pointer(self, index: int) -> None:
        """Point at index, growing the tape with zero cells if needed.

        Raises:
            ValueError: If index is negative
        """
        self._ensure(index)
        self._pointer = index

    def set_cell(self, index: int, value: int) -> None:
        """Store value at index, growing the tape with zero cells if needed.

        Raises:
            ValueError: If index is negative or value is not a byte
        """
        value = self._check_value(value)
        self._ensure(index)
        self._cells[index] = value

    def clear(self) -> None:
        """Zero every allocated cell; the pointer stays where it is."""
        self._cells = [0] * len(self._cells)

    # =========================================================================
    # Inspection
    # =========================================================================

    def cells(self) -> List[int]:
        """Copy of all allocated cells."""
        return list(self._cells)

    def snapshot(self) -> dict:
        """Copy of the pointer and cells for tracing and display."""
        return {"dp": self._pointer, "tape": self.cells()}

    def __repr__(self) -> str:
        return f"Tape(dp={self._pointer}, cells={len(self._cells)})"

    def _ensure(self, index: int) -> None:
        if index < 0:
            raise ValueError(f"Invalid cell index: {index}")
        if index >= len(self._cells):
            self._cells.extend([0] * (index + 1 - len(self._cells)))

    def _check_value(self, value: int) -> int:
        if not 0 <= value < self.CELL_MODULUS:
            raise ValueError(f"Cell value out of range 0..{self.CELL_MODULUS - 1}: {value}")
        return value
