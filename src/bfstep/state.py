"""ExecutionState: mutable run state owned by one ExecutionEngine.

State Components:
    - ip: Instruction pointer (may equal the program length: past the end)
    - tape: Cell memory and data pointer
    - io: Input queue and output accumulator
    - status: Running, Halted or Errored
    - error: Error kind and message while Errored
    - cycles: Number of instructions executed in the current run
    - last_executed: Index of the most recently executed instruction
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .io_channel import IOChannel, InputData
from .tape import Tape


class Status(Enum):
    """Lifecycle of a single run."""

    RUNNING = "Running"
    HALTED = "Halted"
    ERRORED = "Errored"

    @property
    def is_terminal(self) -> bool:
        return self is not Status.RUNNING

    def __str__(self) -> str:
        return self.value


@dataclass
class ExecutionState:
    """Everything a step reads or writes.

    Attributes:
        ip: Instruction pointer
        tape: Cell memory
        io: Input and output buffers
        status: Current lifecycle status
        error_kind: Name of the error while Errored, else None
        error_message: Human-readable error while Errored, else None
        cycles: Instructions executed since the run started
        last_executed: Index of the last executed instruction, if any
    """
    ip: int = 0
    tape: Tape = field(default_factory=Tape)
    io: IOChannel = field(default_factory=IOChannel)
    status: Status = Status.RUNNING
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    cycles: int = 0
    last_executed: Optional[int] = None

    def snapshot(self) -> dict:
        """Copy of all observable state for tracing and display.

        Returns:
            Dictionary detached from the live state
        """
        return {
            "ip": self.ip,
            "dp": self.tape.pointer,
            "tape": self.tape.cells(),
            "pending_input": self.io.pending_input,
            "output": self.io.peek_output(),
            "status": self.status.value,
            "error": self.error_kind,
            "cycles": self.cycles,
        }

    def __str__(self) -> str:
        tail = f" {self.error_kind}" if self.error_kind else ""
        return (
            f"[Cycle {self.cycles}] IP={self.ip} DP={self.tape.pointer} "
            f"CELL={self.tape.read()} {self.status.value.upper()}{tail}"
        )


def create_initial_state(stdin: Optional[InputData] = None) -> ExecutionState:
    """Create a fresh Running state with an empty tape.

    Args:
        stdin: Optional bytes to seed the input queue with

    Returns:
        New ExecutionState at ip 0
    """
    return ExecutionState(ip=0, tape=Tape(), io=IOChannel(stdin))
