"""Error types raised by bfstep.

Three kinds of failure exist:
    - UnmatchedBracket: load time, no Program is produced
    - TapeUnderflow: run time, the engine freezes in the Errored state
    - InvalidCommand: command time, the command is rejected and nothing changes
"""

from typing import Sequence, Tuple


class BfError(Exception):
    """Base class for all bfstep errors.

    Attributes:
        kind: Stable name of the error kind, used in snapshots and logs
    """

    kind = "BfError"


class LoadError(BfError):
    """Source text could not be turned into a Program."""

    kind = "LoadError"


class UnmatchedBracket(LoadError):
    """Brackets in the source are not well nested.

    Attributes:
        positions: Instruction indices of the offending brackets
    """

    kind = "UnmatchedBracket"

    def __init__(self, message: str, positions: Sequence[int] = ()):
        super().__init__(message)
        self.positions: Tuple[int, ...] = tuple(positions)


class TapeUnderflow(BfError):
    """The data pointer was moved left of cell 0."""

    kind = "TapeUnderflow"


class InvalidCommand(BfError):
    """A control command was malformed or not accepted in the current state."""

    kind = "InvalidCommand"
