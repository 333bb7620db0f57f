"""bfstep: steppable interpreter and debugger for the 8-instruction tape language.

Programs are parsed once into a validated instruction sequence with a
precomputed bracket jump table, then executed one atomic step at a time.
A ControlSession wraps a running engine with a small command protocol so
a front end can inspect and mutate execution between steps.

Architecture:
    SOURCE -> PROGRAM -> ENGINE.step() -> REGISTRY -> PRIMITIVE -> STATE
                            ^                                    |
                    CONTROL SESSION  <---- snapshot() -----------+
                  (commands, speed, tick)

Modules:
    program: Instruction alphabet, parsing and jump table
    tape: Byte cells with wraparound and a growable data pointer
    io_channel: Input queue and output accumulator
    state: ExecutionState and run Status
    registry: Frozen instruction -> primitive dispatch
    engine: ExecutionEngine (step, run_to_completion, snapshot)
    commands: Command types and the textual command parser
    session: ControlSession (command protocol and pacing)
    observability: Logging setup for front ends
    cli: Command line front end
"""

__version__ = "0.1.0"

from .errors import BfError, LoadError, UnmatchedBracket, TapeUnderflow, InvalidCommand
from .program import Instruction, LoadedInstruction, Program
from .tape import Tape
from .io_channel import IOChannel
from .state import ExecutionState, Status
from .registry import InstructionRegistry
from .engine import ExecutionEngine, StepResult
from .commands import parse_command
from .session import ControlSession, Lifecycle

__all__ = [
    "BfError", "LoadError", "UnmatchedBracket", "TapeUnderflow", "InvalidCommand",
    "Instruction", "LoadedInstruction", "Program",
    "Tape", "IOChannel", "ExecutionState", "Status", "InstructionRegistry",
    "ExecutionEngine", "StepResult", "parse_command", "ControlSession", "Lifecycle",
]
