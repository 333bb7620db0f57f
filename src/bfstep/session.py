"""ControlSession: interactive control of a live ExecutionEngine.

The session applies commands between steps and paces stepping from a
speed value (steps per second). Pacing is driven from outside: a front
end calls tick(now) from its own timer or event loop with a monotonic
clock reading, and the session decides whether a step is due. Nothing
here sleeps, so commands and steps interleave strictly one at a time.
"""

import logging
import math
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .commands import (
    ClearData, ClearIO, Command, Load, Pause, Quit, Reset, Restart,
    SetData, SetDataPointer, SetInstructionPointer, SetSpeed, Start, Step,
    parse_command,
)
from .engine import ExecutionEngine, StepResult
from .errors import InvalidCommand, LoadError
from .io_channel import InputData
from .program import Program

logger = logging.getLogger(__name__)


class Lifecycle(Enum):
    ACTIVE = "Active"
    QUIT = "Quit"


class ControlSession:
    """Command protocol and pacing around one ExecutionEngine.

    Attributes:
        engine: The engine being controlled; replaced wholesale on reset
        speed: Steps per second for paced execution
        paused: Whether tick() is currently allowed to step
        lifecycle: Active until a quit command is applied
    """

    DEFAULT_SPEED = 10.0

    def __init__(self, engine: ExecutionEngine, speed: float = DEFAULT_SPEED, paused: bool = True):
        if not speed > 0:
            raise ValueError(f"Speed must be positive: {speed}")
        self.engine = engine
        self.speed = float(speed)
        self.paused = paused
        self.lifecycle = Lifecycle.ACTIVE
        self._last_step_time: Optional[float] = None

    @classmethod
    def from_source(
        cls,
        source: str,
        stdin: Optional[InputData] = None,
        speed: float = DEFAULT_SPEED,
        **engine_options,
    ) -> "ControlSession":
        """Load source text and open a paused session on it.

        Extra keyword arguments (trace, trace_limit) go to ExecutionEngine.build.

        Raises:
            UnmatchedBracket: If the source has unbalanced brackets
        """
        return cls(ExecutionEngine.build(source, stdin=stdin, **engine_options), speed=speed)

    @property
    def active(self) -> bool:
        return self.lifecycle is Lifecycle.ACTIVE

    @property
    def delay(self) -> float:
        """Seconds between paced steps."""
        return 1.0 / self.speed

    # =========================================================================
    # Commands
    # =========================================================================

    def execute(self, text: str) -> Command:
        """Parse and apply one line of command text.

        Returns:
            The command that was applied

        Raises:
            InvalidCommand: If the text is malformed or the command is rejected
        """
        try:
            command = parse_command(text)
            self.apply(command)
        except InvalidCommand as e:
            logger.info("Rejected command %r: %s", text, e, extra={"command": text})
            raise
        return command

    def apply(self, command: Command) -> Optional[StepResult]:
        """Apply a parsed command; all-or-nothing.

        Returns:
            The StepResult for a step command, otherwise None

        Raises:
            InvalidCommand: If a precondition fails or the session has quit
        """
        self._ensure_active()
        engine = self.engine
        result = None

        if isinstance(command, SetInstructionPointer):
            if not 0 <= command.index <= len(engine.program):
                raise InvalidCommand(
                    f"instruction pointer must be within 0..{len(engine.program)}: {command.index}"
                )
            engine.state.ip = command.index

        elif isinstance(command, SetDataPointer):
            if command.index < 0:
                raise InvalidCommand(f"data pointer must not be negative: {command.index}")
            engine.tape.set_pointer(command.index)

        elif isinstance(command, SetData):
            index = engine.tape.pointer if command.index is None else command.index
            if index < 0:
                raise InvalidCommand(f"cell index must not be negative: {index}")
            if not 0 <= command.value <= 255:
                raise InvalidCommand(f"cell value must be within 0..255: {command.value}")
            engine.tape.set_cell(index, command.value)

        elif isinstance(command, SetSpeed):
            if not (command.speed > 0 and math.isfinite(command.speed)):
                raise InvalidCommand(f"speed must be a positive number: {command.speed}")
            self.speed = float(command.speed)

        elif isinstance(command, ClearData):
            engine.tape.clear()

        elif isinstance(command, ClearIO):
            engine.io.clear()

        elif isinstance(command, Restart):
            engine.restart()
            self._last_step_time = None

        elif isinstance(command, Reset):
            self._rebuild(engine.program)

        elif isinstance(command, Load):
            self._rebuild(self._read_program(command.path))

        elif isinstance(command, Start):
            self.paused = False
            self._last_step_time = None

        elif isinstance(command, Pause):
            self.paused = True

        elif isinstance(command, Step):
            result = engine.step()

        elif isinstance(command, Quit):
            self.lifecycle = Lifecycle.QUIT

        else:
            raise InvalidCommand(f"unsupported command: {command!r}")

        logger.debug("Applied %r", command, extra={"command": repr(command)})
        return result

    # =========================================================================
    # Stepping
    # =========================================================================

    def step(self) -> StepResult:
        """Execute exactly one step now, regardless of pause and pacing.

        Raises:
            InvalidCommand: If the session has quit
        """
        self._ensure_active()
        return self.engine.step()

    def tick(self, now: float) -> Optional[StepResult]:
        """Step once if a paced step is due at time now.

        Args:
            now: Monotonic clock reading in seconds

        Returns:
            StepResult if a step was taken, otherwise None
        """
        if not self.active or self.paused or self.engine.is_finished():
            return None
        if self._last_step_time is not None and now - self._last_step_time < self.delay:
            return None
        self._last_step_time = now
        return self.engine.step()

    # =========================================================================
    # Inspection
    # =========================================================================

    def snapshot(self) -> dict:
        """Engine snapshot plus speed, pause and lifecycle."""
        snap = self.engine.snapshot()
        snap["speed"] = self.speed
        snap["paused"] = self.paused
        snap["active"] = self.active
        return snap

    def _ensure_active(self) -> None:
        if not self.active:
            raise InvalidCommand("session has quit")

    def _rebuild(self, program: Program) -> None:
        """Replace the engine with a fresh one; speed and pause are kept."""
        self.engine = ExecutionEngine(
            program, trace=self.engine.trace_enabled, trace_limit=self.engine.trace_limit
        )
        self._last_step_time = None

    def _read_program(self, path: Union[str, Path]) -> Program:
        try:
            # non-UTF-8 bytes can only be comments
            source = Path(path).read_bytes().decode("utf-8", errors="replace")
            return Program.load(source)
        except (OSError, LoadError) as e:
            raise InvalidCommand(f"could not load {path}: {e}") from e

    def __repr__(self) -> str:
        return f"ControlSession({self.lifecycle.value}, speed={self.speed}, paused={self.paused})"
