"""ExecutionEngine: the single-step transition and the batch run loop.

Execution pipeline per step:
    ip -> FETCH -> REGISTRY -> PRIMITIVE -> (tape, io, next ip)

The engine owns one Program, one Tape and one IOChannel. Run-time errors
never escape step(): they freeze the engine in the Errored state with ip
left on the failing instruction, so a debugger can inspect and repair
the state before restarting.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import BfError
from .io_channel import IOChannel, InputData
from .program import Program
from .registry import InstructionRegistry, get_registry
from .state import ExecutionState, Status, create_initial_state
from .tape import Tape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    """Outcome of one step() call.

    Attributes:
        status: Status after the step
        error_kind: Error kind when Errored
        error_message: Error text when Errored
    """
    status: Status
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def running(self) -> bool:
        return self.status is Status.RUNNING


@dataclass
class ExecutionTraceEntry:
    """Single entry in the execution trace.

    Attributes:
        cycle: Cycle number before the step
        ip: Instruction pointer the step started from
        instruction: Source character of the instruction, or "<end>"
        pre_state: Snapshot before the step
        post_state: Snapshot after the step
        error: Error message if the step failed
    """
    cycle: int
    ip: int
    instruction: str
    pre_state: dict
    post_state: dict
    error: Optional[str] = None


class ExecutionEngine:
    """Steppable interpreter for one loaded Program.

    Attributes:
        program: The Program being executed
        state: Live ExecutionState (ip, tape, io, status)
        trace: Recorded trace entries when tracing is enabled
        trace_enabled: Whether step() records trace entries
        trace_limit: Keep only this many most recent entries; None keeps all
    """

    def __init__(
        self,
        program: Program,
        stdin: Optional[InputData] = None,
        trace: bool = False,
        registry: Optional[InstructionRegistry] = None,
        trace_limit: Optional[int] = None,
    ):
        """Initialize an engine with a fresh tape and IO channel.

        Args:
            program: Loaded Program
            stdin: Optional bytes to seed the input queue with
            trace: Record an ExecutionTraceEntry per step
            registry: Primitive registry (shared frozen instance by default)
            trace_limit: Cap on retained trace entries
        """
        self.program = program
        self.registry = registry or get_registry()
        self.state: ExecutionState = create_initial_state(stdin)
        self.trace_enabled = trace
        self.trace_limit = trace_limit
        self.trace: List[ExecutionTraceEntry] = []

    @classmethod
    def build(
        cls,
        source: str,
        stdin: Optional[InputData] = None,
        trace: bool = False,
        trace_limit: Optional[int] = None,
    ) -> "ExecutionEngine":
        """Load source text and construct an engine for it.

        Raises:
            UnmatchedBracket: If the source has unbalanced brackets
        """
        return cls(Program.load(source), stdin=stdin, trace=trace, trace_limit=trace_limit)

    # =========================================================================
    # State surface
    # =========================================================================

    @property
    def tape(self) -> Tape:
        return self.state.tape

    @property
    def io(self) -> IOChannel:
        return self.state.io

    @property
    def ip(self) -> int:
        return self.state.ip

    @property
    def status(self) -> Status:
        return self.state.status

    def is_finished(self) -> bool:
        """True once the run is Halted or Errored."""
        return self.state.status.is_terminal

    # =========================================================================
    # Execution
    # =========================================================================

    def step(self) -> StepResult:
        """Execute a single instruction.

        A terminal engine is left untouched and reports its status again.

        Returns:
            StepResult with the status after the step
        """
        state = self.state
        if state.status.is_terminal:
            return self._result()

        ip = state.ip
        pre_state = state.snapshot() if self.trace_enabled else None
        instruction = self.program.instruction_at(ip)

        if instruction is None:
            state.status = Status.HALTED
            logger.debug("Program halted after %d cycles", state.cycles)
        else:
            try:
                next_ip = self.registry.execute(state, self.program, ip)
            except BfError as e:
                state.status = Status.ERRORED
                state.error_kind = e.kind
                state.error_message = str(e)
                logger.warning(
                    "Execution failed at ip=%d: %s",
                    ip,
                    e,
                    extra={"ip": ip, "dp": state.tape.pointer, "error_kind": e.kind},
                )
            else:
                state.ip = next_ip
                state.last_executed = ip
                state.cycles += 1

        if pre_state is not None:
            self.trace.append(ExecutionTraceEntry(
                cycle=pre_state["cycles"],
                ip=ip,
                instruction=instruction.value if instruction is not None else "<end>",
                pre_state=pre_state,
                post_state=state.snapshot(),
                error=state.error_message,
            ))
            if self.trace_limit is not None and len(self.trace) > self.trace_limit:
                del self.trace[:len(self.trace) - self.trace_limit]

        return self._result()

    def run_to_completion(self, max_cycles: Optional[int] = None) -> StepResult:
        """Step until the run is Halted or Errored.

        Args:
            max_cycles: Optional cap on executed cycles; None runs unbounded

        Returns:
            The terminal StepResult

        Raises:
            RuntimeError: If max_cycles is reached while still Running
        """
        result = self._result()
        while result.running:
            if max_cycles is not None and self.state.cycles >= max_cycles:
                raise RuntimeError(f"Max cycles ({max_cycles}) exceeded")
            result = self.step()
        return result

    def restart(self) -> None:
        """Start a new run at ip 0, dp 0; tape contents and IO are kept."""
        state = self.state
        state.ip = 0
        state.tape.set_pointer(0)
        state.status = Status.RUNNING
        state.error_kind = None
        state.error_message = None
        state.cycles = 0
        state.last_executed = None

    # =========================================================================
    # Inspection
    # =========================================================================

    def snapshot(self) -> dict:
        """Read-only copy of ip, dp, tape, IO and status."""
        snap = self.state.snapshot()
        snap["last_position"] = self._source_position(self.state.last_executed)
        snap["next_position"] = self._source_position(self.state.ip)
        return snap

    def failure(self) -> Optional[Tuple[int, str, dict]]:
        """(ip, error kind, tape snapshot) when Errored, else None."""
        if self.state.status is not Status.ERRORED:
            return None
        return self.state.ip, self.state.error_kind, self.state.tape.snapshot()

    def get_summary(self) -> Dict:
        """Execution summary for batch front ends."""
        return {
            "cycles": self.state.cycles,
            "status": self.state.status.value,
            "ip": self.state.ip,
            "dp": self.state.tape.pointer,
            "error": self.state.error_message,
            "output_length": len(self.state.io.peek_output()),
            "trace_length": len(self.trace),
        }

    def _result(self) -> StepResult:
        return StepResult(self.state.status, self.state.error_kind, self.state.error_message)

    def _source_position(self, index: Optional[int]) -> Optional[int]:
        if index is None:
            return None
        loaded = self.program.loaded_instruction_at(index)
        return loaded.source_position if loaded is not None else None

    def __repr__(self) -> str:
        return f"ExecutionEngine({self.program!r}, {self.state})"
