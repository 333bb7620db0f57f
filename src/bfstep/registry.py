"""InstructionRegistry: frozen dispatch table of instruction primitives.

Each of the eight instructions maps to one primitive with the signature
(ExecutionState, Program, ip) -> next ip. Primitives only ever use the
program-driven Tape and IOChannel entry points.

Primitives:
    MOVE_RIGHT:      dp += 1, growing the tape
    MOVE_LEFT:       dp -= 1, TapeUnderflow at cell 0
    INCREMENT:       cell += 1 (mod 256)
    DECREMENT:       cell -= 1 (mod 256)
    OUTPUT:          emit cell
    INPUT:           cell = next input byte, 0 at end of input
    JUMP_IF_ZERO:    go to partner ']' if cell == 0
    JUMP_IF_NONZERO: go to partner '[' if cell != 0

The registry holds no run state, so a single instance can serve any
number of engines.
"""

from typing import Callable, Dict, Optional

from .program import Instruction, Program
from .state import ExecutionState

Primitive = Callable[[ExecutionState, Program, int], int]

# Value written by INPUT once the input queue is exhausted
END_OF_INPUT_VALUE = 0


class InstructionRegistry:
    """Registry mapping every Instruction to its primitive.

    The registry is frozen after initialization to ensure
    no runtime modifications can occur.

    Attributes:
        _primitives: Dictionary mapping instructions to handler functions
        _frozen: Whether the registry is locked against modifications
    """

    def __init__(self):
        self._primitives: Dict[Instruction, Primitive] = {}
        self._frozen = False
        self._register_all_primitives()
        self.freeze()

    def _register_all_primitives(self) -> None:
        # Pointer movement
        self.register(Instruction.MOVE_RIGHT, self._op_move_right)
        self.register(Instruction.MOVE_LEFT, self._op_move_left)

        # Cell arithmetic
        self.register(Instruction.INCREMENT, self._op_increment)
        self.register(Instruction.DECREMENT, self._op_decrement)

        # I/O
        self.register(Instruction.OUTPUT, self._op_output)
        self.register(Instruction.INPUT, self._op_input)

        # Control flow
        self.register(Instruction.JUMP_IF_ZERO, self._op_jump_if_zero)
        self.register(Instruction.JUMP_IF_NONZERO, self._op_jump_if_nonzero)

    def register(self, instruction: Instruction, handler: Primitive) -> None:
        """Register the primitive for an instruction.

        Raises:
            RuntimeError: If registry is frozen
            ValueError: If instruction already registered
        """
        if self._frozen:
            raise RuntimeError("Cannot register primitives: registry is frozen")
        if instruction in self._primitives:
            raise ValueError(f"Primitive already registered: {instruction.name}")
        self._primitives[instruction] = handler

    def freeze(self) -> None:
        self._frozen = True

    def is_frozen(self) -> bool:
        return self._frozen

    def registered(self) -> set:
        """Set of all instructions with a primitive."""
        return set(self._primitives)

    def execute(self, state: ExecutionState, program: Program, ip: int) -> int:
        """Apply the instruction at ip to state.

        Args:
            state: Live execution state, mutated in place
            program: Program being executed
            ip: Index of the instruction to apply

        Returns:
            The next instruction pointer

        Raises:
            KeyError: If there is no instruction at ip
            TapeUnderflow: If the instruction moves left of cell 0
        """
        instruction = program.instruction_at(ip)
        if instruction is None:
            raise KeyError(f"No instruction at {ip}")
        return self._primitives[instruction](state, program, ip)

    # =========================================================================
    # Pointer Movement
    # =========================================================================

    def _op_move_right(self, state: ExecutionState, program: Program, ip: int) -> int:
        state.tape.move_right()
        return ip + 1

    def _op_move_left(self, state: ExecutionState, program: Program, ip: int) -> int:
        state.tape.move_left()
        return ip + 1

    # =========================================================================
    # Cell Arithmetic
    # =========================================================================

    def _op_increment(self, state: ExecutionState, program: Program, ip: int) -> int:
        state.tape.increment()
        return ip + 1

    def _op_decrement(self, state: ExecutionState, program: Program, ip: int) -> int:
        state.tape.decrement()
        return ip + 1

    # =========================================================================
    # I/O
    # =========================================================================

    def _op_output(self, state: ExecutionState, program: Program, ip: int) -> int:
        state.io.emit(state.tape.read())
        return ip + 1

    def _op_input(self, state: ExecutionState, program: Program, ip: int) -> int:
        """Read one byte into the current cell; end of input writes 0."""
        value = state.io.next_input()
        state.tape.write(END_OF_INPUT_VALUE if value is None else value)
        return ip + 1

    # =========================================================================
    # Control Flow
    # =========================================================================

    def _op_jump_if_zero(self, state: ExecutionState, program: Program, ip: int) -> int:
        if state.tape.read() == 0:
            return program.jump_partner(ip)
        return ip + 1

    def _op_jump_if_nonzero(self, state: ExecutionState, program: Program, ip: int) -> int:
        if state.tape.read() != 0:
            return program.jump_partner(ip)
        return ip + 1


_registry: Optional[InstructionRegistry] = None


def get_registry() -> InstructionRegistry:
    """Get the shared, frozen InstructionRegistry instance."""
    global _registry
    if _registry is None:
        _registry = InstructionRegistry()
    return _registry
