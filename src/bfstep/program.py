"""Program: parsed, validated instruction sequence.

Source text is filtered through the 8-character alphabet; every other
character is a comment. Bracket pairs are resolved once into a
bidirectional jump table, so a loaded Program can never hit an
unmatched bracket at run time.

Alphabet:
    >  MOVE_RIGHT       <  MOVE_LEFT
    +  INCREMENT        -  DECREMENT
    .  OUTPUT           ,  INPUT
    [  JUMP_IF_ZERO     ]  JUMP_IF_NONZERO
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import UnmatchedBracket


class Instruction(Enum):
    """The eight instructions, valued by their source character."""

    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    INCREMENT = "+"
    DECREMENT = "-"
    OUTPUT = "."
    INPUT = ","
    JUMP_IF_ZERO = "["
    JUMP_IF_NONZERO = "]"

    @classmethod
    def from_char(cls, ch: str) -> Optional["Instruction"]:
        """Map a source character to its instruction, or None for comments."""
        return _BY_CHAR.get(ch)

    @property
    def is_jump(self) -> bool:
        return self in (Instruction.JUMP_IF_ZERO, Instruction.JUMP_IF_NONZERO)

    def __str__(self) -> str:
        return self.value


_BY_CHAR: Dict[str, Instruction] = {instr.value: instr for instr in Instruction}


@dataclass(frozen=True)
class LoadedInstruction:
    """An instruction together with where it came from.

    Attributes:
        instruction: The decoded instruction
        source_position: Character offset in the original source text
    """
    instruction: Instruction
    source_position: int


class Program:
    """Immutable instruction sequence plus bracket jump table.

    Build instances with Program.load(); the constructor trusts its
    arguments and is meant for load() only.

    Attributes:
        source: Original source text, comments included
    """

    def __init__(self, source: str, instructions: List[LoadedInstruction], jumps: Dict[int, int]):
        self.source = source
        self._instructions: Tuple[LoadedInstruction, ...] = tuple(instructions)
        self._jumps: Dict[int, int] = dict(jumps)

    @classmethod
    def load(cls, source: str) -> "Program":
        """Parse source text into a Program.

        Args:
            source: Program text; non-instruction characters are ignored

        Returns:
            Loaded Program with a complete jump table

        Raises:
            UnmatchedBracket: If a ']' has no opener or a '[' is never closed
        """
        instructions: List[LoadedInstruction] = []
        jumps: Dict[int, int] = {}
        open_brackets: List[int] = []

        for position, ch in enumerate(source):
            instruction = Instruction.from_char(ch)
            if instruction is None:
                continue

            index = len(instructions)
            if instruction is Instruction.JUMP_IF_ZERO:
                open_brackets.append(index)
            elif instruction is Instruction.JUMP_IF_NONZERO:
                if not open_brackets:
                    raise UnmatchedBracket(
                        f"Unmatched ']' at instruction {index} (source offset {position})",
                        positions=[index],
                    )
                opener = open_brackets.pop()
                jumps[opener] = index
                jumps[index] = opener

            instructions.append(LoadedInstruction(instruction, position))

        if open_brackets:
            raise UnmatchedBracket(
                f"Unmatched '[' at instruction(s) {', '.join(map(str, open_brackets))}",
                positions=open_brackets,
            )

        return cls(source, instructions, jumps)

    def __len__(self) -> int:
        return len(self._instructions)

    def instruction_at(self, index: int) -> Optional[Instruction]:
        """Get the instruction at index, or None past the end."""
        loaded = self.loaded_instruction_at(index)
        return loaded.instruction if loaded is not None else None

    def loaded_instruction_at(self, index: int) -> Optional[LoadedInstruction]:
        """Get the instruction at index with its source position, or None."""
        if 0 <= index < len(self._instructions):
            return self._instructions[index]
        return None

    def jump_partner(self, index: int) -> int:
        """Get the index of the bracket paired with the bracket at index.

        Raises:
            KeyError: If index is not a bracket instruction
        """
        try:
            return self._jumps[index]
        except KeyError:
            raise KeyError(f"No bracket at instruction {index}") from None

    def bracket_indices(self) -> List[int]:
        """Indices of all bracket instructions, in program order."""
        return sorted(self._jumps)

    def to_source(self) -> str:
        """The instruction text with comments stripped."""
        return "".join(loaded.instruction.value for loaded in self._instructions)

    def __repr__(self) -> str:
        return f"Program({len(self)} instructions)"
