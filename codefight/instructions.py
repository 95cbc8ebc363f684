"""
CodeFight Instruction Set

The nine opcodes a program may use, the instruction triple stored in each
arena cell, and parsing/formatting of program scripts.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union
import re

from .errors import ConfigurationError


# Operands are stored as signed 32-bit values
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


class OpCode(Enum):
    """CodeFight operation codes, in declaration order."""
    STOP = "STOP"    # Stop - eliminates the executing program
    MOV_R = "MOV_R"  # Move relative - copy cell(P+A) to cell(P+B)
    MOV_I = "MOV_I"  # Move indirect - copy cell(P+A) through cell(P+B).B
    ADD = "ADD"      # Add - B := A + B in the current cell
    ADD_R = "ADD_R"  # Add relative - add A to the B field of cell(P+B)
    JMP = "JMP"      # Jump - move pointer by A
    JMZ = "JMZ"      # Jump if zero - jump by A if cell(P+B).B is zero
    CMP = "CMP"      # Compare - skip next if cell(P+A).A != cell(P+B).B
    SWAP = "SWAP"    # Swap - exchange cell(P+A).A with cell(P+B).B


# Ordered opcode names; the arena seeder indexes into this
OPCODE_NAMES: Tuple[str, ...] = tuple(op.value for op in OpCode)


@dataclass(frozen=True)
class Instruction:
    """A single CodeFight instruction: opcode plus two operands."""
    opcode: OpCode = OpCode.STOP
    a_value: int = 0
    b_value: int = 0

    def copy(self) -> "Instruction":
        """Create a copy of this instruction."""
        return Instruction(self.opcode, self.a_value, self.b_value)

    def as_tuple(self) -> Tuple[str, int, int]:
        return self.opcode.value, self.a_value, self.b_value

    def __str__(self) -> str:
        return f"{self.opcode.value}|{self.a_value}|{self.b_value}"


ScriptEntry = Union[Instruction, Sequence]


def parse_opcode(name: str) -> OpCode:
    """Look up an opcode by mnemonic (case-insensitive)."""
    try:
        return OpCode(name.strip().upper())
    except (ValueError, AttributeError):
        raise ConfigurationError(f"unknown opcode '{name}'")


def _parse_operand(value) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"operand must be an integer, got {value!r}")
    if isinstance(value, int):
        operand = value
    else:
        try:
            operand = int(str(value).strip())
        except ValueError:
            raise ConfigurationError(f"operand must be an integer, got {value!r}")
    if not INT_MIN <= operand <= INT_MAX:
        raise ConfigurationError(f"operand {operand} is outside the 32-bit range")
    return operand


def make_instruction(entry: ScriptEntry) -> Instruction:
    """
    Validate one script entry.

    Accepts an ``Instruction`` or an ``(opcode, a, b)`` triple where the
    opcode may be an ``OpCode`` or its mnemonic.
    """
    if isinstance(entry, Instruction):
        opcode, a_value, b_value = entry.opcode, entry.a_value, entry.b_value
    else:
        if isinstance(entry, str) or len(entry) != 3:
            raise ConfigurationError(f"expected (opcode, a, b), got {entry!r}")
        opcode, a_value, b_value = entry

    if not isinstance(opcode, OpCode):
        opcode = parse_opcode(str(opcode))
    return Instruction(opcode, _parse_operand(a_value), _parse_operand(b_value))


def make_script(entries: Iterable[ScriptEntry]) -> List[Instruction]:
    """Validate a whole script; raises ConfigurationError on the first bad entry."""
    instructions = [make_instruction(entry) for entry in entries]
    if not instructions:
        raise ConfigurationError("a program needs at least one instruction")
    return instructions


def parse_instruction(line: str) -> Optional[Instruction]:
    """
    Parse a single instruction line such as ``MOV_R 0 1`` or ``JMP, -2, 0``.

    Returns None for blank or comment-only lines.
    """
    # Remove comments
    for marker in (";", "#"):
        if marker in line:
            line = line[:line.index(marker)]

    line = line.strip()
    if not line:
        return None

    parts = [part for part in re.split(r"[\s,|]+", line) if part]
    if len(parts) != 3:
        raise ConfigurationError(f"malformed instruction '{line}'")
    return make_instruction(parts)


def parse_program(source: str) -> List[Instruction]:
    """Parse a multi-line program script."""
    instructions = []
    for line in source.strip().split("\n"):
        instruction = parse_instruction(line)
        if instruction:
            instructions.append(instruction)
    if not instructions:
        raise ConfigurationError("a program needs at least one instruction")
    return instructions


def parse_argument_list(arguments: str) -> List[Instruction]:
    """
    Parse the compact command-line form ``OP,A,B,OP,A,B,...``.

    Raises:
        ConfigurationError: if the list is not made of complete triples
    """
    tokens = [token.strip() for token in arguments.strip().split(",")]
    if not tokens or len(tokens) % 3 != 0:
        raise ConfigurationError(
            "the argument format should be: [Name] [Command name],[int],[int]"
        )
    triples = [tokens[i:i + 3] for i in range(0, len(tokens), 3)]
    return make_script(triples)


def program_to_string(instructions: Sequence[Instruction]) -> str:
    """Convert a script back to its multi-line text form."""
    return "\n".join(
        f"{instr.opcode.value} {instr.a_value} {instr.b_value}"
        for instr in instructions
    )


# Classic example programs
PROGRAMS = {
    "imp": """
; copies itself one cell forward, then follows the copy
MOV_R 0 1
""",

    "dwarf": """
; bombs every fourth cell with the STOP below it
ADD_R 4 3
MOV_I 2 2
JMP -2 0
STOP 0 0
""",

    "sitter": """
; loops in place until someone overwrites it
JMP 0 0
""",

    "swapper": """
; scrambles operands ahead of itself
SWAP 3 5
ADD 1 0
JMP -2 0
""",
}
