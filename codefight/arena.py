"""
Memory Arena

The shared circular memory that every program in a match reads and writes.
All addressing wraps around, so any integer is a valid address.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence
import logging

from .instructions import Instruction, OpCode

logger = logging.getLogger(__name__)


def addr(index: int, size: int) -> int:
    """Resolve any integer to an arena address in ``[0, size)``."""
    return ((index % size) + size) % size


@dataclass(frozen=True)
class ProgramIdentity:
    """Stable key of a placed program; ``id`` is -1 unless the name is duplicated."""
    name: str
    id: int = -1

    @property
    def label(self) -> str:
        if self.id == -1:
            return self.name
        return f"{self.name}#{self.id}"

    def __str__(self) -> str:
        return self.label


@dataclass
class Cell:
    """One arena slot with its write provenance."""
    opcode: OpCode = OpCode.STOP
    a_value: int = 0
    b_value: int = 0
    last_modified_by: Optional[ProgramIdentity] = None
    touched_since_placement: bool = False

    @property
    def instruction(self) -> Instruction:
        return Instruction(self.opcode, self.a_value, self.b_value)


@dataclass(frozen=True)
class CellView:
    """Read-only snapshot of a cell, as handed out by inspection calls."""
    address: int
    opcode: OpCode
    a_value: int
    b_value: int
    last_modified_by: Optional[ProgramIdentity]
    touched_since_placement: bool

    @property
    def instruction(self) -> Instruction:
        return Instruction(self.opcode, self.a_value, self.b_value)


class MemoryArena:
    """
    Fixed-length circular array of cells.

    ``read`` and ``write`` accept any integer address; the address is
    wrapped with :func:`addr` before use, so neither can fail.
    """

    def __init__(self, size: int):
        """
        Initialize the arena.

        Args:
            size: Number of cells (must be positive)
        """
        if size <= 0:
            raise ValueError(f"arena size must be positive, got {size}")
        self._size = size
        self.cells: List[Cell] = [Cell() for _ in range(size)]

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def normalize(self, index: int) -> int:
        """Normalize an address to be within arena bounds."""
        return addr(index, self._size)

    def read(self, index: int) -> Cell:
        """Read the cell at an address."""
        return self.cells[self.normalize(index)]

    def write(
        self,
        index: int,
        by: ProgramIdentity,
        opcode: Optional[OpCode] = None,
        a_value: Optional[int] = None,
        b_value: Optional[int] = None,
    ) -> Cell:
        """
        Update some fields of a cell and stamp it with the writer.

        Fields left as None keep their current value.
        """
        cell = self.read(index)
        if opcode is not None:
            cell.opcode = opcode
        if a_value is not None:
            cell.a_value = a_value
        if b_value is not None:
            cell.b_value = b_value
        cell.last_modified_by = by
        cell.touched_since_placement = True
        return cell

    def copy_cell(self, source: int, target: int, by: ProgramIdentity) -> Cell:
        """Copy the full (opcode, A, B) triple of one cell onto another."""
        src = self.read(source)
        # read the triple before writing, source and target may coincide
        opcode, a_value, b_value = src.opcode, src.a_value, src.b_value
        return self.write(target, by, opcode, a_value, b_value)

    def load(self, index: int, instruction: Instruction, by: ProgramIdentity):
        """Place a script instruction without marking the cell as touched."""
        cell = self.read(index)
        cell.opcode = instruction.opcode
        cell.a_value = instruction.a_value
        cell.b_value = instruction.b_value
        cell.last_modified_by = by
        cell.touched_since_placement = False

    def fill(self, instructions: Sequence[Instruction]):
        """Replace every cell's content and clear all provenance."""
        if len(instructions) != self._size:
            raise ValueError(
                f"expected {self._size} instructions, got {len(instructions)}"
            )
        self.cells = [
            Cell(instr.opcode, instr.a_value, instr.b_value)
            for instr in instructions
        ]
        logger.debug("Arena of %d cells refilled", self._size)

    def view(self, index: int) -> CellView:
        """Read-only snapshot of one cell."""
        address = self.normalize(index)
        cell = self.cells[address]
        return CellView(
            address=address,
            opcode=cell.opcode,
            a_value=cell.a_value,
            b_value=cell.b_value,
            last_modified_by=cell.last_modified_by,
            touched_since_placement=cell.touched_since_placement,
        )

    def snapshot(self) -> List[Instruction]:
        """Copy of every cell's instruction triple, in address order."""
        return [cell.instruction for cell in self.cells]

    def ownership(self) -> List[Optional[ProgramIdentity]]:
        """Last writer of each cell (None where no program wrote)."""
        return [cell.last_modified_by for cell in self.cells]
