"""
Program entity - a registered script plus its per-match runtime state.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .arena import ProgramIdentity, addr
from .instructions import Instruction


@dataclass
class Program:
    """
    A CodeFight program ("AI").

    The registry keeps one Program per name holding only the script. At
    match start :meth:`copy` produces the match-local copy that receives an
    identity, display symbols and a pointer.
    """
    name: str
    script: List[Instruction] = field(default_factory=list)

    # Match-local state
    id: int = -1
    symbol: Optional[str] = None
    bomb_symbol: Optional[str] = None
    pointer: int = 0
    alive: bool = False
    round_counter: int = 0

    def __len__(self) -> int:
        return len(self.script)

    @property
    def identity(self) -> ProgramIdentity:
        return ProgramIdentity(self.name, self.id)

    @property
    def label(self) -> str:
        return self.identity.label

    def copy(self) -> "Program":
        """Fresh match-local copy sharing the (immutable) instructions."""
        return Program(name=self.name, script=list(self.script))

    def move_to(self, position: int, size: int):
        """Set the pointer to an absolute arena address."""
        self.pointer = addr(position, size)

    def advance(self, size: int, steps: int = 1):
        """Move the pointer forward, wrapping at the arena end."""
        self.pointer = addr(self.pointer + steps, size)

    def toggle_alive(self):
        self.alive = not self.alive
