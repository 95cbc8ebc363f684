"""
Scheduler - the round-robin turn engine.

Pops the head of the alive queue, executes exactly one instruction for it
and either re-enqueues it at the tail or records its elimination.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, List, Optional, Sequence
import logging

from .arena import MemoryArena, ProgramIdentity
from .errors import GameStateError, PlacementError
from .executor import InstructionTable
from .instructions import OpCode
from .program import Program

logger = logging.getLogger(__name__)

UNBOUNDED = -1


class MatchState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class Elimination:
    """A program that executed STOP, with the rounds it survived."""
    identity: ProgramIdentity
    round_counter: int

    @property
    def label(self) -> str:
        return self.identity.label


@dataclass
class StepResult:
    """Outcome of one ``step`` call."""
    eliminations: List[Elimination] = field(default_factory=list)
    turns: int = 0
    finished: bool = False


def slot_layout(arena_size: int, count: int) -> List[tuple]:
    """
    Even placement of ``count`` programs: ``(start, slot_size)`` per program.

    Every slot is ``arena_size // count`` cells, except the last, which
    also takes the remainder.
    """
    slot = arena_size // count
    layout = [(i * slot, slot) for i in range(count)]
    if layout:
        start, _ = layout[-1]
        layout[-1] = (start, arena_size - start)
    return layout


class Scheduler:
    """
    Round-robin turn engine for one arena.

    States: idle (nothing placed), running (queue non-empty) and finished
    (queue empty). ``place_match`` moves idle to running, ``step`` keeps
    running until the queue empties, ``reset`` returns to idle from any
    state.
    """

    def __init__(
        self,
        arena: MemoryArena,
        table: Optional[InstructionTable] = None,
        filler_opcode: OpCode = OpCode.STOP,
    ):
        self.arena = arena
        self.table = table or InstructionTable()
        self.filler_opcode = filler_opcode

        self.queue: Deque[Program] = deque()
        self.roster: List[Program] = []
        self._placed = False

    @property
    def state(self) -> MatchState:
        if not self._placed:
            return MatchState.IDLE
        if self.queue:
            return MatchState.RUNNING
        return MatchState.FINISHED

    def any_alive(self) -> bool:
        return bool(self.queue)

    def place_match(self, programs: Sequence[Program]):
        """
        Load match-local program copies into evenly spaced slots.

        The copies must already carry their ids and symbols. Nothing is
        written if placement fails.

        Raises:
            GameStateError: if a match is already placed
            PlacementError: if a script does not fit its slot, or the
                arena would hold nothing but filler
        """
        if self._placed:
            raise GameStateError("a match is already running")
        if not programs:
            raise PlacementError("no programs to place")

        layout = slot_layout(self.arena.size, len(programs))
        for program, (start, slot_size) in zip(programs, layout):
            if len(program) > slot_size:
                raise PlacementError(
                    "the entered AIs have more parameters to load than the storages size!"
                )

        if not self._has_non_filler(programs, layout):
            raise PlacementError("the arena would contain no instruction besides the filler")

        for program, (start, _) in zip(programs, layout):
            for offset, instr in enumerate(program.script):
                self.arena.load(start + offset, instr, program.identity)
            program.move_to(start, self.arena.size)
            program.alive = True
            program.round_counter = 0
            self.roster.append(program)
            self.queue.append(program)
            logger.info("Placed %s at %d (%d instructions)", program.label, start, len(program))

        self._placed = True

    def _has_non_filler(self, programs: Sequence[Program], layout) -> bool:
        opcodes = [cell.opcode for cell in self.arena]
        for program, (start, _) in zip(programs, layout):
            for offset, instr in enumerate(program.script):
                opcodes[self.arena.normalize(start + offset)] = instr.opcode
        return any(opcode is not self.filler_opcode for opcode in opcodes)

    def step(self, turn_budget: Optional[int] = 1) -> StepResult:
        """
        Run up to ``turn_budget`` turns.

        A budget of None or any negative number runs until every program
        has stopped. Returns the programs eliminated during this call.
        """
        if not self._placed:
            raise GameStateError("no match is running")

        unbounded = turn_budget is None or turn_budget < 0
        result = StepResult()

        while self.queue and (unbounded or result.turns < turn_budget):
            elimination = self._turn()
            if elimination is not None:
                result.eliminations.append(elimination)
            result.turns += 1

        result.finished = not self.queue
        return result

    def _turn(self) -> Optional[Elimination]:
        program = self.queue.popleft()

        if program.round_counter == 0:
            self._skip_foreign_stops(program)

        self.table.execute(self.arena, program)

        if program.alive:
            program.round_counter += 1
            self.queue.append(program)
            return None

        logger.info("%s executed %d steps until stopping", program.label, program.round_counter)
        return Elimination(program.identity, program.round_counter)

    def _skip_foreign_stops(self, program: Program):
        """
        Move a fresh program past STOP cells it did not load itself.

        Its own untouched script cells are executed as written, so a
        program whose script starts with STOP still stops.
        """
        for _ in range(self.arena.size):
            cell = self.arena.read(program.pointer)
            if cell.opcode is not OpCode.STOP:
                return
            if cell.last_modified_by == program.identity and not cell.touched_since_placement:
                return
            program.advance(self.arena.size)

    def reset(self):
        """Drop every placed program and return to idle."""
        self.queue.clear()
        self.roster = []
        self._placed = False

    def find(self, identity: ProgramIdentity) -> Optional[Program]:
        for program in self.roster:
            if program.identity == identity:
                return program
        return None
