"""
Game System - registry, match placement and inspection.

This is the API the command interface, the web interface and the
visualizer talk to. It owns the program registry (which outlives any
match), the arena and the scheduler that runs the current match.
"""

from collections import Counter
from dataclasses import dataclass, field
from math import ceil
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging

from .arena import CellView, MemoryArena, ProgramIdentity
from .config import GameConfig, InitMode
from .errors import (
    ConfigurationError,
    GameStateError,
    PlacementError,
    UnknownProgramError,
)
from .executor import InstructionTable
from .instructions import Instruction, ScriptEntry, make_script
from .program import Program
from .scheduler import MatchState, Scheduler, StepResult, UNBOUNDED
from .seeder import ArenaSeeder, FILLER_OPCODE

logger = logging.getLogger(__name__)

MINIMUM_PROGRAMS_PER_MATCH = 2


@dataclass(frozen=True)
class ProgramStatus:
    """Read-only view of a placed program."""
    identity: ProgramIdentity
    alive: bool
    round_counter: int
    pointer: int
    next_instruction: Optional[Instruction]

    @property
    def label(self) -> str:
        return self.identity.label


@dataclass
class MatchSummary:
    """Labels of the programs still running and already stopped."""
    running: List[str] = field(default_factory=list)
    stopped: List[str] = field(default_factory=list)


class GameSystem:
    """
    Manages CodeFight programs and matches.

    Typical use::

        game = GameSystem(GameConfig(arena_size=10))
        game.register_program("A", [("JMP", 1, 0)])
        game.register_program("B", [("STOP", 0, 0)])
        game.start_match(["A", "B"])
        result = game.step(2)
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize the game system.

        Args:
            config: Arena size, symbols and initial init mode
        """
        self.config = config or GameConfig()
        self.table = InstructionTable()
        self.arena = MemoryArena(self.config.arena_size)
        self.scheduler = Scheduler(self.arena, self.table, filler_opcode=FILLER_OPCODE)

        self.init_mode = self.config.init_mode
        self.seed = self.config.seed

        # Registered programs by name, in registration order
        self.registry: Dict[str, Program] = {}

        self._format_arena()

    @property
    def arena_size(self) -> int:
        return self.arena.size

    @property
    def state(self) -> MatchState:
        return self.scheduler.state

    @property
    def is_running(self) -> bool:
        """True while a match is placed, even if every program has stopped."""
        return self.scheduler.state is not MatchState.IDLE

    def _format_arena(self):
        ArenaSeeder(self.init_mode, self.seed, [op.value for op in self.table.opcodes]).format(self.arena)

    # Registry

    def register_program(self, name: str, script: Iterable[ScriptEntry]) -> Program:
        """
        Validate and register a program script.

        Args:
            name: Unique program name
            script: ``(opcode, a, b)`` triples or Instructions

        Raises:
            ConfigurationError: on a bad name, an unknown opcode, a
                malformed entry or a script longer than half the arena
        """
        if (
            not isinstance(name, str)
            or not name
            or any(ch.isspace() for ch in name)
            or "#" in name
        ):
            raise ConfigurationError(f"invalid program name '{name}'")
        if name in self.registry:
            raise ConfigurationError("you cannot overwrite an already existing AI!")

        instructions = make_script(script)
        if len(instructions) > ceil(self.arena.size / MINIMUM_PROGRAMS_PER_MATCH):
            raise ConfigurationError(
                "the entered AI has too many specified arguments for this storage!"
            )

        program = Program(name=name, script=instructions)
        self.registry[name] = program
        logger.info("Registered %s (%d instructions)", name, len(instructions))
        return program

    def remove_program(self, name: str):
        """Remove a registered program; running matches keep their copies."""
        if name not in self.registry:
            raise ConfigurationError("The entered AI does not exist!")
        del self.registry[name]
        logger.info("Removed %s", name)

    def programs(self) -> List[str]:
        return list(self.registry)

    # Configuration

    def set_init_mode(self, mode: InitMode, seed: int = 0) -> Tuple[str, str]:
        """
        Change how the arena is initialized.

        Returns the old and new mode descriptions. Only allowed while no
        match is placed; the arena is re-formatted right away.
        """
        if self.is_running:
            raise GameStateError("the game must be stopped to change the init mode")
        old = self.init_mode.describe(self.seed)
        self.init_mode = mode
        if mode is InitMode.INIT_MODE_RANDOM:
            self.seed = seed
        self._format_arena()
        new = self.init_mode.describe(self.seed)
        logger.info("Changed init mode from %s to %s", old, new)
        return old, new

    # Match lifecycle

    def start_match(self, selected_names: Sequence[str]):
        """
        Place a copy of each selected program and start the match.

        Duplicate names are allowed; their copies get ids 0, 1, ... in
        selection order. Unique names keep id -1.

        Raises:
            GameStateError: if a match is already placed
            PlacementError: on an unknown name, a wrong number of
                selections, a script longer than its slot or an arena
                without any non-filler instruction
        """
        if self.is_running:
            raise GameStateError("a match is already running")
        if not MINIMUM_PROGRAMS_PER_MATCH <= len(selected_names) <= self.config.max_programs:
            raise PlacementError(
                f"a match needs between {MINIMUM_PROGRAMS_PER_MATCH} and "
                f"{self.config.max_programs} programs, got {len(selected_names)}"
            )
        unknown = [name for name in selected_names if name not in self.registry]
        if unknown:
            raise PlacementError(f"the entered AI names could not be found: {', '.join(unknown)}")

        copies = self._make_copies(selected_names)

        self._format_arena()
        try:
            self.scheduler.place_match(copies)
        except PlacementError:
            self._format_arena()
            raise
        logger.info("Match started with %s", ", ".join(p.label for p in copies))

    def _make_copies(self, selected_names: Sequence[str]) -> List[Program]:
        counts = Counter(selected_names)
        next_id = {name: 0 for name, count in counts.items() if count > 1}

        copies = []
        for index, name in enumerate(selected_names):
            clone = self.registry[name].copy()
            if name in next_id:
                clone.id = next_id[name]
                next_id[name] += 1
            clone.symbol, clone.bomb_symbol = self.config.program_symbols[index]
            copies.append(clone)
        return copies

    def step(self, turn_budget: Optional[int] = 1) -> StepResult:
        """Run up to ``turn_budget`` turns (None or negative: until all stop)."""
        return self.scheduler.step(turn_budget)

    def run(self) -> StepResult:
        """Run until every program has stopped."""
        return self.scheduler.step(UNBOUNDED)

    def any_alive(self) -> bool:
        return self.scheduler.any_alive()

    def reset_match(self):
        """Clear all placed copies and re-seed the arena."""
        self.scheduler.reset()
        self._format_arena()
        logger.info("Match reset")

    def end_match(self) -> MatchSummary:
        """Report which programs are still running, then reset."""
        if not self.is_running:
            raise GameStateError("no match is running")
        summary = MatchSummary(
            running=[p.label for p in self.scheduler.roster if p.alive],
            stopped=[p.label for p in self.scheduler.roster if not p.alive],
        )
        self.reset_match()
        return summary

    # Inspection

    def placed_programs(self) -> List[Program]:
        """Every program placed in the current match, in placement order."""
        return list(self.scheduler.roster)

    def alive_programs(self) -> List[Program]:
        """Alive programs in turn order; the first one moves next."""
        return list(self.scheduler.queue)

    def inspect_cell(self, address: int) -> CellView:
        return self.arena.view(address)

    def find_program(self, who: Union[ProgramIdentity, str]) -> Program:
        """Look up a placed program by identity or display label."""
        if not self.is_running:
            raise GameStateError("no match is running")
        if isinstance(who, ProgramIdentity):
            program = self.scheduler.find(who)
            if program is not None:
                return program
        else:
            for program in self.scheduler.roster:
                if program.label == who:
                    return program
        raise UnknownProgramError("The entered AI does not exist!")

    def inspect_program(self, who: Union[ProgramIdentity, str]) -> ProgramStatus:
        """Status of a placed program, including the instruction it runs next."""
        program = self.find_program(who)
        next_instruction = None
        if program.alive:
            next_instruction = self.arena.read(program.pointer).instruction
        return ProgramStatus(
            identity=program.identity,
            alive=program.alive,
            round_counter=program.round_counter,
            pointer=program.pointer,
            next_instruction=next_instruction,
        )

    def symbols_for(self, identity: ProgramIdentity) -> Optional[Tuple[str, str]]:
        """Display and bomb symbol of a placed program."""
        program = self.scheduler.find(identity)
        if program is None:
            return None
        return program.symbol, program.bomb_symbol
