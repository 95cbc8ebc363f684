"""
CodeFight - programs battling in a shared circular memory arena.

This package provides the instruction set, the arena, the round-robin
scheduler and the GameSystem facade that the command line and web
interfaces drive.
"""

from .errors import (
    CodeFightError,
    ConfigurationError,
    PlacementError,
    GameStateError,
    UnknownProgramError,
)
from .config import GameConfig, InitMode
from .instructions import (
    Instruction,
    OpCode,
    PROGRAMS,
    parse_program,
    program_to_string,
)
from .arena import MemoryArena, ProgramIdentity, CellView, addr
from .program import Program
from .executor import InstructionTable
from .scheduler import Scheduler, StepResult, Elimination, MatchState
from .seeder import ArenaSeeder
from .game import GameSystem, ProgramStatus, MatchSummary

__all__ = [
    "CodeFightError",
    "ConfigurationError",
    "PlacementError",
    "GameStateError",
    "UnknownProgramError",
    "GameConfig",
    "InitMode",
    "Instruction",
    "OpCode",
    "PROGRAMS",
    "parse_program",
    "program_to_string",
    "MemoryArena",
    "ProgramIdentity",
    "CellView",
    "addr",
    "Program",
    "InstructionTable",
    "Scheduler",
    "StepResult",
    "Elimination",
    "MatchState",
    "ArenaSeeder",
    "GameSystem",
    "ProgramStatus",
    "MatchSummary",
]
