"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Render plots off-screen
os.environ.setdefault("MPLBACKEND", "Agg")

from codefight.arena import MemoryArena, ProgramIdentity
from codefight.config import GameConfig
from codefight.game import GameSystem
from codefight.instructions import Instruction, OpCode
from codefight.program import Program


@pytest.fixture
def arena():
    """A filler arena of ten cells."""
    return MemoryArena(10)


@pytest.fixture
def game():
    """A game system with a ten cell arena in fill mode."""
    return GameSystem(GameConfig(arena_size=10))


@pytest.fixture
def duel(game):
    """A started match: A jumps into filler, B stops on its first turn."""
    game.register_program("A", [("JMP", 1, 0)])
    game.register_program("B", [("STOP", 0, 0)])
    game.start_match(["A", "B"])
    return game


def make_program(name, *instructions, pointer=0):
    """An alive match-local program positioned at ``pointer``."""
    return Program(
        name=name,
        script=[Instruction(OpCode(op), a, b) for op, a, b in instructions],
        pointer=pointer,
        alive=True,
    )


def load(arena, address, op, a=0, b=0, by=None):
    """Place one instruction as if a program had loaded it."""
    arena.load(address, Instruction(OpCode(op), a, b), by or ProgramIdentity("owner"))
