"""
Game configuration.

Holds the arena size, the display symbols and the arena initialization
mode. Values can come from code, from startup arguments or from a
``config.env`` file next to the project.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import logging
import os

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

MIN_ARENA_SIZE = 7
MAX_ARENA_SIZE = 1337
MIN_SEED = -1337
MAX_SEED = 1337

# Startup arguments: size, four general symbols, then symbol/bomb pairs
GENERAL_SYMBOL_COUNT = 4
MIN_STARTUP_ARGUMENTS = 9


class InitMode(Enum):
    """How a fresh arena is filled before programs are placed."""
    INIT_MODE_STOP = "INIT_MODE_STOP"      # every cell STOP 0 0
    INIT_MODE_RANDOM = "INIT_MODE_RANDOM"  # seeded random cells

    def describe(self, seed: int = 0) -> str:
        if self is InitMode.INIT_MODE_RANDOM:
            return f"{self.value} {seed}"
        return self.value


@dataclass
class GameConfig:
    """Configuration for a CodeFight game system."""

    arena_size: int = 20

    # unchanged cell, detail window bracket, current program, next programs
    general_symbols: List[str] = field(
        default_factory=lambda: ["_", "*", "!", "?"]
    )

    # one (symbol, bomb symbol) pair per program that may join a match
    program_symbols: List[Tuple[str, str]] = field(
        default_factory=lambda: [("A", "a"), ("B", "b"), ("C", "c"), ("D", "d")]
    )

    init_mode: InitMode = InitMode.INIT_MODE_STOP
    seed: int = 0

    def __post_init__(self):
        if self.arena_size <= 0:
            raise ConfigurationError(
                f"arena size must be positive, got {self.arena_size}"
            )
        if len(self.general_symbols) != GENERAL_SYMBOL_COUNT:
            raise ConfigurationError(
                f"expected {GENERAL_SYMBOL_COUNT} general symbols, "
                f"got {len(self.general_symbols)}"
            )
        self.program_symbols = [tuple(pair) for pair in self.program_symbols]
        if any(len(pair) != 2 for pair in self.program_symbols):
            raise ConfigurationError("program symbols must come in (symbol, bomb) pairs")

    @property
    def max_programs(self) -> int:
        return len(self.program_symbols)

    @property
    def unchanged_symbol(self) -> str:
        return self.general_symbols[0]

    @property
    def window_symbol(self) -> str:
        return self.general_symbols[1]

    @property
    def current_symbol(self) -> str:
        return self.general_symbols[2]

    @property
    def next_symbol(self) -> str:
        return self.general_symbols[3]

    @classmethod
    def from_args(cls, args: Sequence[str]) -> "GameConfig":
        """
        Build a configuration from command-line startup arguments.

        Expected layout: ``SIZE G1 G2 G3 G4 S1 B1 [S2 B2 ...]`` where the
        four G tokens are the general symbols and each S/B pair is a
        program symbol and its bomb symbol.

        Raises:
            ConfigurationError: if the arguments are not a valid layout
        """
        if len(args) < MIN_STARTUP_ARGUMENTS or len(args) % 2 == 0:
            raise ConfigurationError("the entered start up arguments are invalid!")
        if len(set(args)) != len(args):
            raise ConfigurationError("the entered start up arguments are invalid!")
        try:
            size = int(args[0])
        except ValueError:
            raise ConfigurationError("the entered start up arguments are invalid!")
        if not MIN_ARENA_SIZE <= size <= MAX_ARENA_SIZE:
            raise ConfigurationError("the entered start up arguments are invalid!")

        general = list(args[1:1 + GENERAL_SYMBOL_COUNT])
        specific = args[1 + GENERAL_SYMBOL_COUNT:]
        pairs = [(specific[i], specific[i + 1]) for i in range(0, len(specific), 2)]
        return cls(arena_size=size, general_symbols=general, program_symbols=pairs)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "GameConfig":
        """Build a configuration from ``CODEFIGHT_*`` environment variables."""
        load_env(env_file)
        kwargs = {}
        if os.environ.get("CODEFIGHT_ARENA_SIZE"):
            kwargs["arena_size"] = _env_int("CODEFIGHT_ARENA_SIZE")
        if os.environ.get("CODEFIGHT_INIT_MODE"):
            kwargs["init_mode"] = parse_init_mode(os.environ["CODEFIGHT_INIT_MODE"])
        if os.environ.get("CODEFIGHT_SEED"):
            kwargs["seed"] = _env_int("CODEFIGHT_SEED")
        return cls(**kwargs)


def parse_init_mode(name: str) -> InitMode:
    """Parse an init mode name such as ``INIT_MODE_RANDOM``."""
    try:
        return InitMode(name.strip().upper())
    except ValueError:
        raise ConfigurationError("the entered init type does not exist!")


def check_seed(seed: int) -> int:
    if not MIN_SEED <= seed <= MAX_SEED:
        raise ConfigurationError(f"the entered seed is out of bounds for '{seed}'!")
    return seed


def _env_int(key: str) -> int:
    try:
        return int(os.environ[key])
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer")


def load_env(env_file: Optional[str] = None) -> bool:
    """Load ``config.env`` from the project root (or ``env_file``)."""
    path = Path(env_file) if env_file else PROJECT_ROOT / "config.env"
    if not path.exists():
        return False
    logger.debug("Loading environment from %s", path)
    return load_dotenv(path)
