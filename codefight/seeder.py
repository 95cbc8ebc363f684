"""
Arena Seeder - fills a fresh arena before programs are placed.
"""

from typing import List, Sequence
import logging

import numpy as np

from .arena import MemoryArena
from .config import InitMode
from .instructions import Instruction, OpCode, OPCODE_NAMES

logger = logging.getLogger(__name__)

FILLER_OPCODE = OpCode.STOP
STANDARD_ENTRY = 0

# numpy seeds must be non-negative; negative seeds map into this range
SEED_MODULUS = 2 ** 32


class ArenaSeeder:
    """
    Formats an arena with either the filler instruction or seeded random cells.

    In random mode every cell takes three draws from one generator, in cell
    order: an index into the opcode list, then the A and B operands, both
    in ``[0, len(opcodes))``. The same seed, opcode list and arena size
    always produce the same arena.
    """

    def __init__(
        self,
        mode: InitMode = InitMode.INIT_MODE_STOP,
        seed: int = 0,
        opcode_names: Sequence[str] = OPCODE_NAMES,
    ):
        self.mode = mode
        self.seed = seed
        self.opcodes = [OpCode(name) for name in opcode_names]

    def generate(self, size: int) -> List[Instruction]:
        """Produce the initial content for an arena of ``size`` cells."""
        if self.mode is InitMode.INIT_MODE_RANDOM:
            return self._generate_random(size)
        return [Instruction(FILLER_OPCODE, STANDARD_ENTRY, STANDARD_ENTRY)] * size

    def format(self, arena: MemoryArena):
        """Fill ``arena`` in place according to the configured mode."""
        arena.fill(self.generate(arena.size))
        logger.info("Arena formatted with %s", self.mode.describe(self.seed))

    def _generate_random(self, size: int) -> List[Instruction]:
        bound = len(self.opcodes)
        rng = np.random.default_rng(self.seed % SEED_MODULUS)
        draws = rng.integers(0, bound, size=(size, 3))
        return [
            Instruction(self.opcodes[op_index], a_value, b_value)
            for op_index, a_value, b_value in draws.tolist()
        ]
