"""
Instruction Table

Executes one CodeFight instruction for one program against the arena.
Every opcode is total: addresses wrap, sums are reduced modulo the arena
size, and nothing in here raises once a match is running.
"""

from typing import Callable, Dict
import logging

from .arena import MemoryArena
from .instructions import OpCode
from .program import Program

logger = logging.getLogger(__name__)

# Value a JMZ check cell's B field must hold for the jump to be taken
JMZ_COMPARING_AMOUNT = 0


class InstructionTable:
    """
    The nine CodeFight opcode behaviors.

    Each handler receives the arena and the executing program, applies its
    effect and leaves the program's pointer where the next turn should
    start. ADD and ADD_R wrap their sums modulo the arena size.
    """

    def __init__(self):
        self._handlers: Dict[OpCode, Callable[[MemoryArena, Program], None]] = {
            OpCode.STOP: self._execute_stop,
            OpCode.MOV_R: self._execute_mov_r,
            OpCode.MOV_I: self._execute_mov_i,
            OpCode.ADD: self._execute_add,
            OpCode.ADD_R: self._execute_add_r,
            OpCode.JMP: self._execute_jmp,
            OpCode.JMZ: self._execute_jmz,
            OpCode.CMP: self._execute_cmp,
            OpCode.SWAP: self._execute_swap,
        }
        missing = set(OpCode) - set(self._handlers)
        if missing:
            raise RuntimeError(f"no handler for opcodes: {sorted(op.name for op in missing)}")

    @property
    def opcodes(self):
        """Opcodes in declaration order."""
        return list(OpCode)

    def execute(self, arena: MemoryArena, program: Program):
        """Execute the instruction at the program's pointer."""
        instr = arena.read(program.pointer)
        logger.debug(
            "%s executes %s|%s|%s @ %d",
            program.label, instr.opcode.value, instr.a_value, instr.b_value, program.pointer,
        )
        self._handlers[instr.opcode](arena, program)

    def _reduce(self, arena: MemoryArena, value: int) -> int:
        return arena.normalize(value)

    def _execute_stop(self, arena: MemoryArena, program: Program):
        """STOP flips the alive flag; the pointer stays put."""
        program.toggle_alive()

    def _execute_mov_r(self, arena: MemoryArena, program: Program):
        """Execute MOV_R: copy cell(P+A) to cell(P+B)."""
        pc = program.pointer
        current = arena.read(pc)
        source = pc + current.a_value
        target = pc + current.b_value
        arena.copy_cell(source, target, program.identity)
        program.advance(arena.size)

    def _execute_mov_i(self, arena: MemoryArena, program: Program):
        """Execute MOV_I: copy cell(P+A) to cell(mid + cell(mid).B), mid = P+B."""
        pc = program.pointer
        current = arena.read(pc)
        source = pc + current.a_value
        intermediate = pc + current.b_value
        target = intermediate + arena.read(intermediate).b_value
        arena.copy_cell(source, target, program.identity)
        program.advance(arena.size)

    def _execute_add(self, arena: MemoryArena, program: Program):
        """Execute ADD: cell(P).B := A + B."""
        pc = program.pointer
        current = arena.read(pc)
        result = self._reduce(arena, current.a_value + current.b_value)
        arena.write(pc, program.identity, b_value=result)
        program.advance(arena.size)

    def _execute_add_r(self, arena: MemoryArena, program: Program):
        """Execute ADD_R: cell(P+B).B := cell(P).A + cell(P+B).B."""
        pc = program.pointer
        current = arena.read(pc)
        target = pc + current.b_value
        result = self._reduce(arena, current.a_value + arena.read(target).b_value)
        arena.write(target, program.identity, b_value=result)
        program.advance(arena.size)

    def _execute_jmp(self, arena: MemoryArena, program: Program):
        """Execute JMP: pointer := P + A."""
        program.move_to(program.pointer + arena.read(program.pointer).a_value, arena.size)

    def _execute_jmz(self, arena: MemoryArena, program: Program):
        """Execute JMZ: jump like JMP when cell(P+B).B is zero, else advance."""
        pc = program.pointer
        current = arena.read(pc)
        check = arena.read(pc + current.b_value)
        if check.b_value == JMZ_COMPARING_AMOUNT:
            self._execute_jmp(arena, program)
        else:
            program.advance(arena.size)

    def _execute_cmp(self, arena: MemoryArena, program: Program):
        """Execute CMP: skip the next instruction when cell(P+A).A != cell(P+B).B."""
        pc = program.pointer
        current = arena.read(pc)
        first = arena.read(pc + current.a_value)
        second = arena.read(pc + current.b_value)
        if first.a_value != second.b_value:
            program.advance(arena.size, 2)
        else:
            program.advance(arena.size)

    def _execute_swap(self, arena: MemoryArena, program: Program):
        """Execute SWAP: exchange cell(P+A).A with cell(P+B).B."""
        pc = program.pointer
        current = arena.read(pc)
        first = pc + current.a_value
        second = pc + current.b_value
        first_a = arena.read(first).a_value
        second_b = arena.read(second).b_value
        arena.write(first, program.identity, a_value=second_b)
        arena.write(second, program.identity, b_value=first_a)
        program.advance(arena.size)
