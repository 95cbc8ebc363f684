"""Tests for the nine opcode behaviors."""

import pytest

from codefight.arena import MemoryArena, ProgramIdentity
from codefight.executor import InstructionTable
from codefight.instructions import Instruction, OpCode

from conftest import load, make_program


@pytest.fixture
def table():
    return InstructionTable()


class TestDispatch:
    """Tests for the dispatch table itself."""

    def test_every_opcode_has_a_handler(self, table):
        assert set(table._handlers) == set(OpCode)

    def test_opcodes_in_declaration_order(self, table):
        assert table.opcodes == list(OpCode)


class TestStop:

    def test_stop_toggles_alive_and_keeps_pointer(self, table, arena):
        program = make_program("P", pointer=4)
        table.execute(arena, program)

        assert program.alive is False
        assert program.pointer == 4

    def test_stop_writes_nothing(self, table, arena):
        program = make_program("P", pointer=4)
        table.execute(arena, program)
        assert arena.ownership() == [None] * 10


class TestMoves:
    """Tests for MOV_R and MOV_I."""

    def test_mov_r_copies_full_triple(self, table, arena):
        """The destination holds exactly the source triple after the copy."""
        load(arena, 0, "MOV_R", 2, 5)
        load(arena, 2, "ADD", 7, 8)
        program = make_program("P")

        table.execute(arena, program)

        target = arena.read(5)
        assert target.instruction == Instruction(OpCode.ADD, 7, 8)
        assert target.last_modified_by == program.identity
        assert target.touched_since_placement
        assert program.pointer == 1

    def test_mov_r_wraps_forward(self, table, arena):
        load(arena, 8, "MOV_R", 0, 4)
        program = make_program("P", pointer=8)

        table.execute(arena, program)

        assert arena.read(2).instruction == Instruction(OpCode.MOV_R, 0, 4)
        assert program.pointer == 9

    def test_mov_r_wraps_backward(self, table, arena):
        load(arena, 1, "MOV_R", -1, -3)
        load(arena, 0, "JMZ", 1, 1)
        program = make_program("P", pointer=1)

        table.execute(arena, program)

        assert arena.read(8).instruction == Instruction(OpCode.JMZ, 1, 1)

    def test_pointer_wraps_at_end(self, table, arena):
        load(arena, 9, "MOV_R", 0, 0)
        program = make_program("P", pointer=9)
        table.execute(arena, program)
        assert program.pointer == 0

    def test_mov_i_follows_intermediate_b(self, table, arena):
        load(arena, 0, "MOV_I", 1, 2)
        load(arena, 1, "JMP", 3, 0)
        load(arena, 2, "STOP", 0, 4)
        program = make_program("P")

        table.execute(arena, program)

        assert arena.read(6).instruction == Instruction(OpCode.JMP, 3, 0)
        assert arena.read(6).last_modified_by == program.identity
        assert program.pointer == 1

    def test_mov_i_wraps(self, table, arena):
        load(arena, 7, "MOV_I", 0, 1)
        load(arena, 8, "STOP", 0, -12)
        program = make_program("P", pointer=7)

        table.execute(arena, program)

        # 8 + (-12) wraps to 6
        assert arena.read(6).instruction == Instruction(OpCode.MOV_I, 0, 1)
        assert program.pointer == 8


class TestArithmetic:
    """Tests for ADD and ADD_R."""

    def test_add(self, table, arena):
        load(arena, 0, "ADD", 2, 3)
        program = make_program("P")

        table.execute(arena, program)

        cell = arena.read(0)
        assert cell.instruction == Instruction(OpCode.ADD, 2, 5)
        assert cell.last_modified_by == program.identity
        assert program.pointer == 1

    def test_add_wraps_modulo_arena_size(self, table, arena):
        load(arena, 0, "ADD", 7, 6)
        table.execute(arena, make_program("P"))
        assert arena.read(0).b_value == 3

    def test_add_negative_sum_wraps(self, table, arena):
        load(arena, 0, "ADD", -4, 1)
        table.execute(arena, make_program("P"))
        assert arena.read(0).b_value == 7

    def test_add_extreme_operands(self, table, arena):
        load(arena, 0, "ADD", 2 ** 31 - 1, 2 ** 31 - 1)
        table.execute(arena, make_program("P"))
        assert arena.read(0).b_value == (2 * (2 ** 31 - 1)) % 10

    def test_add_r(self, table, arena):
        load(arena, 0, "ADD_R", 4, 3)
        load(arena, 3, "STOP", 0, 5)
        program = make_program("P")

        table.execute(arena, program)

        target = arena.read(3)
        assert target.instruction == Instruction(OpCode.STOP, 0, 9)
        assert target.last_modified_by == program.identity
        assert arena.read(0).b_value == 3
        assert program.pointer == 1

    def test_add_r_wraps(self, table, arena):
        load(arena, 0, "ADD_R", 4, 3)
        load(arena, 3, "STOP", 0, 8)
        table.execute(arena, make_program("P"))
        assert arena.read(3).b_value == 2


class TestJumps:
    """Tests for JMP and JMZ."""

    def test_jmp(self, table, arena):
        load(arena, 2, "JMP", -3, 0)
        program = make_program("P", pointer=2)

        table.execute(arena, program)

        assert program.pointer == 9

    def test_jmp_zero_is_a_no_op(self, table, arena):
        owner = ProgramIdentity("owner")
        load(arena, 2, "JMP", 0, 7, by=owner)
        program = make_program("P", pointer=2)

        table.execute(arena, program)

        assert program.pointer == 2
        assert program.alive
        assert arena.read(2).last_modified_by == owner
        assert not arena.read(2).touched_since_placement

    def test_jmz_taken_jumps_like_jmp(self, table, arena):
        load(arena, 0, "JMZ", 4, 2)
        program = make_program("P")

        table.execute(arena, program)

        assert program.pointer == 4

    def test_jmz_not_taken_advances_once(self, table, arena):
        load(arena, 0, "JMZ", 4, 2)
        load(arena, 2, "STOP", 0, 1)
        program = make_program("P")

        table.execute(arena, program)

        assert program.pointer == 1

    def test_jmz_checks_own_cell(self, table, arena):
        load(arena, 0, "JMZ", 3, 0)
        program = make_program("P")
        table.execute(arena, program)
        # own B field is 0
        assert program.pointer == 3


class TestCompareAndSwap:
    """Tests for CMP and SWAP."""

    def test_cmp_equal_advances_once(self, table, arena):
        load(arena, 0, "CMP", 1, 2)
        load(arena, 1, "JMP", 5, 0)
        load(arena, 2, "STOP", 0, 5)
        program = make_program("P")

        table.execute(arena, program)

        assert program.pointer == 1

    def test_cmp_mismatch_skips_next(self, table, arena):
        load(arena, 0, "CMP", 1, 2)
        load(arena, 1, "JMP", 5, 0)
        load(arena, 2, "STOP", 0, 6)
        program = make_program("P")

        table.execute(arena, program)

        assert program.pointer == 2

    def test_cmp_writes_nothing(self, table, arena):
        load(arena, 0, "CMP", 1, 2)
        table.execute(arena, make_program("P"))
        assert not any(cell.touched_since_placement for cell in arena)

    def test_swap(self, table, arena):
        load(arena, 0, "SWAP", 1, 2)
        load(arena, 1, "JMP", 3, 4)
        load(arena, 2, "ADD", 5, 6)
        program = make_program("P")

        table.execute(arena, program)

        assert arena.read(1).instruction == Instruction(OpCode.JMP, 6, 4)
        assert arena.read(2).instruction == Instruction(OpCode.ADD, 5, 3)
        assert arena.read(1).last_modified_by == program.identity
        assert arena.read(2).last_modified_by == program.identity
        assert program.pointer == 1

    def test_swap_same_cell_exchanges_its_fields(self, table, arena):
        load(arena, 0, "SWAP", 10, 20)
        table.execute(arena, make_program("P"))
        assert arena.read(0).instruction == Instruction(OpCode.SWAP, 20, 10)


class TestTotality:
    """No opcode can fail, whatever the operands."""

    @pytest.mark.parametrize("opcode", list(OpCode))
    def test_extreme_operands(self, table, opcode):
        arena = MemoryArena(7)
        for address in range(7):
            arena.load(address, Instruction(opcode, 2 ** 31 - 1, -(2 ** 31)), ProgramIdentity("P"))
        program = make_program("P", pointer=3)

        table.execute(arena, program)

        assert 0 <= program.pointer < 7
        for cell in arena:
            assert 0 <= cell.b_value < 7 or cell.b_value in (2 ** 31 - 1, -(2 ** 31))
