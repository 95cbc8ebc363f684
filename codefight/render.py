"""
Text rendering of arenas, program status and match results.

The symbol shown for a cell follows a fixed priority, highest first:
the program moving next, the other alive programs' next cells, bombs,
cells changed by a program, and untouched cells.
"""

from typing import Iterable, List, Sequence, Tuple

from .arena import Cell
from .errors import ConfigurationError
from .game import GameSystem, MatchSummary, ProgramStatus
from .instructions import OpCode
from .scheduler import StepResult

# Rows shown by the detailed memory view of a large arena
DETAIL_WINDOW = 10

RUNNING = "RUNNING"
STOPPED = "STOPPED"


def is_bomb(cell: Cell) -> bool:
    """
    True for a cell written during the match that would stop or strand a
    program executing it: STOP, JMP 0 or JMZ 0 0.
    """
    if not cell.touched_since_placement:
        return False
    if cell.opcode is OpCode.STOP:
        return True
    if cell.opcode is OpCode.JMP and cell.a_value == 0:
        return True
    return cell.opcode is OpCode.JMZ and cell.a_value == 0 and cell.b_value == 0


def memory_symbols(game: GameSystem) -> List[str]:
    """One display symbol per arena cell."""
    config = game.config
    symbols = [config.unchanged_symbol] * game.arena_size

    for address, cell in enumerate(game.arena):
        if cell.last_modified_by is None:
            continue
        owner = game.symbols_for(cell.last_modified_by)
        if owner is None:
            continue
        symbol, bomb_symbol = owner
        symbols[address] = bomb_symbol if is_bomb(cell) else symbol

    alive = game.alive_programs()
    if alive:
        for program in alive[1:]:
            symbols[program.pointer] = config.next_symbol
        symbols[alive[0].pointer] = config.current_symbol

    return symbols


def render_overview(game: GameSystem) -> str:
    """The whole arena as one line of symbols."""
    return "".join(memory_symbols(game))


def check_position(game: GameSystem, position: int) -> int:
    if not 0 <= position < game.arena_size:
        raise ConfigurationError("the entered number is not within the storage size!")
    return position


def render_detailed(game: GameSystem, position: int) -> str:
    """
    Overview line followed by a table of cells.

    Arenas larger than the window show ``DETAIL_WINDOW`` rows starting at
    ``position`` (wrapping), and the overview brackets that window with the
    window symbol. Smaller arenas show every cell and ignore ``position``.
    """
    check_position(game, position)
    symbols = memory_symbols(game)
    size = game.arena_size

    if size > DETAIL_WINDOW:
        start, rows = position, DETAIL_WINDOW
    else:
        start, rows = 0, size
    addresses = [(start + offset) % size for offset in range(rows)]

    if size > DETAIL_WINDOW:
        line = list(symbols)
        end = start + DETAIL_WINDOW
        # closing marker first so the opening index still refers to the unmarked line
        if end <= size:
            line.insert(end, game.config.window_symbol)
            line.insert(start, game.config.window_symbol)
        else:
            line.insert(end - size, game.config.window_symbol)
            line.insert(start + 1, game.config.window_symbol)
        header = "".join(line)
    else:
        header = "[" + ", ".join(symbols[a] for a in addresses) + "]"

    table = [_detail_row(symbols[a], a, game.arena.read(a)) for a in addresses]
    return header + "\n" + _format_table(table)


def _detail_row(symbol: str, address: int, cell: Cell) -> Tuple[str, ...]:
    return (
        symbol,
        f"{address}:",
        cell.opcode.value,
        "|",
        str(cell.a_value),
        "|",
        str(cell.b_value),
    )


def _format_table(rows: Sequence[Sequence[str]]) -> str:
    """Right-align every column to its widest entry."""
    widths = [max(len(row[col]) for row in rows) for col in range(len(rows[0]))]
    return "\n".join(
        " ".join(entry.rjust(width) for entry, width in zip(row, widths))
        for row in rows
    )


def render_program_status(status: ProgramStatus) -> str:
    """``name (RUNNING@rounds)`` plus the next instruction of an alive program."""
    state = RUNNING if status.alive else STOPPED
    message = f"{status.label} ({state}@{status.round_counter})"
    if status.alive and status.next_instruction is not None:
        message += f"\nNext Command: {status.next_instruction} @ {status.pointer}"
    return message


def render_eliminations(result: StepResult) -> str:
    """One line per program stopped during a ``step`` call."""
    return "\n".join(
        f"{elimination.label} executed {elimination.round_counter} steps until stopping."
        for elimination in result.eliminations
    )


def _join(labels: Iterable[str]) -> str:
    return ", ".join(labels)


def render_summary(summary: MatchSummary) -> str:
    lines = []
    if summary.running:
        lines.append(f"Running AIs: {_join(summary.running)}")
    if summary.stopped:
        lines.append(f"Stopped AIs: {_join(summary.stopped)}")
    return "\n".join(lines)


def render_init_mode_change(old: str, new: str) -> str:
    return f"Changed init mode from {old} to {new}"
