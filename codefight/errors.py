"""
Exceptions raised by the CodeFight engine.

Errors only surface at the edges of a match: while registering programs,
configuring the arena or placing a match. Instruction execution itself
never raises.
"""


class CodeFightError(Exception):
    """Base class for all CodeFight errors."""


class ConfigurationError(CodeFightError, ValueError):
    """Unknown opcode, malformed script or invalid configuration value."""


class PlacementError(CodeFightError, ValueError):
    """A match could not be placed into the arena."""


class GameStateError(CodeFightError):
    """Operation not allowed in the current match state."""


class UnknownProgramError(CodeFightError, KeyError):
    """No placed program matches the requested identity or label."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""
