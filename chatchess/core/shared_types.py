"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    ONGOING = "ongoing"
    DRAW_PROPOSED = "draw proposed"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    RESIGNED = "resigned"
    DRAWN = "drawn"

    @property
    def is_terminal(self) -> bool:
        return self not in (Status.ONGOING, Status.DRAW_PROPOSED)


class GameResult(StrEnum):
    """PGN style result strings. Stored as-is."""

    WHITE_WINS = "1-0"
    BLACK_WINS = "0-1"
    DRAW = "1/2-1/2"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class Condition(StrEnum):
    """What the rules engine reports about the position right after a move."""

    NORMAL = "normal"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient material"
    REPETITION = "repetition"
    FIFTY_MOVES = "fifty moves"
