"""
FEN helpers. The rules engine owns the board representation; this module only loads/validates
FEN strings and picks out the fields other layers care about.

<board position string><active color><castling rights><en passant square><# half move clock><number turns played>

ex) The standard starting position has a FEN
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
"""

import chess

from chatchess.core.exceptions import InvalidFENError
from chatchess.core.shared_types import Color

STARTING_FEN = chess.STARTING_FEN
FEN_FIELD_COUNT = 6


def load_board(fen: str) -> chess.Board:
    """Build a rules-engine board from a FEN string, rejecting anything the engine considers invalid."""
    if len(fen.split()) != FEN_FIELD_COUNT:
        raise InvalidFENError(
            f"FEN must contain {FEN_FIELD_COUNT} space-separated fields: {fen!r}"
        )
    try:
        board = chess.Board(fen)
    except ValueError as exc:
        raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen!r}") from exc

    if not board.is_valid():
        raise InvalidFENError(f"FEN describes an impossible position: {fen!r}")
    return board


def placement(fen: str) -> str:
    """Only the piece placement part (first field)."""
    return fen.split(" ")[0]


def color_to_move(fen: str) -> Color:
    active_color = fen.split(" ")[1]
    return Color.WHITE if active_color == "w" else Color.BLACK
