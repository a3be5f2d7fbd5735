"""Unit tests for chatchess/chess/fen.py"""

import pytest

from chatchess.chess.fen import STARTING_FEN, color_to_move, load_board, placement
from chatchess.core.exceptions import InvalidFENError
from chatchess.core.shared_types import Color


def test_load_starting_position() -> None:
    board = load_board(STARTING_FEN)
    assert board.fen() == STARTING_FEN
    assert len(list(board.legal_moves)) == 20


@pytest.mark.parametrize(
    "fen",
    [
        "",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQQBNR w KQkq - 0 1",  # no white king
        "4k3/8/8/8/8/8/8/4K2P w - - 0 1",  # pawn on the back rank
    ],
)
def test_invalid_fen(fen: str) -> None:
    with pytest.raises(InvalidFENError):
        load_board(fen)


def test_fields() -> None:
    fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
    assert placement(fen) == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR"
    assert color_to_move(fen) == Color.BLACK
    assert color_to_move(STARTING_FEN) == Color.WHITE
