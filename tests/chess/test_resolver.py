"""Unit tests for chatchess/chess/resolver.py"""

import chess
import pytest

from chatchess.chess.notation import ResolvedMove, parse_move
from chatchess.chess.resolver import apply_move, condition_of
from chatchess.core.exceptions import IllegalMoveError
from chatchess.core.shared_types import Condition, Status


def play(board: chess.Board, *tokens: str) -> chess.Board:
    for token in tokens:
        board = apply_move(board, parse_move(token, board)).board
    return board


def test_apply_move_leaves_input_board_alone() -> None:
    board = chess.Board()
    outcome = apply_move(board, parse_move("e4", board))

    assert board.fen() == chess.STARTING_FEN
    assert outcome.fen == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
    assert outcome.condition == Condition.NORMAL
    assert outcome.status == Status.ONGOING


def test_apply_move_rejects_illegal_move() -> None:
    board = chess.Board()
    forged = ResolvedMove(move=chess.Move.from_uci("e2e5"), uci="e2e5", san="e5")
    with pytest.raises(IllegalMoveError):
        apply_move(board, forged)


def test_check() -> None:
    board = play(chess.Board(), "e4", "f6", "d4", "g5")
    outcome = apply_move(board, parse_move("Qh5", board))
    assert outcome.condition == Condition.CHECKMATE
    assert outcome.status == Status.CHECKMATE

    board = play(chess.Board(), "e4", "e5", "Qh5", "Nc6")
    outcome = apply_move(board, parse_move("Qxf7", board))
    assert outcome.condition == Condition.CHECK
    assert outcome.status == Status.ONGOING


def test_stalemate() -> None:
    board = chess.Board("7k/8/6Q1/8/8/8/8/K7 w - - 0 1")
    outcome = apply_move(board, parse_move("Qf7", board))
    assert outcome.condition == Condition.STALEMATE
    assert outcome.status == Status.STALEMATE


def test_insufficient_material() -> None:
    board = chess.Board("7k/8/8/8/8/8/1q6/K7 w - - 0 1")
    outcome = apply_move(board, parse_move("Kxb2", board))
    assert outcome.condition == Condition.INSUFFICIENT_MATERIAL
    assert outcome.status == Status.DRAWN


def test_threefold_repetition() -> None:
    board = play(chess.Board(), "Nf3", "Nf6", "Ng1", "Ng8", "Nf3", "Nf6", "Ng1")
    outcome = apply_move(board, parse_move("Ng8", board))
    assert outcome.condition == Condition.REPETITION
    assert outcome.status == Status.DRAWN


def test_fifty_move_rule() -> None:
    board = chess.Board("7k/8/8/8/8/8/R7/K7 w - - 99 80")
    outcome = apply_move(board, parse_move("Rb2", board))
    assert outcome.condition == Condition.FIFTY_MOVES
    assert outcome.status == Status.DRAWN


def test_checkmate_wins_over_fifty_move_rule() -> None:
    board = chess.Board("7k/8/6K1/8/8/8/8/R7 w - - 99 80")
    assert condition_of(apply_move(board, parse_move("Ra8", board)).board) == Condition.CHECKMATE
