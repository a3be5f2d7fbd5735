"""
Bridge between resolved moves and the rules engine.

Nothing in here knows chess rules: the engine applies the move and reports on the new position,
this module only translates both ways.
"""

import logging
from dataclasses import dataclass

import chess

from chatchess.chess.notation import ResolvedMove
from chatchess.core.exceptions import IllegalMoveError
from chatchess.core.shared_types import Condition, Status

logger = logging.getLogger(__name__)

CONDITION_TO_STATUS: dict[Condition, Status] = {
    Condition.NORMAL: Status.ONGOING,
    Condition.CHECK: Status.ONGOING,
    Condition.CHECKMATE: Status.CHECKMATE,
    Condition.STALEMATE: Status.STALEMATE,
    Condition.INSUFFICIENT_MATERIAL: Status.DRAWN,
    Condition.REPETITION: Status.DRAWN,
    Condition.FIFTY_MOVES: Status.DRAWN,
}


@dataclass(frozen=True)
class Outcome:
    """The position after a move and what the engine says about it."""

    board: chess.Board
    condition: Condition

    @property
    def fen(self) -> str:
        return self.board.fen()

    @property
    def status(self) -> Status:
        return CONDITION_TO_STATUS[self.condition]


def apply_move(board: chess.Board, resolved: ResolvedMove) -> Outcome:
    """
    Play the move on a copy of the board (the given board is left untouched).

    The board should carry the game's move stack, otherwise repetitions cannot be detected.
    """
    move = chess.Move.from_uci(resolved.uci)
    if not board.is_legal(move):
        # The parser only offers legal moves, so getting here means the two disagree.
        logger.warning(
            "Rules engine rejected parsed move %s (%s) in position %s",
            resolved.uci,
            resolved.san,
            board.fen(),
        )
        raise IllegalMoveError(f"Move not allowed: {resolved.san}")

    next_board = board.copy()
    next_board.push(move)
    return Outcome(board=next_board, condition=condition_of(next_board))


def condition_of(board: chess.Board) -> Condition:
    """Map the engine's view of the position onto our vocabulary. Game-ending checks come first."""
    if board.is_checkmate():
        return Condition.CHECKMATE
    if board.is_stalemate():
        return Condition.STALEMATE
    if board.is_insufficient_material():
        return Condition.INSUFFICIENT_MATERIAL
    if board.is_repetition(3):
        return Condition.REPETITION
    if board.is_fifty_moves():
        return Condition.FIFTY_MOVES
    if board.is_check():
        return Condition.CHECK
    return Condition.NORMAL
