"""Text that goes with the board image: who plays what, whose turn, material balance and the result."""

from html import escape
from typing import Optional

import chess

from chatchess.chess.game import Game
from chatchess.chess.resolver import condition_of
from chatchess.core.models import GameSummary, UserModel
from chatchess.core.shared_types import Color, Condition, Status

PIECE_POINTS: dict[chess.PieceType, int] = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
}

DRAW_REASONS: dict[Condition, str] = {
    Condition.INSUFFICIENT_MATERIAL: "Draw by insufficient material.",
    Condition.REPETITION: "Draw by threefold repetition.",
    Condition.FIFTY_MOVES: "Draw by the fifty-move rule.",
}


def name(user: UserModel) -> str:
    return escape(user.display_name)


def material_score(board: chess.BaseBoard) -> int:
    """Positive: White is ahead. The king counts for nothing."""
    score = 0
    for piece_type, points in PIECE_POINTS.items():
        white = len(board.pieces(piece_type, chess.WHITE))
        black = len(board.pieces(piece_type, chess.BLACK))
        score += (white - black) * points
    return score


def material_line(board: chess.BaseBoard, white: UserModel, black: UserModel) -> Optional[str]:
    score = material_score(board)
    if score == 0:
        return None
    leader = white if score > 0 else black
    return f"{name(leader)} +{abs(score)}"


def status_line(game: Game, white: UserModel, black: UserModel) -> Optional[str]:
    users = {white.id: white, black.id: black}
    if game.status == Status.DRAW_PROPOSED and game.draw_proposed_by is not None:
        return f"{name(users[game.draw_proposed_by])} offers a draw."
    if game.status == Status.CHECKMATE and game.winner is not None:
        return f"Checkmate. {name(users[game.winner])} wins."
    if game.status == Status.STALEMATE:
        return "Draw by stalemate."
    if game.status == Status.RESIGNED and game.winner is not None and game.loser is not None:
        return f"{name(users[game.loser])} resigned. {name(users[game.winner])} wins."
    if game.status == Status.DRAWN:
        return DRAW_REASONS.get(condition_of(game.board), "Draw agreed.")
    return None


def build_caption(header: str, game: Game, white: UserModel, black: UserModel) -> str:
    to_move = white if game.color_to_move == Color.WHITE else black
    lines = [
        f"{escape(header)}.",
        f"White: {name(white)}",
        f"Black: {name(black)}",
    ]
    if not game.is_over:
        lines.append(f"To move: {name(to_move)}")

    if advantage := material_line(game.board, white, black):
        lines.append(advantage)
    if status := status_line(game, white, black):
        lines.append(status)
    return "\n".join(lines)


def format_user_history(user: UserModel, games: list[GameSummary]) -> str:
    lines = [
        f"History for {name(user)}.",
        f"Wins: {user.wins}, Losses: {user.losses}, Draws: {user.draws}, Win%: {user.win_percentage:.1f}",
    ]
    lines.extend(_game_line(summary) for summary in games)
    if not games:
        lines.append("No games yet.")
    lines.append("Use /history <page> for more.")
    return "\n".join(lines)


def format_head_to_head(
    user_a: UserModel, user_b: UserModel, games: list[GameSummary], total: int
) -> str:
    lines = [f"Head-to-head {name(user_a)} vs {name(user_b)}. Total games: {total}"]
    lines.extend(_game_line(summary) for summary in games)
    if not games:
        lines.append("No games yet.")
    lines.append("Use /history <page> for more.")
    return "\n".join(lines)


def _game_line(summary: GameSummary) -> str:
    outcome = summary.result or summary.status
    return (
        f"{summary.started_at:%Y-%m-%d}: {name(summary.white)} vs {name(summary.black)} ({outcome})"
    )
