"""
The Game class is the entrypoint into the domain layer for the service layer.
It owns the lifecycle of a single game: whose turn it is, draw offers, resignation and the terminal outcome.
Reading the user's move text and applying it are delegated to notation.py and resolver.py.

Every action either completes fully or raises before touching any field, so a failed attempt
leaves the Game exactly as it was.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Self

import chess

from chatchess.chess.fen import STARTING_FEN, load_board
from chatchess.chess.notation import parse_move
from chatchess.chess.resolver import apply_move
from chatchess.core.exceptions import (
    DrawAlreadyProposedError,
    GameAlreadyEndedError,
    GameStateError,
    InconsistentHistoryError,
    NoPendingDrawProposalError,
    NotAParticipantError,
    NotYourTurnError,
    OwnDrawProposalError,
)
from chatchess.core.models import ChatId, GameModel, MoveRecord, UserId
from chatchess.core.shared_types import Color, GameResult, Status

logger = logging.getLogger(__name__)

DRAWN_STATUSES = (Status.STALEMATE, Status.DRAWN)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def opposite(color: Color) -> Color:
    return Color.BLACK if color == Color.WHITE else Color.WHITE


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    chat_id: ChatId
    players: dict[Color, UserId]
    starting_fen: str
    board: chess.Board
    status: Status = Status.ONGOING
    moves: list[MoveRecord] = field(default_factory=list)
    result: Optional[GameResult] = None
    draw_proposed_by: Optional[UserId] = None

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """
        Rebuild a Game from stored data.
        ----

        The board is rebuilt by replaying the move history from the starting position (the engine needs the
        move stack to detect repetitions). The result must land exactly on the stored position.
        """
        try:
            status = Status(model.status)
        except ValueError as exc:
            raise GameStateError(
                f"Invalid status code: {model.status!r}. \nPick one from {', '.join(status.value for status in Status)}"
            ) from exc

        board = load_board(model.starting_fen)
        for expected_number, record in enumerate(model.moves, start=1):
            if record.number != expected_number:
                raise InconsistentHistoryError(
                    f"Move #{record.number} found where #{expected_number} was expected."
                )
            try:
                move = chess.Move.from_uci(record.uci)
            except ValueError as exc:
                raise InconsistentHistoryError(
                    f"Stored move #{record.number} ({record.uci!r}) is not a move."
                ) from exc
            if not board.is_legal(move):
                raise InconsistentHistoryError(
                    f"Stored move #{record.number} ({record.uci}) is not legal when replayed."
                )
            board.push(move)

        if board.fen() != model.current_fen:
            raise InconsistentHistoryError(
                f"Replayed history gives {board.fen()!r}, but the stored position is {model.current_fen!r}."
            )

        game = cls(
            chat_id=model.chat_id,
            players={Color.WHITE: model.white_id, Color.BLACK: model.black_id},
            starting_fen=model.starting_fen,
            board=board,
            status=status,
            moves=list(model.moves),
            result=GameResult(model.result) if model.result else None,
            draw_proposed_by=model.draw_proposed_by,
        )
        game._validate_draw_proposal()
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            chat_id=self.chat_id,
            white_id=self.players[Color.WHITE],
            black_id=self.players[Color.BLACK],
            starting_fen=self.starting_fen,
            current_fen=self.fen,
            status=self.status.value,
            result=self.result.value if self.result else None,
            draw_proposed_by=self.draw_proposed_by,
            moves=list(self.moves),
        )

    @classmethod
    def new_game(
        cls,
        chat_id: ChatId,
        white: UserId,
        black: UserId,
        starting_fen: Optional[str] = None,
        opening_move: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Self:
        """Start a game between two players. The first player takes the white pieces.
        If an opening move is given, it is the challenger's, so White must be the side to move."""
        if white == black:
            raise GameStateError("You cannot start a game against yourself.")

        fen = starting_fen or STARTING_FEN
        game = cls(
            chat_id=chat_id,
            players={Color.WHITE: white, Color.BLACK: black},
            starting_fen=fen,
            board=load_board(fen),
        )
        if opening_move:
            if game.color_to_move != Color.WHITE:
                raise GameStateError(
                    "An opening move can only be given when White is to move in the starting position."
                )
            game.make_move(opening_move, white, now=now)
        return game

    # --- READ-ONLY VIEWS ---
    @property
    def fen(self) -> str:
        return self.board.fen()

    @property
    def color_to_move(self) -> Color:
        return Color.WHITE if self.board.turn == chess.WHITE else Color.BLACK

    @property
    def turn_player(self) -> UserId:
        return self.players[self.color_to_move]

    @property
    def is_over(self) -> bool:
        return self.status.is_terminal

    @property
    def winner(self) -> Optional[UserId]:
        if self.result == GameResult.WHITE_WINS:
            return self.players[Color.WHITE]
        if self.result == GameResult.BLACK_WINS:
            return self.players[Color.BLACK]
        return None

    @property
    def loser(self) -> Optional[UserId]:
        winner = self.winner
        if winner is None:
            return None
        return self.opponent_of(winner)

    def color_of(self, player: UserId) -> Color:
        self._assert_participant(player)
        return next(color for color, user in self.players.items() if user == player)

    def opponent_of(self, player: UserId) -> UserId:
        return self.players[opposite(self.color_of(player))]

    # --- ACTIONS ---
    def make_move(
        self, move_text: str, player: UserId, now: Optional[datetime] = None
    ) -> MoveRecord:
        """
        Attempt to make a move
        -----

        1. the game must still be running, the player must be in it and it must be their turn
        2. resolve the text to one legal move (notation.py)
        3. apply it with the rules engine and read off the new condition (resolver.py)
        4. commit: board, move history, status. A pending draw proposal is dropped by playing on.
        """
        self._assert_not_over()
        self._assert_participant(player)
        self._assert_your_turn(player)

        mover_color = self.color_to_move
        resolved = parse_move(move_text, self.board)
        outcome = apply_move(self.board, resolved)

        record = MoveRecord(
            number=len(self.moves) + 1,
            uci=resolved.uci,
            san=resolved.san,
            played_by=player,
            played_at=now or utc_now(),
        )
        new_status = outcome.status
        if new_status == Status.CHECKMATE:
            result = self._win_for(mover_color)
        elif new_status in DRAWN_STATUSES:
            result = GameResult.DRAW
        else:
            result = None

        # --- commit ---
        self.board = outcome.board
        self.moves.append(record)
        self.draw_proposed_by = None
        self._change_status(new_status, result)
        return record

    def propose_draw(self, player: UserId) -> None:
        """Only the side to move can offer a draw (instead of moving)."""
        self._assert_not_over()
        self._assert_participant(player)
        if self.status == Status.DRAW_PROPOSED:
            raise DrawAlreadyProposedError("A draw has already been proposed.")
        self._assert_your_turn(player)

        self.draw_proposed_by = player
        self._change_status(Status.DRAW_PROPOSED)

    def accept_draw(self, player: UserId) -> None:
        self._assert_pending_proposal_for(player)
        self.draw_proposed_by = None
        self._change_status(Status.DRAWN, GameResult.DRAW)

    def decline_draw(self, player: UserId) -> None:
        self._assert_pending_proposal_for(player)
        self.draw_proposed_by = None
        self._change_status(Status.ONGOING)

    def resign(self, player: UserId) -> None:
        """Either player can resign at any point, whoever's turn it is. Drops any pending draw proposal."""
        self._assert_not_over()
        self._assert_participant(player)

        result = self._win_for(opposite(self.color_of(player)))
        self.draw_proposed_by = None
        self._change_status(Status.RESIGNED, result)

    # -- PRIVATE HELPERS ---
    def _assert_not_over(self) -> None:
        if self.is_over:
            raise GameAlreadyEndedError(f"This game has already ended. status: {self.status}")

    def _assert_participant(self, player: UserId) -> None:
        if player not in self.players.values():
            raise NotAParticipantError("This game belongs to other players.")

    def _assert_your_turn(self, player: UserId) -> None:
        """You must wait for your turn before making a move / offering a draw."""
        if player != self.turn_player:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {self.color_to_move} to move first."
            )

    def _assert_pending_proposal_for(self, player: UserId) -> None:
        """Accepting/declining: there must be an offer on the table, made by the other player."""
        self._assert_not_over()
        self._assert_participant(player)
        if self.status != Status.DRAW_PROPOSED:
            raise NoPendingDrawProposalError("There is no draw proposal to respond to.")
        if player == self.draw_proposed_by:
            raise OwnDrawProposalError(
                "You proposed this draw. Waiting for your opponent to respond."
            )

    def _validate_draw_proposal(self) -> None:
        if self.status == Status.DRAW_PROPOSED:
            if self.draw_proposed_by not in self.players.values():
                raise GameStateError("A draw proposal must be made by one of the players.")
        elif self.draw_proposed_by is not None:
            raise GameStateError(
                f"Draw proposer recorded while status is {self.status!r}."
            )

    def _win_for(self, color: Color) -> GameResult:
        return GameResult.WHITE_WINS if color == Color.WHITE else GameResult.BLACK_WINS

    def _change_status(
        self, new_status: Status, result: Optional[GameResult] = None
    ) -> None:
        if new_status.is_terminal:
            logger.info(
                "Game in chat %s ended: %s (%s)", self.chat_id, new_status, result
            )
        self.status = new_status
        self.result = result
