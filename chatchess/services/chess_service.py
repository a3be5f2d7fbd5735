"""Orchestration of a chat request: domain logic (Game), persistence (repository) and the board image (cache)."""

import logging
from typing import Callable
from uuid import UUID

from chatchess.api.models import (
    BoardUpdate,
    GameActionRequest,
    GameResponse,
    GetGameRequest,
    HistoryRequest,
    HistoryResponse,
    MoveRequest,
    MoveResponse,
    StartGameRequest,
)
from chatchess.chess.game import Game
from chatchess.chess.notation import extract_move
from chatchess.core.exceptions import (
    ActiveGameExistsError,
    RenderError,
    RepositoryError,
    UnrecognizedTokenError,
)
from chatchess.core.models import UserId, UserModel
from chatchess.core.shared_types import Color
from chatchess.db.repository import GameRepository
from chatchess.render.cache import ImageCache
from chatchess.services.captions import (
    build_caption,
    format_head_to_head,
    format_user_history,
)
from chatchess.services.locks import LockRegistry

logger = logging.getLogger(__name__)

HISTORY_PAGE_SIZE = 10

GameAction = Callable[[Game, UserId], None]


class ChessService:
    """Orchestration of layers for chess games played in a chat."""

    def __init__(
        self,
        repository: GameRepository,
        image_cache: ImageCache,
        flip_for_black: bool = True,
    ) -> None:
        self.repo = repository
        self.images = image_cache
        self.flip_for_black = flip_for_black
        self._locks = LockRegistry()

    # -- chat command logic ---
    def start_game(self, request: StartGameRequest) -> BoardUpdate:
        """The challenger (White) starts a game against the opponent, optionally with a first move."""
        white = self.repo.upsert_user(request.challenger.to_user())
        black = self.repo.upsert_user(request.opponent.to_user())

        opening_move = None
        if request.opening_move:
            opening_move = extract_move(request.opening_move)
            if opening_move is None:
                raise UnrecognizedTokenError(request.opening_move)

        # the pair lock stops two concurrent challenges from both creating a game
        pair = frozenset((white.id, black.id))
        with self._locks.hold((request.chat_id, pair)):
            if self.repo.find_active_game(request.chat_id, white.id, black.id):
                raise ActiveGameExistsError(
                    "There is already an ongoing game between these players in this chat."
                )
            game = Game.new_game(
                chat_id=request.chat_id,
                white=white.id,
                black=black.id,
                starting_fen=request.starting_fen,
                opening_move=opening_move,
            )
            _, game_id = self.repo.create_game(game.to_model(), count_result=game.is_over)

        logger.info(
            "Game %s started in chat %s: %s vs %s",
            game_id,
            request.chat_id,
            white.id,
            black.id,
        )
        return self._board_update(game_id, game, "Game started")

    def make_move(self, request: MoveRequest) -> BoardUpdate:
        """Make a move attempt."""
        move_text = extract_move(request.move_text)
        if move_text is None:
            raise UnrecognizedTokenError(request.move_text)

        with self._locks.hold(request.game_id):
            game = self._fetch_game(request.game_id)
            was_over = game.is_over
            record = game.make_move(move_text, request.player_id)
            self._store(request.game_id, game, was_over)

        logger.info(
            "Game %s: move %d %s (%s) by %s",
            request.game_id,
            record.number,
            record.san,
            record.uci,
            record.played_by,
        )
        return self._board_update(request.game_id, game, "Move played")

    def propose_draw(self, request: GameActionRequest) -> BoardUpdate:
        return self._act(request, Game.propose_draw, "Draw proposed")

    def accept_draw(self, request: GameActionRequest) -> BoardUpdate:
        return self._act(request, Game.accept_draw, "Draw agreed")

    def decline_draw(self, request: GameActionRequest) -> BoardUpdate:
        return self._act(request, Game.decline_draw, "Draw declined")

    def resign(self, request: GameActionRequest) -> BoardUpdate:
        return self._act(request, Game.resign, "Resigned")

    def get_game(self, request: GetGameRequest) -> GameResponse:
        """Retrieve current game state."""
        game = self._fetch_game(request.game_id)
        return self._game_response(request.game_id, game)

    def player_history(self, request: HistoryRequest) -> HistoryResponse:
        """A player's record and recent games, or a head-to-head listing when a second player is given."""
        user = self._user(request.user_id)
        offset = (request.page - 1) * HISTORY_PAGE_SIZE

        if request.other_user_id is None:
            games = self.repo.games_for_user(user.id, HISTORY_PAGE_SIZE, offset)
            text = format_user_history(user, games)
        else:
            other = self._user(request.other_user_id)
            games, total = self.repo.games_between(
                user.id, other.id, HISTORY_PAGE_SIZE, offset
            )
            text = format_head_to_head(user, other, games, total)
        return HistoryResponse(user_id=user.id, page=request.page, text=text)

    # -- Internal helpers --
    def _act(
        self, request: GameActionRequest, action: GameAction, header: str
    ) -> BoardUpdate:
        """Run a non-move action under the game's lock and persist the result."""
        with self._locks.hold(request.game_id):
            game = self._fetch_game(request.game_id)
            was_over = game.is_over
            action(game, request.player_id)
            self._store(request.game_id, game, was_over)

        logger.info(
            "Game %s: %s by %s, status now %s",
            request.game_id,
            header.lower(),
            request.player_id,
            game.status,
        )
        return self._board_update(request.game_id, game, header)

    def _store(self, game_id: UUID, game: Game, was_over: bool) -> None:
        """Persist the game. Counters are only touched on the transition into a terminal state."""
        finished = game.is_over and not was_over
        self.repo.update_game(game_id, game.to_model(), count_result=finished)

    def _board_update(self, game_id: UUID, game: Game, header: str) -> BoardUpdate:
        white = self._user_or_placeholder(game.players[Color.WHITE])
        black = self._user_or_placeholder(game.players[Color.BLACK])
        flipped = self.flip_for_black and game.color_to_move == Color.BLACK
        return BoardUpdate(
            game=self._game_response(game_id, game),
            header=header,
            caption=build_caption(header, game, white, black),
            flipped=flipped,
            image_png=self._render(game.fen, flipped),
        )

    def _render(self, fen: str, flipped: bool) -> bytes:
        """The renderer is total over valid positions, so any failure here is a bug: log it and fail the request."""
        try:
            return self.images.image_for(fen, flipped)
        except Exception as exc:
            logger.exception("Rendering failed for %s (flipped=%s)", fen, flipped)
            if isinstance(exc, RenderError):
                raise
            raise RenderError(f"Could not draw the board for {fen!r}") from exc

    def _game_response(self, game_id: UUID, game: Game) -> GameResponse:
        return GameResponse(
            game_id=game_id,
            chat_id=game.chat_id,
            players=game.players,
            fen_state=game.fen,
            starting_state=game.starting_fen,
            side_to_move=game.color_to_move,
            status=game.status,
            result=game.result,
            draw_proposed_by=game.draw_proposed_by,
            move_history=[MoveResponse.from_record(record) for record in game.moves],
        )

    def _fetch_game(self, game_id: UUID) -> Game:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return Game.from_model(game_model)

    def _user(self, user_id: UserId) -> UserModel:
        user = self.repo.get_user(user_id)
        if user is None:
            raise RepositoryError(f"User with {user_id=} not found.")
        return user

    def _user_or_placeholder(self, user_id: UserId) -> UserModel:
        return self.repo.get_user(user_id) or UserModel(id=user_id)
