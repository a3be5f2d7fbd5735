"""Implementation of (Game)Repository using SQLAlchemy"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chatchess.core.models import (
    ChatId,
    GameModel,
    GameSummary,
    MoveRecord,
    UserId,
    UserModel,
)
from chatchess.core.shared_types import GameResult, Status
from chatchess.db.schema import DBGame, DBMove, DBUser, utc_now

ACTIVE_STATUSES = [Status.ONGOING.value, Status.DRAW_PROPOSED.value]


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    # --- games ---
    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(
        self, game: GameModel, count_result: bool = False
    ) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        new_id = uuid4()
        game_db = DBGame(
            id=new_id,
            chat_id=game.chat_id,
            white_user_id=game.white_id,
            black_user_id=game.black_id,
            starting_fen=game.starting_fen,
            current_fen=game.current_fen,
            status=game.status,
            result=game.result,
            draw_proposed_by=game.draw_proposed_by,
            started_at=utc_now(),
        )
        game_db.moves = [self._to_db_move(record) for record in game.moves]
        self.db.add(game_db)
        if count_result:
            self._count_result(game)
        self._commit()
        self.db.refresh(game_db)
        return self._to_model(game_db), new_id

    def update_game(
        self, game_id: UUID, game: GameModel, count_result: bool = False
    ) -> GameModel | None:
        """
        Store the new state. Moves already on record are kept, later ones are appended.
        With count_result the players' counters are bumped in the same commit.
        """
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_db.current_fen = game.current_fen
        game_db.status = game.status
        game_db.result = game.result
        game_db.draw_proposed_by = game.draw_proposed_by
        if Status(game.status).is_terminal and game_db.ended_at is None:
            game_db.ended_at = utc_now()

        stored_numbers = {move.number for move in game_db.moves}
        for record in game.moves:
            if record.number not in stored_numbers:
                game_db.moves.append(self._to_db_move(record))

        if count_result:
            self._count_result(game)
        self._commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def find_active_game(
        self, chat_id: ChatId, player_a: UserId, player_b: UserId
    ) -> tuple[GameModel, UUID] | None:
        query = (
            select(DBGame)
            .where(DBGame.chat_id == chat_id)
            .where(DBGame.status.in_(ACTIVE_STATUSES))
            .where(self._between(player_a, player_b))
            .order_by(DBGame.started_at.desc())
            .limit(1)
        )
        game_db = self.db.scalar(query)
        if game_db is None:
            return None
        return self._to_model(game_db), game_db.id

    def games_for_user(
        self, user_id: UserId, limit: int, offset: int
    ) -> list[GameSummary]:
        query = (
            select(DBGame)
            .where(or_(DBGame.white_user_id == user_id, DBGame.black_user_id == user_id))
            .order_by(DBGame.started_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return [self._to_summary(game_db) for game_db in self.db.scalars(query)]

    def games_between(
        self, player_a: UserId, player_b: UserId, limit: int, offset: int
    ) -> tuple[list[GameSummary], int]:
        total = self.db.scalar(
            select(func.count()).select_from(DBGame).where(self._between(player_a, player_b))
        )
        query = (
            select(DBGame)
            .where(self._between(player_a, player_b))
            .order_by(DBGame.started_at.desc())
            .limit(limit)
            .offset(offset)
        )
        games = [self._to_summary(game_db) for game_db in self.db.scalars(query)]
        return games, total or 0

    # --- users ---
    def get_user(self, user_id: UserId) -> UserModel | None:
        user_db = self.db.get(DBUser, user_id)
        if user_db is None:
            return None
        return self._to_user(user_db)

    def upsert_user(self, user: UserModel) -> UserModel:
        user_db = self.db.get(DBUser, user.id)
        if user_db is None:
            user_db = DBUser(
                id=user.id,
                username=user.username,
                first_name=user.first_name,
                wins=0,
                losses=0,
                draws=0,
            )
            self.db.add(user_db)
        else:
            # keep what we know if the platform didn't send it this time
            user_db.username = user.username or user_db.username
            user_db.first_name = user.first_name or user_db.first_name
        self._commit()
        self.db.refresh(user_db)
        return self._to_user(user_db)

    # --- helpers ---
    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _count_result(self, game: GameModel) -> None:
        """Bump the win/loss/draw counters of both players. Not committed here."""
        if game.result is None:
            return
        white = self.db.get(DBUser, game.white_id)
        black = self.db.get(DBUser, game.black_id)
        if white is None or black is None:
            return

        if game.result == GameResult.WHITE_WINS:
            white.wins += 1
            black.losses += 1
        elif game.result == GameResult.BLACK_WINS:
            black.wins += 1
            white.losses += 1
        else:
            white.draws += 1
            black.draws += 1

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _between(self, player_a: UserId, player_b: UserId):
        return or_(
            and_(DBGame.white_user_id == player_a, DBGame.black_user_id == player_b),
            and_(DBGame.white_user_id == player_b, DBGame.black_user_id == player_a),
        )

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            chat_id=game_db.chat_id,
            white_id=game_db.white_user_id,
            black_id=game_db.black_user_id,
            starting_fen=game_db.starting_fen,
            current_fen=game_db.current_fen,
            status=game_db.status,
            result=game_db.result,
            draw_proposed_by=game_db.draw_proposed_by,
            moves=[self._to_record(move) for move in game_db.moves],
        )

    def _to_summary(self, game_db: DBGame) -> GameSummary:
        white = self.get_user(game_db.white_user_id) or UserModel(id=game_db.white_user_id)
        black = self.get_user(game_db.black_user_id) or UserModel(id=game_db.black_user_id)
        return GameSummary(
            game_id=game_db.id,
            started_at=_as_utc(game_db.started_at),
            white=white,
            black=black,
            status=game_db.status,
            result=game_db.result,
        )

    def _to_record(self, move_db: DBMove) -> MoveRecord:
        return MoveRecord(
            number=move_db.number,
            uci=move_db.uci,
            san=move_db.san,
            played_by=move_db.played_by,
            played_at=_as_utc(move_db.played_at),
        )

    def _to_db_move(self, record: MoveRecord) -> DBMove:
        return DBMove(
            number=record.number,
            uci=record.uci,
            san=record.san,
            played_by=record.played_by,
            played_at=record.played_at,
        )

    def _to_user(self, user_db: DBUser) -> UserModel:
        return UserModel(
            id=user_db.id,
            username=user_db.username,
            first_name=user_db.first_name,
            wins=user_db.wins,
            losses=user_db.losses,
            draws=user_db.draws,
        )


def _as_utc(moment: datetime) -> datetime:
    """SQLite hands back naive datetimes. Everything we store is UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
