"""Protocol repository (SQLAlchemy implementation in sql_repository.py, a dict-backed one in the tests)"""

from typing import Protocol
from uuid import UUID

from chatchess.core.models import ChatId, GameModel, GameSummary, UserId, UserModel


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    # --- games ---
    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(
        self, game: GameModel, count_result: bool = False
    ) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(
        self, game_id: UUID, game: GameModel, count_result: bool = False
    ) -> GameModel | None:
        """
        Store the new state. Moves already on record are kept, later ones are appended.
        ----

        With count_result, the win/loss/draw counters of both players are bumped
        according to game.result, in the same transaction as the game itself.
        Either both are stored or neither is.
        """
        ...

    def find_active_game(
        self, chat_id: ChatId, player_a: UserId, player_b: UserId
    ) -> tuple[GameModel, UUID] | None:
        """The unfinished game between these two players (in either colour) in this chat, if any."""
        ...

    def games_for_user(
        self, user_id: UserId, limit: int, offset: int
    ) -> list[GameSummary]:
        """Most recent first."""
        ...

    def games_between(
        self, player_a: UserId, player_b: UserId, limit: int, offset: int
    ) -> tuple[list[GameSummary], int]:
        """Most recent first, plus the total number of games between them."""
        ...

    # --- users ---
    def get_user(self, user_id: UserId) -> UserModel | None: ...

    def upsert_user(self, user: UserModel) -> UserModel:
        """Create the user or refresh their names. Counters of an existing user are left alone."""
        ...
