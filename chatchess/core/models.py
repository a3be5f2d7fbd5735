"""
Boundary layer data model(s).

These objects are used to communicate with the Service.
Both the domain layer (Game) and the persistence layer (repository) convert to/from the models defined here,
so neither needs to know about the other's internal representation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

UserId = int
ChatId = int


@dataclass(frozen=True)
class MoveRecord:
    """One played move. Created once by the Game and never changed afterwards."""

    number: int
    uci: str
    san: str
    played_by: UserId
    played_at: datetime


@dataclass
class GameModel:
    """Transport-safe representation of a chess game used between Service, DB, and Game layers."""

    chat_id: ChatId
    white_id: UserId
    black_id: UserId
    starting_fen: str
    current_fen: str
    status: str
    result: Optional[str] = None
    draw_proposed_by: Optional[UserId] = None
    moves: list[MoveRecord] = field(default_factory=list)


@dataclass
class UserModel:
    """A chat user that plays games. Counters only change when one of their games ends."""

    id: UserId
    username: Optional[str] = None
    first_name: Optional[str] = None
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def display_name(self) -> str:
        if self.username:
            return f"@{self.username}"
        if self.first_name:
            return self.first_name
        return f"user{self.id}"

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def win_percentage(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.wins * 100.0 / self.games_played


@dataclass
class GameSummary:
    """Row of a player's game listing."""

    game_id: UUID
    started_at: datetime
    white: UserModel
    black: UserModel
    status: str
    result: Optional[str] = None
