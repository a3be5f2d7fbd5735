"""Requests and Response models"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from chatchess.core.exceptions import InvalidRequestError
from chatchess.core.models import MoveRecord, UserModel
from chatchess.core.shared_types import Color, GameResult, Status


# --- REQUEST MODELS ---
class PlayerInfo(BaseModel):
    """A user as the chat platform describes them."""

    id: int
    username: Optional[str] = None
    first_name: Optional[str] = None

    def to_user(self) -> UserModel:
        return UserModel(id=self.id, username=self.username, first_name=self.first_name)


class StartGameRequest(BaseModel):
    chat_id: int
    challenger: PlayerInfo
    opponent: PlayerInfo
    opening_move: Optional[str] = None
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        parts = value.strip().split(" ")
        if len(parts) != 6:
            raise InvalidRequestError(
                "FEN string must contain 6 space-separated parts."
            )
        return value.strip()

    @model_validator(mode="after")
    def validate_players(self) -> "StartGameRequest":
        if self.challenger.id == self.opponent.id:
            raise InvalidRequestError("You cannot start a game against yourself.")
        return self


class MoveRequest(BaseModel):
    game_id: UUID
    player_id: int
    move_text: str

    @field_validator("move_text")
    @classmethod
    def validate_move_text(cls, value: str) -> str:
        if not value.strip():
            raise InvalidRequestError("Please send a move like e4 or e2e4.")
        return value.strip()


class GameActionRequest(BaseModel):
    """Draw proposals/answers and resignations only need to know who is acting in which game."""

    game_id: UUID
    player_id: int


class GetGameRequest(BaseModel):
    game_id: UUID


class HistoryRequest(BaseModel):
    user_id: int
    other_user_id: Optional[int] = None
    page: int = 1

    @field_validator("page")
    @classmethod
    def validate_page(cls, value: int) -> int:
        # page 0 or negative: show the first page
        return max(value, 1)


# --- RESPONSE MODELS ---
class MoveResponse(BaseModel):
    number: int
    uci: str
    san: str
    played_by: int
    played_at: datetime

    @classmethod
    def from_record(cls, record: MoveRecord) -> "MoveResponse":
        return cls(
            number=record.number,
            uci=record.uci,
            san=record.san,
            played_by=record.played_by,
            played_at=record.played_at,
        )


class GameResponse(BaseModel):
    game_id: UUID
    chat_id: int
    players: dict[Color, int]
    fen_state: str
    starting_state: str
    side_to_move: Color
    status: Status
    result: Optional[GameResult]
    draw_proposed_by: Optional[int]
    move_history: list[MoveResponse]


class BoardUpdate(BaseModel):
    """Everything the transport needs to post the board after an action."""

    game: GameResponse
    header: str
    caption: str
    flipped: bool
    image_png: bytes


class HistoryResponse(BaseModel):
    user_id: int
    page: int
    text: str
