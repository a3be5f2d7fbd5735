"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import BigInteger, ForeignKey, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBUser(Base):
    __tablename__ = "users"
    # id of the user on the chat platform
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    username: Mapped[Optional[str]] = mapped_column(String(64))
    first_name: Mapped[Optional[str]] = mapped_column(String(128))
    wins: Mapped[int] = mapped_column(default=0)
    losses: Mapped[int] = mapped_column(default=0)
    draws: Mapped[int] = mapped_column(default=0)


class DBGame(Base):
    __tablename__ = "games"
    __table_args__ = (
        Index("idx_games_chat_players", "chat_id", "white_user_id", "black_user_id"),
        Index("idx_games_chat_status", "chat_id", "status"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True)
    chat_id: Mapped[int] = mapped_column(BigInteger)
    white_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    black_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    starting_fen: Mapped[str]
    current_fen: Mapped[str]
    status: Mapped[str]
    result: Mapped[Optional[str]]
    draw_proposed_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"))
    started_at: Mapped[datetime] = mapped_column(default=utc_now)
    ended_at: Mapped[Optional[datetime]]

    moves: Mapped[list["DBMove"]] = relationship(
        back_populates="game",
        order_by="DBMove.number",
        cascade="all, delete-orphan",
    )


class DBMove(Base):
    __tablename__ = "moves"
    __table_args__ = (Index("idx_moves_game_number", "game_id", "number", unique=True),)

    id: Mapped[int] = mapped_column(primary_key=True)
    game_id: Mapped[UUID] = mapped_column(ForeignKey("games.id"))
    number: Mapped[int]
    uci: Mapped[str] = mapped_column(String(5))
    san: Mapped[str] = mapped_column(String(16))
    played_by: Mapped[int] = mapped_column(ForeignKey("users.id"))
    played_at: Mapped[datetime]

    game: Mapped[DBGame] = relationship(back_populates="moves")
