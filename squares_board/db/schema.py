"""Database tables / schema"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import JSON, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from squares_board.core.shared_types import (
    DEFAULT_PAYMENT_LABEL,
    DEFAULT_PRICE_PER_SQUARE,
    BoardStatus,
    ClaimStatus,
    SquareStatus,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_version() -> str:
    """Opaque version token, replaced on every write of a square row."""
    return uuid4().hex


class Base(DeclarativeBase):
    pass


class DBBoard(Base):
    __tablename__ = "boards"
    board_id: Mapped[str] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(default="")
    subtitle: Mapped[str] = mapped_column(default="")
    price_per_square: Mapped[float] = mapped_column(default=DEFAULT_PRICE_PER_SQUARE)
    payment_label: Mapped[str] = mapped_column(default=DEFAULT_PAYMENT_LABEL)
    payment_handle: Mapped[str] = mapped_column(default="")
    max_squares_per_order: Mapped[int] = mapped_column(default=0)
    status: Mapped[str] = mapped_column(default=BoardStatus.ACTIVE)
    show_names_publicly: Mapped[bool] = mapped_column(default=True)
    theme_logo_data_url: Mapped[str] = mapped_column(default="")
    theme_accent: Mapped[str] = mapped_column(default="")
    theme_bg: Mapped[str] = mapped_column(default="")
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBSquare(Base):
    """All squares of one board share the `board_id` partition."""

    __tablename__ = "squares"
    board_id: Mapped[str] = mapped_column(
        ForeignKey("boards.board_id"), primary_key=True
    )
    square_key: Mapped[str] = mapped_column(primary_key=True)
    square_number: Mapped[int]
    status: Mapped[str] = mapped_column(default=SquareStatus.OPEN)
    display_name: Mapped[str] = mapped_column(default="")
    claim_id: Mapped[str] = mapped_column(default="")
    version: Mapped[str] = mapped_column(default=new_version)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now)


class DBClaim(Base):
    __tablename__ = "claims"
    board_id: Mapped[str] = mapped_column(
        ForeignKey("boards.board_id"), primary_key=True
    )
    claim_id: Mapped[str] = mapped_column(primary_key=True)
    display_name: Mapped[str]
    square_keys: Mapped[list[str]] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(default=ClaimStatus.UNPAID)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now)
