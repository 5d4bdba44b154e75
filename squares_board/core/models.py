"""
Boundary layer data model(s).

These objects are used to communicate with the Service.
Both the API layer (higher) and the db layer (lower) translate their own representation into these records,
so the service never sees table rows, and the store never sees request bodies.
"""

from dataclasses import dataclass, field
from datetime import datetime

from squares_board.core.shared_types import (
    DEFAULT_PAYMENT_LABEL,
    DEFAULT_PRICE_PER_SQUARE,
    BoardStatus,
    ClaimStatus,
    SquareStatus,
)

# Type aliases to make the models easier to read
BoardId = str
ClaimId = str
SquareKey = str


@dataclass
class BoardModel:
    """Fundraiser settings of a single board."""

    board_id: BoardId
    title: str = ""
    subtitle: str = ""
    price_per_square: float = DEFAULT_PRICE_PER_SQUARE
    payment_label: str = DEFAULT_PAYMENT_LABEL
    payment_handle: str = ""
    max_squares_per_order: int = 0
    status: str = BoardStatus.ACTIVE
    show_names_publicly: bool = True
    theme_logo_data_url: str = ""
    theme_accent: str = ""
    theme_bg: str = ""

    @property
    def accepts_claims(self) -> bool:
        return self.status == BoardStatus.ACTIVE


@dataclass
class SquareModel:
    """One claimable square. `version` is the opaque token of the row as it was read."""

    board_id: BoardId
    key: SquareKey
    number: int
    status: str = SquareStatus.OPEN
    display_name: str = ""
    claim_id: ClaimId = ""
    version: str = ""
    updated_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status == SquareStatus.OPEN


@dataclass
class ClaimModel:
    """A participant reserving one or more squares together."""

    board_id: BoardId
    claim_id: ClaimId
    display_name: str
    square_keys: list[SquareKey] = field(default_factory=list)
    status: str = ClaimStatus.UNPAID
    created_at: datetime | None = None
    updated_at: datetime | None = None


def to_bool(value: bool | str | int) -> bool:
    """Normalize a flag coming in as bool, number or text ("true", "yes", ...)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in {"true", "yes", "y", "1", "on"}
