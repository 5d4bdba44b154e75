"""Requests and Response models

Field names are snake_case in Python and camelCase on the wire (e.g. `display_name` <-> `displayName`).
"""

from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    field_validator,
)
from pydantic.alias_generators import to_camel

from squares_board.core.exceptions import InvalidRequestError


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _strip(value: Optional[str]) -> Optional[str]:
    return value.strip() if isinstance(value, str) else value


# --- REQUEST MODELS ---
class ProvisionRequest(CamelModel):
    """Create (or re-seed) a board. Anything left out falls back to the board defaults."""

    board_id: Optional[str] = None
    price_per_square: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("pricePerSquare", "price", "price_per_square"),
    )
    payment_label: Optional[str] = None
    payment_handle: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("subtitle", "teamName", "team_name"),
    )
    max_squares_per_order: Optional[int] = None
    show_names_publicly: Optional[bool | str] = None
    theme_logo_data_url: Optional[str] = None
    theme_accent: Optional[str] = None
    theme_bg: Optional[str] = None

    @field_validator("board_id", "title", "subtitle", "payment_label", "payment_handle")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _strip(value)

    @field_validator("price_per_square")
    @classmethod
    def validate_price(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value < 0:
            raise InvalidRequestError("pricePerSquare cannot be negative.")
        return value

    @field_validator("max_squares_per_order")
    @classmethod
    def validate_max_squares(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise InvalidRequestError("maxSquaresPerOrder cannot be negative (0 means unlimited).")
        return value


class GetBoardRequest(CamelModel):
    board_id: str

    @field_validator("board_id")
    @classmethod
    def strip_board_id(cls, value: str) -> str:
        return value.strip()


class ClaimRequest(CamelModel):
    """Emptiness of the fields is checked by the service, so a bad claim is rejected the same way from any caller."""

    board_id: str = ""
    display_name: str = ""
    squares: list[StrictInt | str] = Field(default_factory=list)

    @field_validator("board_id", "display_name")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()


# --- RESPONSE MODELS ---
class SquareView(CamelModel):
    """Public projection of a square (no claim ID, no version)."""

    number: int
    key: str
    row: int
    col: int
    status: str
    display_name: str


class BoardView(CamelModel):
    id: str
    title: str
    subtitle: str
    price_per_square: float
    max_squares_per_order: int
    payment_label: str
    payment_handle: str
    show_names_publicly: bool
    status: str
    theme_logo_data_url: str
    theme_accent: str
    theme_bg: str


class BoardSummary(CamelModel):
    open: int
    taken: int
    amount_pledged: float


class BoardResponse(CamelModel):
    ok: bool = True
    board: BoardView
    squares: list[SquareView]
    summary: BoardSummary


class ClaimResponse(CamelModel):
    ok: bool = True
    board_id: str
    claim_id: str
    display_name: str
    squares: list[str]
    status: str
    total: float


class ProvisionResponse(CamelModel):
    ok: bool = True
    board_id: str
    url_path: str
    seeded_squares: int


class ErrorResponse(CamelModel):
    ok: bool = False
    error: str
    taken: Optional[list[str]] = None
    detail: Optional[str] = None
