"""
Type definitions used across layers
"""

from enum import StrEnum


class BoardStatus(StrEnum):
    ACTIVE = "active"
    CLOSED = "closed"


class SquareStatus(StrEnum):
    OPEN = "open"
    TAKEN = "taken"


class ClaimStatus(StrEnum):
    UNPAID = "unpaid"
    PAID = "paid"


# --- Defaults applied when a board is provisioned without these fields
DEFAULT_PRICE_PER_SQUARE = 20.0
DEFAULT_PAYMENT_LABEL = "Venmo"
DEMO_BOARD_ID = "test-board"
