"""Protocol repository (the SQL implementation is one of possibly several backing stores)"""

from typing import Protocol

from squares_board.core.models import BoardModel, ClaimModel, SquareModel


class BoardRepository(Protocol):
    """Persistence layer for boards, their squares and the claims on them."""

    def get_board(self, board_id: str) -> BoardModel | None:
        """Get board by ID, if record exists."""
        ...

    def upsert_board(self, board: BoardModel) -> BoardModel:
        """Create the board, or replace all its settings if it already exists."""
        ...

    def list_squares(self, board_id: str) -> list[SquareModel]:
        """All squares stored under the board's partition (in no particular order)."""
        ...

    def get_square(self, board_id: str, square_key: str) -> SquareModel | None:
        """Single square including its current version token, if record exists."""
        ...

    def reset_squares(self, board_id: str, square_keys: list[str]) -> list[SquareModel]:
        """Create-or-replace the given squares as open, all or nothing."""
        ...

    def get_claim(self, board_id: str, claim_id: str) -> ClaimModel | None:
        """Get claim by ID, if record exists."""
        ...

    def reserve_squares(
        self, claim: ClaimModel, squares: list[SquareModel]
    ) -> list[SquareModel]:
        """
        Store the new claim and mark the squares as taken by it, all or nothing.

        Each square is only written if its version still matches the one it was read with.
        Raises ConcurrencyError (listing the squares that changed) when that is not the case,
        and ClaimIdCollisionError if the claim ID is already in use.
        """
        ...
