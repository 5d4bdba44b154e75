"""Custom exceptions, shared by the service, db and api layers."""

from typing import Any


class SquaresBoardError(Exception):
    """Top-level exception for anything that goes wrong on a squares board."""

    status_code: int = 500

    def extra(self) -> dict[str, Any]:
        """Additional fields to send along with the error message."""
        return {}


class InvalidRequestError(SquaresBoardError):
    """Malformed or missing input, or a board policy limit was exceeded."""

    status_code = 400


class NotFoundError(SquaresBoardError):
    """Board or square does not exist."""

    status_code = 404


class InvalidStateError(SquaresBoardError):
    """Board exists but does not accept claims (not active)."""

    status_code = 400


class ConflictError(SquaresBoardError):
    """One or more of the requested squares are no longer open."""

    status_code = 409

    def __init__(self, message: str, taken: list[str]) -> None:
        super().__init__(message)
        self.taken = taken

    def extra(self) -> dict[str, Any]:
        return {"taken": self.taken}


class StoreError(SquaresBoardError):
    """Unexpected failure of the backing store."""

    status_code = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail

    def extra(self) -> dict[str, Any]:
        return {"detail": self.detail} if self.detail else {}


class ConcurrencyError(StoreError):
    """A conditional write found a different version token than the one that was read."""

    def __init__(self, lost: list[str]) -> None:
        super().__init__(f"Version mismatch on squares: {', '.join(lost)}")
        self.lost = lost


class ClaimIdCollisionError(StoreError):
    """A claim row with the same ID already exists."""
