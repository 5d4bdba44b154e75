"""Implementation of (Board)Repository using SQLAlchemy"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from squares_board.core.exceptions import (
    ClaimIdCollisionError,
    ConcurrencyError,
    StoreError,
)
from squares_board.core.models import BoardModel, ClaimModel, SquareModel, to_bool
from squares_board.core.shared_types import SquareStatus
from squares_board.db.schema import DBBoard, DBClaim, DBSquare, new_version, utc_now
from squares_board.grid.square import GridSquare

logger = logging.getLogger(__name__)


class SQLBoardRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    # -- Boards --
    def get_board(self, board_id: str) -> BoardModel | None:
        """Get board by ID, if record exists."""
        with self._store_errors("get board"):
            board_db = self.db.get(DBBoard, board_id, populate_existing=True)
            if board_db:
                return self._to_board_model(board_db)
            return None

    def upsert_board(self, board: BoardModel) -> BoardModel:
        """Create the board, or replace all its settings if it already exists."""
        with self._transaction("upsert board"):
            board_db = self.db.merge(
                DBBoard(
                    board_id=board.board_id,
                    title=board.title,
                    subtitle=board.subtitle,
                    price_per_square=board.price_per_square,
                    payment_label=board.payment_label,
                    payment_handle=board.payment_handle,
                    max_squares_per_order=board.max_squares_per_order,
                    status=board.status,
                    show_names_publicly=to_bool(board.show_names_publicly),
                    theme_logo_data_url=board.theme_logo_data_url,
                    theme_accent=board.theme_accent,
                    theme_bg=board.theme_bg,
                    updated_at=utc_now(),
                )
            )
            # Convert before the commit expires the instance.
            stored = self._to_board_model(board_db)
        return stored

    # -- Squares --
    def list_squares(self, board_id: str) -> list[SquareModel]:
        """All squares stored under the board's partition (in no particular order)."""
        with self._store_errors("list squares"):
            query = (
                select(DBSquare)
                .where(DBSquare.board_id == board_id)
                .execution_options(populate_existing=True)
            )
            return [self._to_square_model(row) for row in self.db.scalars(query)]

    def get_square(self, board_id: str, square_key: str) -> SquareModel | None:
        """Single square including its current version token, if record exists."""
        with self._store_errors("get square"):
            # Version tokens must come from the store, never from a stale identity-map copy.
            square_db = self.db.get(
                DBSquare, (board_id, square_key), populate_existing=True
            )
            if square_db:
                return self._to_square_model(square_db)
            return None

    def reset_squares(self, board_id: str, square_keys: list[str]) -> list[SquareModel]:
        """Create-or-replace the given squares as open, all or nothing."""
        now = utc_now()
        with self._transaction("reset squares"):
            rows = [
                self.db.merge(
                    DBSquare(
                        board_id=board_id,
                        square_key=key,
                        square_number=GridSquare.from_key(key).number,
                        status=SquareStatus.OPEN,
                        display_name="",
                        claim_id="",
                        version=new_version(),
                        updated_at=now,
                    )
                )
                for key in square_keys
            ]
            # Convert before the commit expires the instances.
            reset = [self._to_square_model(row) for row in rows]
        return reset

    # -- Claims --
    def get_claim(self, board_id: str, claim_id: str) -> ClaimModel | None:
        """Get claim by ID, if record exists."""
        with self._store_errors("get claim"):
            claim_db = self.db.get(DBClaim, (board_id, claim_id))
            if claim_db:
                return self._to_claim_model(claim_db)
            return None

    def reserve_squares(
        self, claim: ClaimModel, squares: list[SquareModel]
    ) -> list[SquareModel]:
        """
        Store the new claim and mark the squares as taken by it, all or nothing.

        Each square is only written if its version still matches the one it was read with.
        """
        now = utc_now()
        reserved: list[SquareModel] = []
        lost: list[str] = []

        with self._transaction("reserve squares"):
            if self.db.get(DBClaim, (claim.board_id, claim.claim_id)) is not None:
                raise ClaimIdCollisionError(
                    f"Claim {claim.claim_id!r} already exists on board {claim.board_id!r}."
                )
            # Claim row goes in first: it records the intent the square rows will point back to.
            self.db.add(
                DBClaim(
                    board_id=claim.board_id,
                    claim_id=claim.claim_id,
                    display_name=claim.display_name,
                    square_keys=list(claim.square_keys),
                    status=claim.status,
                    created_at=now,
                    updated_at=now,
                )
            )
            try:
                self.db.flush()
            except IntegrityError:
                # Another writer inserted the same ID after the check above.
                raise ClaimIdCollisionError(
                    f"Claim {claim.claim_id!r} already exists on board {claim.board_id!r}."
                )

            for square in squares:
                version = new_version()
                result = self.db.execute(
                    update(DBSquare)
                    .where(
                        DBSquare.board_id == square.board_id,
                        DBSquare.square_key == square.key,
                        DBSquare.version == square.version,
                        DBSquare.status == SquareStatus.OPEN,
                    )
                    .values(
                        status=SquareStatus.TAKEN,
                        display_name=claim.display_name,
                        claim_id=claim.claim_id,
                        version=version,
                        updated_at=now,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:  # type: ignore[attr-defined]
                    lost.append(square.key)
                    continue
                reserved.append(
                    SquareModel(
                        board_id=square.board_id,
                        key=square.key,
                        number=square.number,
                        status=SquareStatus.TAKEN,
                        display_name=claim.display_name,
                        claim_id=claim.claim_id,
                        version=version,
                        updated_at=now,
                    )
                )

            if lost:
                # Leaving the block with an exception rolls back the claim row and every square written so far.
                raise ConcurrencyError(lost)

        return reserved

    # -- Internal helpers --
    @contextmanager
    def _transaction(self, action: str) -> Iterator[None]:
        """Commit on success, roll back on any failure. Unexpected backend errors become StoreError."""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Store failure during %s", action)
            raise StoreError(f"Store failure during {action}.", detail=str(exc))
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def _store_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception("Store failure during %s", action)
            raise StoreError(f"Store failure during {action}.", detail=str(exc))

    def _to_board_model(self, board_db: DBBoard) -> BoardModel:
        """Convert SQLAlchemy model to data transfer model."""
        return BoardModel(
            board_id=board_db.board_id,
            title=board_db.title,
            subtitle=board_db.subtitle,
            price_per_square=board_db.price_per_square,
            payment_label=board_db.payment_label,
            payment_handle=board_db.payment_handle,
            max_squares_per_order=board_db.max_squares_per_order,
            status=board_db.status,
            show_names_publicly=board_db.show_names_publicly,
            theme_logo_data_url=board_db.theme_logo_data_url,
            theme_accent=board_db.theme_accent,
            theme_bg=board_db.theme_bg,
        )

    def _to_square_model(self, square_db: DBSquare) -> SquareModel:
        """Convert SQLAlchemy model to data transfer model."""
        return SquareModel(
            board_id=square_db.board_id,
            key=square_db.square_key,
            number=square_db.square_number,
            status=square_db.status,
            display_name=square_db.display_name,
            claim_id=square_db.claim_id,
            version=square_db.version,
            updated_at=square_db.updated_at,
        )

    def _to_claim_model(self, claim_db: DBClaim) -> ClaimModel:
        """Convert SQLAlchemy model to data transfer model."""
        return ClaimModel(
            board_id=claim_db.board_id,
            claim_id=claim_db.claim_id,
            display_name=claim_db.display_name,
            square_keys=list(claim_db.square_keys),
            status=claim_db.status,
            created_at=claim_db.created_at,
            updated_at=claim_db.updated_at,
        )

