"""Unit tests for squares_board/db/sql_repository.py"""

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from squares_board.core.exceptions import (
    ClaimIdCollisionError,
    ConcurrencyError,
    StoreError,
)
from squares_board.core.shared_types import BoardStatus, ClaimStatus, SquareStatus
from squares_board.db.schema import DBClaim, DBSquare
from squares_board.db.sql_repository import (
    BoardModel,
    ClaimModel,
    SQLBoardRepository,
)
from squares_board.grid.square import all_squares

ALL_KEYS = [square.key for square in all_squares()]


@pytest.fixture
def repo(db_session_repo: Session) -> SQLBoardRepository:
    """Repository with one provisioned board: 'b1', 100 open squares."""
    repository = SQLBoardRepository(db_session_repo)
    repository.upsert_board(BoardModel(board_id="b1", title="Fundraiser", price_per_square=20))
    repository.reset_squares("b1", ALL_KEYS)
    return repository


def _claim(claim_id: str, keys: list[str], name: str = "Alice") -> ClaimModel:
    return ClaimModel(board_id="b1", claim_id=claim_id, display_name=name, square_keys=keys)


# --- BOARDS ----
def test_upsert_and_get_board(db_session_repo: Session) -> None:
    model = BoardModel(
        board_id="b1",
        title="Fundraiser",
        subtitle="Doms",
        price_per_square=15,
        payment_label="Venmo",
        payment_handle="@doms",
        max_squares_per_order=10,
    )
    repo = SQLBoardRepository(db_session_repo)
    stored = repo.upsert_board(model)
    assert stored == model
    assert repo.get_board("b1") == model


def test_get_unknown_board(db_session_repo: Session) -> None:
    repo = SQLBoardRepository(db_session_repo)
    assert repo.get_board("missing") is None


def test_upsert_replaces_existing_board(repo: SQLBoardRepository) -> None:
    """Second upsert overwrites every field, including ones left at their defaults."""
    replacement = BoardModel(board_id="b1", title="", status=BoardStatus.CLOSED)
    assert repo.upsert_board(replacement) == replacement
    assert repo.get_board("b1") == replacement


def test_show_names_flag_is_stored_as_bool(db_session_repo: Session) -> None:
    repo = SQLBoardRepository(db_session_repo)
    repo.upsert_board(BoardModel(board_id="b2", show_names_publicly="no"))  # type: ignore[arg-type]
    stored = repo.get_board("b2")
    assert stored is not None
    assert stored.show_names_publicly is False


# --- SQUARES ----
def test_reset_creates_all_squares_open(repo: SQLBoardRepository) -> None:
    squares = repo.list_squares("b1")
    assert len(squares) == 100
    assert sorted(square.number for square in squares) == list(range(1, 101))
    assert all(square.status == SquareStatus.OPEN for square in squares)
    assert all(square.claim_id == "" and square.display_name == "" for square in squares)


def test_reset_is_idempotent(repo: SQLBoardRepository) -> None:
    """Running the seed again does not duplicate rows."""
    repo.reset_squares("b1", ALL_KEYS)
    assert len(repo.list_squares("b1")) == 100


def test_squares_are_scoped_to_their_board(repo: SQLBoardRepository) -> None:
    repo.upsert_board(BoardModel(board_id="b2"))
    repo.reset_squares("b2", ALL_KEYS[:5])
    assert len(repo.list_squares("b2")) == 5
    assert len(repo.list_squares("b1")) == 100


def test_get_square(repo: SQLBoardRepository) -> None:
    square = repo.get_square("b1", "042")
    assert square is not None
    assert square.number == 42
    assert square.version != ""
    assert repo.get_square("b1", "101") is None


def test_reset_changes_version(repo: SQLBoardRepository) -> None:
    before = repo.get_square("b1", "001")
    repo.reset_squares("b1", ["001"])
    after = repo.get_square("b1", "001")
    assert before is not None and after is not None
    assert before.version != after.version


# --- RESERVATION ----
def test_reserve_squares(repo: SQLBoardRepository) -> None:
    squares = [repo.get_square("b1", key) for key in ["001", "002", "003"]]
    reserved = repo.reserve_squares(_claim("c1", ["001", "002", "003"]), squares)  # type: ignore[arg-type]

    assert [square.key for square in reserved] == ["001", "002", "003"]
    for key in ["001", "002", "003"]:
        stored = repo.get_square("b1", key)
        assert stored is not None
        assert stored.status == SquareStatus.TAKEN
        assert stored.claim_id == "c1"
        assert stored.display_name == "Alice"

    claim = repo.get_claim("b1", "c1")
    assert claim is not None
    assert claim.square_keys == ["001", "002", "003"]
    assert claim.status == ClaimStatus.UNPAID
    assert claim.display_name == "Alice"


def test_reserve_with_stale_version_writes_nothing(repo: SQLBoardRepository) -> None:
    """One stale square fails the whole batch: no claim row, no taken squares."""
    first = repo.get_square("b1", "001")
    stale = repo.get_square("b1", "002")
    assert first is not None and stale is not None

    # Somebody else claims square 2 after we read it.
    fresh = repo.get_square("b1", "002")
    repo.reserve_squares(_claim("winner", ["002"], name="Bob"), [fresh])  # type: ignore[list-item]

    with pytest.raises(ConcurrencyError) as exc_info:
        repo.reserve_squares(_claim("loser", ["001", "002"]), [first, stale])
    assert exc_info.value.lost == ["002"]

    assert repo.get_claim("b1", "loser") is None
    square_1 = repo.get_square("b1", "001")
    square_2 = repo.get_square("b1", "002")
    assert square_1 is not None and square_2 is not None
    assert square_1.status == SquareStatus.OPEN
    assert square_1.claim_id == ""
    assert square_2.claim_id == "winner"
    assert square_2.display_name == "Bob"


def test_reserve_twice_with_same_read_fails(repo: SQLBoardRepository) -> None:
    """The version read before the first reservation is no longer valid afterwards."""
    square = repo.get_square("b1", "050")
    assert square is not None
    repo.reserve_squares(_claim("c1", ["050"]), [square])
    with pytest.raises(ConcurrencyError):
        repo.reserve_squares(_claim("c2", ["050"]), [square])


def test_claim_id_collision(repo: SQLBoardRepository) -> None:
    repo.reserve_squares(_claim("dup", ["010"]), [repo.get_square("b1", "010")])  # type: ignore[list-item]
    with pytest.raises(ClaimIdCollisionError):
        repo.reserve_squares(_claim("dup", ["011"]), [repo.get_square("b1", "011")])  # type: ignore[list-item]

    # Square 11 should not have been touched
    square = repo.get_square("b1", "011")
    assert square is not None
    assert square.status == SquareStatus.OPEN


def test_get_unknown_claim(repo: SQLBoardRepository) -> None:
    assert repo.get_claim("b1", "nope") is None


def test_claim_id_inserted_concurrently(
    repo: SQLBoardRepository, db_session_repo: Session, monkeypatch: pytest.MonkeyPatch
) -> None:
    """
    Another writer inserts the same claim ID between the existence check and our insert.

    The duplicate key error from the store should still come out as a collision.
    """
    repo.reserve_squares(_claim("dup", ["010"]), [repo.get_square("b1", "010")])  # type: ignore[list-item]
    square = repo.get_square("b1", "011")
    assert square is not None

    # Forget what this session knows, and make the existence check miss the row
    db_session_repo.expunge_all()
    monkeypatch.setattr(db_session_repo, "get", lambda *args, **kwargs: None)
    with pytest.raises(ClaimIdCollisionError):
        repo.reserve_squares(_claim("dup", ["011"]), [square])
    monkeypatch.undo()

    after = repo.get_square("b1", "011")
    assert after is not None
    assert after.status == SquareStatus.OPEN


# --- STORE FAILURES ----
def test_store_failure_during_reservation(
    repo: SQLBoardRepository, db_engine: Engine
) -> None:
    """Backend errors become StoreError with the driver's message, and nothing is left half-written."""
    DBClaim.__table__.drop(bind=db_engine)
    squares = [repo.get_square("b1", key) for key in ["001", "002"]]

    with pytest.raises(StoreError) as exc_info:
        repo.reserve_squares(_claim("c1", ["001", "002"]), squares)  # type: ignore[arg-type]
    assert not isinstance(exc_info.value, (ConcurrencyError, ClaimIdCollisionError))
    assert exc_info.value.detail
    assert "claims" in exc_info.value.detail

    assert all(square.status == SquareStatus.OPEN for square in repo.list_squares("b1"))


def test_store_failure_during_read(db_session_repo: Session, db_engine: Engine) -> None:
    repo = SQLBoardRepository(db_session_repo)
    DBSquare.__table__.drop(bind=db_engine)
    with pytest.raises(StoreError) as exc_info:
        _ = repo.list_squares("b1")
    assert exc_info.value.detail
