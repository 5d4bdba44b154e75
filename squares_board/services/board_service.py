"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
import secrets
import string
from typing import Callable

from squares_board.api.models import (
    BoardResponse,
    BoardSummary,
    BoardView,
    ClaimRequest,
    ClaimResponse,
    GetBoardRequest,
    ProvisionRequest,
    ProvisionResponse,
    SquareView,
)
from squares_board.core.exceptions import (
    ConcurrencyError,
    ConflictError,
    InvalidRequestError,
    InvalidStateError,
    NotFoundError,
)
from squares_board.core.models import BoardModel, ClaimModel, SquareModel, to_bool
from squares_board.core.shared_types import (
    DEFAULT_PAYMENT_LABEL,
    DEFAULT_PRICE_PER_SQUARE,
    DEMO_BOARD_ID,
    BoardStatus,
    ClaimStatus,
    SquareStatus,
)
from squares_board.db.repository import BoardRepository
from squares_board.grid.square import GridSquare, all_squares, normalize_square_keys

logger = logging.getLogger(__name__)

CLAIM_ID_LENGTH = 10
CLAIM_ID_ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_claim_id() -> str:
    """Short, unguessable claim ID (~60 bits of entropy)."""
    return "".join(secrets.choice(CLAIM_ID_ALPHABET) for _ in range(CLAIM_ID_LENGTH))


def generate_board_id() -> str:
    return f"board-{secrets.token_hex(4)}"


class BoardService:
    """Orchestration of layers for a squares board."""

    def __init__(
        self,
        repository: BoardRepository,
        claim_id_factory: Callable[[], str] = generate_claim_id,
    ) -> None:
        self.repo = repository
        self.new_claim_id = claim_id_factory

    # -- API routes logic ---
    def get_board(self, request: GetBoardRequest) -> BoardResponse:
        """Board settings plus the public state of all its squares, in row-major order."""
        if not request.board_id:
            raise InvalidRequestError("boardId required")
        board = self._fetch_board(request.board_id)

        squares = sorted(self.repo.list_squares(board.board_id), key=lambda s: s.number)
        taken = sum(1 for square in squares if not square.is_open)
        return BoardResponse(
            board=self._board_view(board),
            squares=[self._square_view(square, board) for square in squares],
            summary=BoardSummary(
                open=len(squares) - taken,
                taken=taken,
                amount_pledged=taken * board.price_per_square,
            ),
        )

    def claim(self, request: ClaimRequest) -> ClaimResponse:
        """
        Reserve a set of squares for one participant.

        Flow: validate input -> check board policy -> read the squares (capturing their versions)
        -> store the claim and take the squares in one conditional batch.
        Nothing is written unless every requested square is reserved.
        """
        # Validate input before touching the store
        if not request.board_id:
            raise InvalidRequestError("boardId required")
        if not request.display_name:
            raise InvalidRequestError("displayName required")
        square_keys = normalize_square_keys(request.squares)
        if not square_keys:
            raise InvalidRequestError("squares[] required")

        # Board policy
        board = self._fetch_board(request.board_id)
        if not board.accepts_claims:
            raise InvalidStateError("Board not active")
        limit = board.max_squares_per_order
        if limit > 0 and len(square_keys) > limit:
            raise InvalidRequestError(f"Max squares per order is {limit}")

        # Availability: every square must exist and still be open
        fetched = [self._fetch_square(board.board_id, key) for key in square_keys]
        not_open = [square.key for square in fetched if not square.is_open]
        if not_open:
            logger.warning(
                "Claim on board %s rejected, squares already taken: %s",
                board.board_id,
                not_open,
            )
            raise ConflictError("Some squares already taken", taken=not_open)

        claim = ClaimModel(
            board_id=board.board_id,
            claim_id=self.new_claim_id(),
            display_name=request.display_name,
            square_keys=square_keys,
            status=ClaimStatus.UNPAID,
        )

        # Reserve: conditioned on the versions read above
        try:
            reserved = self.repo.reserve_squares(claim, fetched)
        except ConcurrencyError as exc:
            logger.warning(
                "Claim race lost on board %s for squares %s", board.board_id, exc.lost
            )
            raise ConflictError("Square claim race condition, try again", taken=exc.lost)

        logger.info(
            "Claim %s on board %s reserved squares %s",
            claim.claim_id,
            board.board_id,
            [square.key for square in reserved],
        )
        return ClaimResponse(
            board_id=board.board_id,
            claim_id=claim.claim_id,
            display_name=claim.display_name,
            squares=square_keys,
            status=claim.status,
            total=len(square_keys) * board.price_per_square,
        )

    def provision(self, request: ProvisionRequest) -> ProvisionResponse:
        """
        Create-or-replace a board and (re)seed its 100 squares as open.

        ---
        NOTE: re-provisioning an existing board wipes every claim on its squares. That is the caller's call to make.
        """
        board_id = request.board_id or generate_board_id()
        board = BoardModel(
            board_id=board_id,
            title=request.title or "",
            subtitle=request.subtitle or "",
            price_per_square=(
                request.price_per_square
                if request.price_per_square is not None
                else DEFAULT_PRICE_PER_SQUARE
            ),
            payment_label=request.payment_label or DEFAULT_PAYMENT_LABEL,
            payment_handle=request.payment_handle or "",
            max_squares_per_order=request.max_squares_per_order or 0,
            status=BoardStatus.ACTIVE,
            show_names_publicly=(
                to_bool(request.show_names_publicly)
                if request.show_names_publicly is not None
                else True
            ),
            theme_logo_data_url=request.theme_logo_data_url or "",
            theme_accent=request.theme_accent or "",
            theme_bg=request.theme_bg or "",
        )
        self.repo.upsert_board(board)
        seeded = self.repo.reset_squares(board_id, [square.key for square in all_squares()])

        logger.info("Provisioned board %s with %d open squares", board_id, len(seeded))
        return ProvisionResponse(
            board_id=board_id,
            url_path=f"/boardId-{board_id}",
            seeded_squares=len(seeded),
        )

    def seed_demo_board(self, board_id: str | None = None) -> ProvisionResponse:
        """Re-provision the fixed demo board (development / testing convenience)."""
        return self.provision(
            ProvisionRequest(
                board_id=(board_id or "").strip() or DEMO_BOARD_ID,
                title="Test Board",
                subtitle="Doms",
                price_per_square=20,
                max_squares_per_order=10,
                show_names_publicly=True,
            )
        )

    # -- Internal helpers --
    def _fetch_board(self, board_id: str) -> BoardModel:
        """Attempt to find the board in the repository and raise error if it fails."""
        board = self.repo.get_board(board_id)
        if board is None:
            raise NotFoundError("Board not found")
        return board

    def _fetch_square(self, board_id: str, key: str) -> SquareModel:
        if not GridSquare.from_key(key).is_within_bounds():
            raise NotFoundError(f"Square not found: {key}")
        square = self.repo.get_square(board_id, key)
        if square is None:
            raise NotFoundError(f"Square not found: {key}")
        return square

    def _board_view(self, board: BoardModel) -> BoardView:
        return BoardView(
            id=board.board_id,
            title=board.title,
            subtitle=board.subtitle,
            price_per_square=board.price_per_square,
            max_squares_per_order=board.max_squares_per_order,
            payment_label=board.payment_label,
            payment_handle=board.payment_handle,
            show_names_publicly=board.show_names_publicly,
            status=board.status,
            theme_logo_data_url=board.theme_logo_data_url,
            theme_accent=board.theme_accent,
            theme_bg=board.theme_bg,
        )

    def _square_view(self, square: SquareModel, board: BoardModel) -> SquareView:
        """Public projection: claim ID and version never leave the service."""
        position = GridSquare(square.number)
        show_name = square.status == SquareStatus.TAKEN and board.show_names_publicly
        return SquareView(
            number=square.number,
            key=position.key,
            row=position.row,
            col=position.col,
            status=square.status,
            display_name=square.display_name if show_name else "",
        )

