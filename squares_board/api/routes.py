"""
API router for the squares board.

Routes only translate HTTP into service calls; every error the service raises is mapped to a status code
in one place (`register_exception_handlers`).
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from squares_board.api.models import (
    BoardResponse,
    ClaimRequest,
    ClaimResponse,
    ErrorResponse,
    GetBoardRequest,
    ProvisionRequest,
    ProvisionResponse,
)
from squares_board.core.exceptions import SquaresBoardError
from squares_board.db.database import get_db
from squares_board.db.sql_repository import SQLBoardRepository
from squares_board.services.board_service import BoardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["board"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_service(db: Session = Depends(get_db)) -> BoardService:
    """One service (and repository) per request, nothing shared in memory between requests."""
    return BoardService(SQLBoardRepository(db))


@router.post("/board", response_model=ProvisionResponse)
def provision_board(
    request: ProvisionRequest, service: BoardService = Depends(get_service)
) -> ProvisionResponse:
    return service.provision(request)


@router.get(
    "/board/{board_id}", response_model=BoardResponse, responses=ERROR_RESPONSES
)
def get_board(
    board_id: str, service: BoardService = Depends(get_service)
) -> BoardResponse:
    return service.get_board(GetBoardRequest(board_id=board_id))


@router.post("/claim", response_model=ClaimResponse, responses=ERROR_RESPONSES)
def claim_squares(
    request: ClaimRequest, service: BoardService = Depends(get_service)
) -> ClaimResponse:
    return service.claim(request)


@router.get("/seed", response_model=ProvisionResponse)
@router.get("/seed/{board_id}", response_model=ProvisionResponse)
def seed_board(
    board_id: str | None = None, service: BoardService = Depends(get_service)
) -> ProvisionResponse:
    return service.seed_demo_board(board_id)


def _error_body(message: str, **extra: Any) -> dict[str, Any]:
    return ErrorResponse(error=message, **extra).model_dump(
        by_alias=True, exclude_none=True
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the API as `{"ok": false, "error": ..., ...}`."""

    @app.exception_handler(SquaresBoardError)
    async def handle_board_error(request: Request, exc: SquaresBoardError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc), **exc.extra()),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(status_code=400, content=_error_body(messages))
