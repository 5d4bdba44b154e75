"""FastAPI application: `uvicorn squares_board.main:app`"""

from fastapi import FastAPI

from squares_board.api.routes import register_exception_handlers, router
from squares_board.core.config import get_settings
from squares_board.core.logger import setup_logging


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Squares Board API",
        description="Fundraiser board of 100 claimable squares",
        version="0.1.0",
    )
    register_exception_handlers(app)
    app.include_router(router)

    @app.get("/health", include_in_schema=False)
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
