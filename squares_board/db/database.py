"""Generate database session"""

from functools import lru_cache
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from squares_board.core.config import Settings, get_settings
from squares_board.db.schema import Base


def build_engine(settings: Settings) -> Engine:
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        # Requests are served from a thread pool
        connect_args["check_same_thread"] = False
    engine = create_engine(
        settings.database_url, echo=settings.sql_echo, connect_args=connect_args
    )
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return engine


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=build_engine(get_settings()))


def get_db() -> Generator[Session, None, None]:
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
