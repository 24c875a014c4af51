import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Table classes must be imported before create_all() runs
from .. import models  # noqa: F401

logger = logging.getLogger(__name__)


# Helper function to ensure URL format is correct
def normalize_db_url(url: str) -> str:
    if not url:
        return "sqlite:///./tasks.db"
    # Hosted Postgres providers still hand out the legacy scheme
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class Database:
    """
    Process-wide database handle.

    Created once in the application lifespan, stored on ``app.state.db`` and
    disposed at shutdown. Request handlers never touch the engine directly;
    they receive a ``Session`` from ``get_session``.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = normalize_db_url(url)

        # --- CONFIGURATION FOR SQLITE ---
        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            # An in-memory database only exists for as long as its connection
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
            self.engine = create_engine(self.url, echo=echo, **kwargs)

        # --- CONFIGURATION FOR POSTGRESQL ---
        else:
            self.engine = create_engine(
                self.url,
                echo=echo,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
            )

    def create_all(self) -> None:
        logger.info("Creating database tables on %s", self.engine.url.render_as_string(hide_password=True))
        SQLModel.metadata.create_all(self.engine)

    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session

    def dispose(self) -> None:
        self.engine.dispose()


# Dependency: one session per request, drawn from the app's database handle
def get_session(request: Request) -> Iterator[Session]:
    db: Database = request.app.state.db
    yield from db.session()
