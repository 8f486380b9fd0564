"""
Database handle: engine, session factory and declarative Base.

The handle is built explicitly and attached to the application state at
startup; routes receive sessions through the get_db dependency.
"""
import time
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import Settings
from .logging_config import db_logger

# Base class for all models
Base = declarative_base()


class Database:
    """Owns the engine and session factory for one storage connection string."""

    def __init__(
        self,
        url: str,
        retries: int = 5,
        retry_delay: float = 5.0,
        **engine_kwargs,
    ):
        if retries < 1:
            raise ValueError("retries must be at least 1")
        self.url = url
        self.retries = retries
        self.retry_delay = retry_delay

        # For SQLite + multithreaded FastAPI, set check_same_thread=False
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.engine = create_engine(
            url,
            echo=False,
            future=True,
            connect_args=connect_args,
            **engine_kwargs,
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            future=True,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            retries=settings.db_connect_retries,
            retry_delay=settings.db_connect_retry_delay,
        )

    def connect(self) -> None:
        """
        Verify the storage is reachable, retrying a fixed number of times
        with a fixed delay. Exits the process when every attempt fails.
        """
        last_error: Optional[Exception] = None
        for attempt in range(1, self.retries + 1):
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                db_logger.info("Connected to database", attempt=attempt)
                return
            except SQLAlchemyError as e:
                last_error = e
                db_logger.error(
                    f"Failed to connect to database (attempt {attempt}/{self.retries})",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                if attempt < self.retries:
                    db_logger.warning("Retrying connection...", delay_seconds=self.retry_delay)
                    time.sleep(self.retry_delay)

        db_logger.critical("Max retries reached. Exiting.", error_message=str(last_error))
        raise SystemExit(1)

    def create_all(self) -> None:
        # In production, use migrations instead
        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
        db_logger.info("Database connections closed")


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for FastAPI routes: one session per request."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
