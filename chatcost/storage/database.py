"""Database models and connection management."""

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PromptRecord(Base):
    """Stored prompt library entry (including the System Prompt)."""

    __tablename__ = "prompts"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False, index=True)  # preserves creation order
    name = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    tokens = Column(Integer, nullable=False, default=0)
    is_template = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<PromptRecord(id={self.id[:8]}, name={self.name!r}, tokens={self.tokens})>"


class Exchange(Base):
    """One send cycle: provider, model, tokens and cost."""

    __tablename__ = "exchanges"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    timestamp = Column(DateTime, nullable=False, default=_utcnow)
    provider = Column(String, nullable=False, index=True)
    model = Column(String, nullable=False, index=True)

    input_tokens = Column(Integer, nullable=False, default=0)
    output_tokens = Column(Integer, nullable=False, default=0)
    input_cost = Column(Float, nullable=False, default=0.0)
    output_cost = Column(Float, nullable=False, default=0.0)
    total_cost = Column(Float, nullable=False, default=0.0)

    # Set when the send failed and a synthetic error entry was shown
    error_message = Column(Text, nullable=True)

    @property
    def success(self) -> bool:
        return self.error_message is None

    def __repr__(self) -> str:
        return (
            f"<Exchange(id={self.id[:8]}..., model={self.model}, "
            f"tokens={self.input_tokens}+{self.output_tokens}, "
            f"total_cost=${self.total_cost:.6f})>"
        )


class DatabaseManager:
    """Manager for database connections and operations."""

    def __init__(self, database_path: str):
        """Initialize the database manager.

        Args:
            database_path: Path to SQLite database file
        """
        self.database_path = Path(database_path)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{self.database_path}",
            echo=False,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False}
        )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,
        )

    def init_db(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        """Drop all database tables (use with caution!)."""
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager.

        Yields:
            SQLAlchemy Session object

        Example:
            with db_manager.get_session() as session:
                session.add(Exchange(...))
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
