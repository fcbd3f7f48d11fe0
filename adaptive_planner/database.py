"""
SQLAlchemy storage for persisted planner state.

The planner keeps two independent text records (the training plan and the
onboarding snapshot). Both live in one key/value table.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///adaptive_planner.db"


class StoredBlob(Base):
    """
    One persisted text record.

    Attributes:
        key: Record name, e.g. 'training_plan'
        value: Serialized JSON document
        updated_at: Last write timestamp
    """

    __tablename__ = "stored_blobs"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<StoredBlob(key='{self.key}', size={len(self.value or '')})>"


# Database connection and session management

def get_engine(database_url: str = DEFAULT_DATABASE_URL):
    """
    Create the engine for the planner store.

    Args:
        database_url: SQLAlchemy URL; `sqlite://` gives a process-local
            in-memory store

    Returns:
        SQLAlchemy Engine instance
    """
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # an in-memory database exists per connection, so share one
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=False)


def get_session_factory(engine):
    """Session factory for short-lived, explicitly committed sessions."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_database(database_url: str = DEFAULT_DATABASE_URL):
    """
    Create the `stored_blobs` table if needed.

    Returns:
        Session factory bound to the database
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    return get_session_factory(engine)
