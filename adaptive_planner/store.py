"""
Persisted planner state.

`BlobStore` is the key/value interface the engine is given; the engine
never touches ambient storage. `PlanRepository` serializes the plan and the
onboarding snapshot to JSON text and re-hydrates dates on load. A record
that is missing, truncated or no longer valid reads back as `None`.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from adaptive_planner.database import StoredBlob, init_database
from adaptive_planner.plan_schemas import TrainingPlan
from adaptive_planner.schemas import OnboardingData

logger = logging.getLogger(__name__)

PLAN_KEY = "training_plan"
ONBOARDING_KEY = "onboarding_data"

ModelT = TypeVar("ModelT", bound=BaseModel)


class BlobStore(ABC):
    """A single text record."""

    @abstractmethod
    def load(self) -> Optional[str]:
        """Return the stored text, or None when nothing is stored."""

    @abstractmethod
    def save(self, blob: str) -> None:
        """Replace the stored text."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the record."""


class MemoryBlobStore(BlobStore):
    """Process-local store, used by tests and one-off runs."""

    def __init__(self, blob: Optional[str] = None):
        self.blob = blob

    def load(self) -> Optional[str]:
        return self.blob

    def save(self, blob: str) -> None:
        self.blob = blob

    def clear(self) -> None:
        self.blob = None


class FileBlobStore(BlobStore):
    """One UTF-8 file per record."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, blob: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(blob, encoding="utf-8")
        tmp.replace(self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class SqlBlobStore(BlobStore):
    """A row of the `stored_blobs` table."""

    def __init__(self, session_factory, key: str):
        self.session_factory = session_factory
        self.key = key

    def load(self) -> Optional[str]:
        session = self.session_factory()
        try:
            row = session.get(StoredBlob, self.key)
            return row.value if row is not None else None
        finally:
            session.close()

    def save(self, blob: str) -> None:
        session = self.session_factory()
        try:
            row = session.get(StoredBlob, self.key)
            if row is None:
                session.add(StoredBlob(key=self.key, value=blob, updated_at=datetime.utcnow()))
            else:
                row.value = blob
                row.updated_at = datetime.utcnow()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def clear(self) -> None:
        session = self.session_factory()
        try:
            row = session.get(StoredBlob, self.key)
            if row is not None:
                session.delete(row)
                session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


class PlanRepository:
    """
    Load/save of the two planner records.

    Args:
        plan_store: Store for the TrainingPlan aggregate
        onboarding_store: Store for the OnboardingData snapshot
    """

    def __init__(self, plan_store: BlobStore, onboarding_store: BlobStore):
        self.plan_store = plan_store
        self.onboarding_store = onboarding_store

    @classmethod
    def in_memory(cls) -> "PlanRepository":
        return cls(MemoryBlobStore(), MemoryBlobStore())

    @classmethod
    def from_database_url(cls, database_url: str) -> "PlanRepository":
        """Repository backed by the `stored_blobs` table of a database."""
        session_factory = init_database(database_url)
        return cls(
            SqlBlobStore(session_factory, PLAN_KEY),
            SqlBlobStore(session_factory, ONBOARDING_KEY),
        )

    def load_plan(self) -> Optional[TrainingPlan]:
        return _load_model(self.plan_store, TrainingPlan, PLAN_KEY)

    def save_plan(self, plan: TrainingPlan) -> None:
        self.plan_store.save(plan.model_dump_json())

    def load_onboarding(self) -> Optional[OnboardingData]:
        return _load_model(self.onboarding_store, OnboardingData, ONBOARDING_KEY)

    def save_onboarding(self, onboarding: OnboardingData) -> None:
        self.onboarding_store.save(onboarding.model_dump_json())

    def clear(self) -> None:
        self.plan_store.clear()
        self.onboarding_store.clear()


def _load_model(store: BlobStore, model: Type[ModelT], label: str) -> Optional[ModelT]:
    try:
        blob = store.load()
    except UnicodeDecodeError as exc:
        logger.warning(f"Ignoring corrupted '{label}' record: not valid UTF-8 ({exc.reason})")
        return None
    if blob is None or not blob.strip():
        return None
    try:
        return model.model_validate_json(blob)
    except ValidationError as exc:
        logger.warning(f"Ignoring corrupted '{label}' record: {exc.error_count()} validation error(s)")
        return None
