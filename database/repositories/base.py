from typing import Any, Optional, Type, TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")


class BaseRepository:
    """Query helpers over a Session owned by the unit of work; repositories never commit."""

    def __init__(self, db: Session):
        self.db = db

    def _locked(self, model: Type[T], entity_id: Any) -> Optional[T]:
        """Load a row under SELECT ... FOR UPDATE, discarding any stale identity-map copy."""
        return self.db.get(model, entity_id, with_for_update=True, populate_existing=True)

    def _save(self, entity: T) -> T:
        self.db.add(entity)
        self.db.flush()
        return entity
