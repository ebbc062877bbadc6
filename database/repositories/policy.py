import logging
from typing import Optional, Any
from sqlalchemy import select

from database.models import ScoringPolicy
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class PolicyRepository(BaseRepository):
    def get_for_event(self, event_id: Any) -> Optional[ScoringPolicy]:
        stmt = select(ScoringPolicy).where(ScoringPolicy.event_id == event_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def add(self, policy: ScoringPolicy) -> ScoringPolicy:
        return self._save(policy)
