import logging
from typing import List, Optional, Any
from sqlalchemy import select

from database.models import EvaluationSession, ProductSample, SessionStatus
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository):
    def get_by_id(self, session_id: Any) -> Optional[EvaluationSession]:
        return self.db.get(EvaluationSession, session_id)

    def get_for_update(self, session_id: Any) -> Optional[EvaluationSession]:
        """Load the session holding a row lock; serializes submissions to one session."""
        return self._locked(EvaluationSession, session_id)

    def get_active_for_sample(self, sample: ProductSample) -> Optional[EvaluationSession]:
        """Resolve the sample's Active session through its back-reference."""
        if sample.active_session_id is None:
            return None
        session = self.db.get(EvaluationSession, sample.active_session_id)
        if session is None or session.status != SessionStatus.ACTIVE:
            logger.warning(f"Sample {sample.id} points at non-active session {sample.active_session_id}")
            return None
        return session

    def find_active_for_sample(self, sample_id: Any) -> Optional[EvaluationSession]:
        """Query for an Active session directly, independent of the back-reference."""
        stmt = select(EvaluationSession).where(
            EvaluationSession.product_sample_id == sample_id,
            EvaluationSession.status == SessionStatus.ACTIVE
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_sample(self, sample_id: Any) -> List[EvaluationSession]:
        stmt = select(EvaluationSession).where(
            EvaluationSession.product_sample_id == sample_id
        ).order_by(EvaluationSession.activated_at)
        return list(self.db.execute(stmt).scalars().all())

    def latest_completed_for_sample(self, sample_id: Any) -> Optional[EvaluationSession]:
        # Identical completion timestamps are left to the database's ordering.
        stmt = select(EvaluationSession).where(
            EvaluationSession.product_sample_id == sample_id,
            EvaluationSession.status == SessionStatus.COMPLETED
        ).order_by(EvaluationSession.completed_at.desc()).limit(1)
        return self.db.execute(stmt).scalars().first()

    def add(self, session: EvaluationSession) -> EvaluationSession:
        return self._save(session)
