import logging
from typing import List, Optional, Any
from sqlalchemy import select

from database.models import ExpertEvaluation
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class EvaluationRepository(BaseRepository):
    def get_by_id(self, evaluation_id: Any) -> Optional[ExpertEvaluation]:
        return self.db.get(ExpertEvaluation, evaluation_id)

    def find(self, session_id: Any, member_id: Any) -> Optional[ExpertEvaluation]:
        stmt = select(ExpertEvaluation).where(
            ExpertEvaluation.evaluation_session_id == session_id,
            ExpertEvaluation.commission_member_id == member_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_session(self, session_id: Any) -> List[ExpertEvaluation]:
        stmt = select(ExpertEvaluation).where(
            ExpertEvaluation.evaluation_session_id == session_id
        ).order_by(ExpertEvaluation.created_at)
        return list(self.db.execute(stmt).scalars().all())

    def list_for_sample(self, sample_id: Any) -> List[ExpertEvaluation]:
        stmt = select(ExpertEvaluation).where(
            ExpertEvaluation.product_sample_id == sample_id
        ).order_by(ExpertEvaluation.created_at)
        return list(self.db.execute(stmt).scalars().all())

    def submitted_votes_for_session(self, session_id: Any) -> List[ExpertEvaluation]:
        """Submitted evaluations whose holders count toward the result."""
        stmt = select(ExpertEvaluation).where(
            ExpertEvaluation.evaluation_session_id == session_id,
            ExpertEvaluation.submitted_at.is_not(None),
            ExpertEvaluation.is_excluded_from_calculation.is_(False)
        ).order_by(ExpertEvaluation.submitted_at)
        return list(self.db.execute(stmt).scalars().all())

    def counted_scores_for_session(self, session_id: Any) -> List[Any]:
        """Scores of evaluations that count toward the final average."""
        stmt = select(ExpertEvaluation.final_score).where(
            ExpertEvaluation.evaluation_session_id == session_id,
            ExpertEvaluation.is_excluded_from_calculation.is_(False),
            ExpertEvaluation.final_score.is_not(None)
        )
        return list(self.db.execute(stmt).scalars().all())

    def add(self, evaluation: ExpertEvaluation) -> ExpertEvaluation:
        return self._save(evaluation)
