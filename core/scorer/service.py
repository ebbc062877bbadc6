#!/usr/bin/env python3
"""
Scoring Engine - final score of a product sample.

Reads the evaluations of the sample's most recently completed session,
drops Trainee and unscored entries, applies the event's trimming policy and
rounding, and writes the result onto the sample (Submitted -> Evaluated).

Recalculating is idempotent in value; only ``evaluated_at`` is re-stamped.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from core.exceptions import NotFoundError
from core.scorer import aggregation
from core.scorer.models import ScoreResult
from core.scorer.policy import ScoringPolicyStore
from database.models import SampleStatus
from database.uow import EvaluationUnitOfWork, evaluation_uow
from notification import events

logger = logging.getLogger(__name__)


class ScoringEngine:
    def __init__(self, policy_store: Optional[ScoringPolicyStore] = None, uow_factory: Callable = evaluation_uow):
        self.policy_store = policy_store or ScoringPolicyStore(uow_factory=uow_factory)
        self._uow = uow_factory

    def calculate(self, sample_id: Any) -> ScoreResult:
        """
        Calculate and persist the final score of one sample.

        Args:
            sample_id: Product sample to score

        Returns:
            ScoreResult; ``score`` is None when nothing could be scored

        Raises:
            NotFoundError: unknown sample
            ConfigurationError: policy trims away every evaluation
        """
        with self._uow() as uow:
            return self.calculate_within(uow, sample_id)

    def calculate_event(self, event_id: Any) -> List[ScoreResult]:
        """Calculate every sample of a competition event in one transaction."""
        with self._uow() as uow:
            results = [self.calculate_within(uow, sample.id) for sample in uow.samples.list_for_event(event_id)]
            scored = sum(1 for r in results if r.has_score)
            logger.info(f"Calculated {scored}/{len(results)} sample scores for event {event_id}")
            return results

    def calculate_within(self, uow: EvaluationUnitOfWork, sample_id: Any) -> ScoreResult:
        sample = uow.samples.get_by_id(sample_id)
        if sample is None:
            raise NotFoundError("Product sample not found", entity_id=sample_id)

        policy = self.policy_store.get_or_create_within(uow, sample.event_id)

        session = uow.sessions.latest_completed_for_sample(sample.id)
        if session is None:
            logger.debug(f"Sample {sample.id} has no completed session; nothing to score")
            return ScoreResult(product_sample_id=sample.id)

        values = uow.evaluations.counted_scores_for_session(session.id)
        if not values:
            logger.debug(f"Session {session.id} has no countable evaluations")
            return ScoreResult(product_sample_id=sample.id)

        score = aggregation.aggregate(
            values,
            policy.trim_high_low_from_count,
            policy.trim_count_low,
            policy.trim_count_high,
            policy.rounding_decimals,
        )
        trimmed = aggregation.applies_trimming(
            len(values), policy.trim_high_low_from_count, policy.trim_count_low, policy.trim_count_high
        )

        now = datetime.now(timezone.utc)
        old_status = sample.status
        sample.final_score = score
        sample.evaluated_at = now
        if sample.status == SampleStatus.SUBMITTED:
            sample.transition_to(SampleStatus.EVALUATED)
        uow.flush()

        logger.info(f"Sample {sample.id} scored {score} from {len(values)} evaluations (session {session.id})")
        uow.emit(events.score_calculated(sample, len(values), now))
        if sample.status != old_status:
            uow.emit(events.status_changed(sample, old_status))

        return ScoreResult(
            product_sample_id=sample.id,
            score=score,
            evaluation_count=len(values),
            calculated_at=now,
            trimmed=trimmed,
        )
