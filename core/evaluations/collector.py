#!/usr/bin/env python3
"""
Expert evaluation collection.

An evaluation is one member's score and exclusion vote within an Active
session. It stays editable until submitted; submission is final and
triggers the exclusion vote tally.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, List, Optional

from sqlalchemy.exc import IntegrityError

from core.evaluations.exclusion import ExclusionVotingRule
from core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from core.scorer.aggregation import to_decimal
from database.models import ExpertEvaluation, MemberRole
from database.uow import EvaluationUnitOfWork, evaluation_uow
from notification import events

logger = logging.getLogger(__name__)

# Scores are stored as NUMERIC(9, 4)
SCORE_DECIMALS = 4
MAX_SCORE = Decimal(10) ** (9 - SCORE_DECIMALS)


def _validate_score(score: Any) -> Optional[Decimal]:
    if score is None:
        return None
    if isinstance(score, bool):
        raise ValidationError(f"Score must be a number, got {score!r}")
    try:
        value = to_decimal(score)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Score must be a number, got {score!r}")
    if not value.is_finite():
        raise ValidationError(f"Score must be finite, got {score!r}")
    if value < 0:
        raise ValidationError(f"Score must not be negative, got {score!r}")
    if value >= MAX_SCORE:
        raise ValidationError(f"Score must be below {MAX_SCORE}, got {score!r}")
    if value.normalize().as_tuple().exponent < -SCORE_DECIMALS:
        raise ValidationError(f"Score allows at most {SCORE_DECIMALS} decimals, got {score!r}")
    return value


class ExpertEvaluationCollector:
    def __init__(self, exclusion_rule: Optional[ExclusionVotingRule] = None, uow_factory: Callable = evaluation_uow):
        self.exclusion_rule = exclusion_rule or ExclusionVotingRule(uow_factory=uow_factory)
        self._uow = uow_factory

    def create(
        self,
        session_id: Any,
        sample_id: Any,
        commission_member_id: Any,
        score: Any = None,
        exclude_vote: bool = False,
        exclusion_note: Optional[str] = None
    ) -> ExpertEvaluation:
        """
        Record a member's evaluation in an Active session.

        Trainee evaluations are stored but never count toward the result.

        Raises:
            NotFoundError: unknown session
            InvalidStateError: session is not Active
            ValidationError: sample/member mismatch, excluded member, bad score or missing note
            ConflictError: the member already evaluated in this session
        """
        value = _validate_score(score)

        with self._uow() as uow:
            session = uow.sessions.get_by_id(session_id)
            if session is None:
                raise NotFoundError("Evaluation session not found", entity_id=session_id)
            if not session.is_active:
                raise InvalidStateError(
                    "Can only create evaluations for active sessions",
                    entity_id=session_id,
                    state=session.status.value,
                )
            if session.product_sample_id != sample_id:
                raise ValidationError("Product sample does not match the evaluation session", entity_id=sample_id)

            member = uow.commissions.get_member(commission_member_id)
            if member is None or member.commission_id != session.commission_id:
                raise ValidationError(
                    "Commission member does not belong to the session's commission",
                    entity_id=commission_member_id,
                )
            if not member.can_submit_evaluation():
                raise ValidationError("Excluded commission members cannot evaluate", entity_id=commission_member_id)

            if uow.evaluations.find(session.id, member.id) is not None:
                raise ConflictError(
                    "Evaluation already exists for this member in this session",
                    entity_id=commission_member_id,
                )

            evaluation = ExpertEvaluation(
                evaluation_session_id=session.id,
                product_sample_id=sample_id,
                commission_member_id=member.id,
                final_score=value,
                is_excluded_from_calculation=member.role == MemberRole.TRAINEE,
            )
            evaluation.set_exclusion_vote(exclude_vote, exclusion_note)
            try:
                uow.evaluations.add(evaluation)
            except IntegrityError as e:
                raise ConflictError(
                    "Evaluation already exists for this member in this session",
                    entity_id=commission_member_id,
                ) from e

            logger.info(f"Evaluation {evaluation.id} created by member {member.id} in session {session.id}")
            return evaluation

    def update(
        self,
        evaluation_id: Any,
        score: Any = None,
        exclude_vote: bool = False,
        exclusion_note: Optional[str] = None
    ) -> ExpertEvaluation:
        """Replace score, vote and note of an unsubmitted evaluation."""
        value = _validate_score(score)

        with self._uow() as uow:
            evaluation = self._get_or_raise(uow, evaluation_id)
            session = uow.sessions.get_by_id(evaluation.evaluation_session_id)
            if session is None or not session.is_active:
                raise InvalidStateError(
                    "Can only update evaluations for active sessions",
                    entity_id=evaluation_id,
                    state=session.status.value if session else None,
                )
            if evaluation.is_submitted:
                raise InvalidStateError("Cannot update a submitted evaluation", entity_id=evaluation_id, state="Submitted")

            evaluation.set_exclusion_vote(exclude_vote, exclusion_note)
            evaluation.final_score = value
            uow.flush()
            return evaluation

    def submit(self, evaluation_id: Any, submitted_by: Any = None) -> ExpertEvaluation:
        """
        Finalize an evaluation and re-run the exclusion tally.

        The session row is locked first so concurrent submissions to the same
        session tally one after another.
        """
        with self._uow() as uow:
            evaluation = self._get_or_raise(uow, evaluation_id)
            session = uow.sessions.get_for_update(evaluation.evaluation_session_id)
            uow.session.refresh(evaluation)

            if evaluation.is_submitted:
                raise InvalidStateError("Evaluation has already been submitted", entity_id=evaluation_id, state="Submitted")
            if session is None or not session.is_active:
                raise InvalidStateError(
                    "Can only submit evaluations for active sessions",
                    entity_id=evaluation_id,
                    state=session.status.value if session else None,
                )

            evaluation.submit()
            uow.flush()
            logger.info(f"Evaluation {evaluation.id} submitted (by {submitted_by or evaluation.commission_member_id})")

            sample = uow.samples.get_by_id(evaluation.product_sample_id)
            uow.emit(events.evaluation_submitted(evaluation, sample.event_id))
            self.exclusion_rule.apply_within(uow, evaluation.product_sample_id)
            return evaluation

    def get(self, evaluation_id: Any) -> Optional[ExpertEvaluation]:
        with self._uow() as uow:
            return uow.evaluations.get_by_id(evaluation_id)

    def list_for_session(self, session_id: Any) -> List[ExpertEvaluation]:
        with self._uow() as uow:
            return uow.evaluations.list_for_session(session_id)

    def list_for_sample(self, sample_id: Any) -> List[ExpertEvaluation]:
        with self._uow() as uow:
            return uow.evaluations.list_for_sample(sample_id)

    @staticmethod
    def _get_or_raise(uow: EvaluationUnitOfWork, evaluation_id: Any) -> ExpertEvaluation:
        evaluation = uow.evaluations.get_by_id(evaluation_id)
        if evaluation is None:
            raise NotFoundError("Expert evaluation not found", entity_id=evaluation_id)
        return evaluation
