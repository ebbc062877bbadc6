#!/usr/bin/env python3
"""
Auto-exclusion by majority vote.

Runs after every submission. Only submitted evaluations of the sample's
Active session that count toward the result (Trainees excluded) take part.
A strict majority of exclusion votes excludes a Submitted sample; the
move is one-way.
"""

import logging
from typing import Any, Callable

from core.exceptions import NotFoundError
from database.models import SampleStatus
from database.uow import EvaluationUnitOfWork, evaluation_uow
from notification import events

logger = logging.getLogger(__name__)

REASON_SEPARATOR = "; "


class ExclusionVotingRule:
    def __init__(self, uow_factory: Callable = evaluation_uow):
        self._uow = uow_factory

    def apply(self, sample_id: Any) -> bool:
        with self._uow() as uow:
            return self.apply_within(uow, sample_id)

    def apply_within(self, uow: EvaluationUnitOfWork, sample_id: Any) -> bool:
        """Exclude the sample if a strict majority voted so. Returns whether it was excluded."""
        sample = uow.samples.get_by_id(sample_id)
        if sample is None:
            raise NotFoundError("Product sample not found", entity_id=sample_id)

        session = uow.sessions.get_active_for_sample(sample) or uow.sessions.find_active_for_sample(sample.id)
        if session is None:
            return False

        votes = uow.evaluations.submitted_votes_for_session(session.id)
        if not votes:
            return False

        excluding = [v for v in votes if v.exclude_vote]
        if not len(excluding) > len(votes) / 2:
            return False
        if sample.status != SampleStatus.SUBMITTED:
            logger.debug(f"Exclusion majority for sample {sample.id} ignored in status {sample.status.value}")
            return False

        reason = REASON_SEPARATOR.join(
            v.exclusion_note for v in excluding if v.exclusion_note and v.exclusion_note.strip()
        )
        old_status = sample.status
        sample.exclude(reason)
        uow.flush()

        logger.info(f"Sample {sample.id} excluded by {len(excluding)}/{len(votes)} votes")
        uow.emit(events.status_changed(sample, old_status))
        return True
