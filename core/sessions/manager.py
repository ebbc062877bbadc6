#!/usr/bin/env python3
"""
Evaluation session activation.

Opening a session is the only mutation exposed here. Completion and
cancellation belong to the external workflow (EvaluationSession.complete /
cancel), surfaced through ``complete`` for the CLI.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from sqlalchemy.exc import IntegrityError

from core.commission.roster import CommissionRoster
from core.exceptions import ConflictError, NotFoundError, ValidationError
from database.models import EvaluationSession, SessionStatus
from database.uow import evaluation_uow
from notification import events

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(self, uow_factory: Callable = evaluation_uow):
        self._uow = uow_factory

    def activate(
        self,
        sample_id: Any,
        commission_id: Any,
        requesting_user_id: Any,
        event_id: Any = None
    ) -> EvaluationSession:
        """
        Open the evaluation session of a product sample.

        Args:
            sample_id: Sample to evaluate
            commission_id: Commission that judges it
            requesting_user_id: User asking to open the session
            event_id: When given, the sample must belong to this event

        Returns:
            The new Active EvaluationSession

        Raises:
            NotFoundError: unknown sample or commission
            ValidationError: sample belongs to another event
            ConflictError: the sample already has an Active session
            AuthorizationError: requester is not a member or holds the wrong role
        """
        with self._uow() as uow:
            sample = uow.samples.get_for_update(sample_id)
            if sample is None:
                raise NotFoundError("Product sample not found", entity_id=sample_id)
            if event_id is not None and sample.event_id != event_id:
                raise ValidationError("Product sample does not belong to this event", entity_id=sample_id)

            if uow.commissions.get_by_id(commission_id) is None:
                raise NotFoundError("Commission not found", entity_id=commission_id)

            active = uow.sessions.get_active_for_sample(sample) or uow.sessions.find_active_for_sample(sample.id)
            if active is not None:
                logger.warning(f"Refused activation of sample {sample_id}: session {active.id} already active")
                raise ConflictError(
                    "An evaluation session is already active for this sample",
                    entity_id=sample_id,
                    state=SessionStatus.ACTIVE.value,
                )

            CommissionRoster.authorize_activation_within(uow, commission_id, requesting_user_id)

            session = EvaluationSession(
                product_sample_id=sample.id,
                commission_id=commission_id,
                activated_by=requesting_user_id,
                activated_at=datetime.now(timezone.utc),
                status=SessionStatus.ACTIVE,
            )
            try:
                uow.sessions.add(session)
                sample.active_session_id = session.id
                uow.flush()
            except IntegrityError as e:
                raise ConflictError(
                    "An evaluation session is already active for this sample",
                    entity_id=sample_id,
                    state=SessionStatus.ACTIVE.value,
                ) from e

            logger.info(f"Session {session.id} activated for sample {sample.id} by {requesting_user_id}")
            uow.emit(events.session_created(session, sample.event_id))
            return session

    def complete(self, session_id: Any) -> EvaluationSession:
        """Close an Active session so it becomes eligible for scoring."""
        with self._uow() as uow:
            session = uow.sessions.get_for_update(session_id)
            if session is None:
                raise NotFoundError("Evaluation session not found", entity_id=session_id)
            session.complete()
            uow.flush()
            logger.info(f"Session {session.id} completed")
            return session

    def get(self, session_id: Any) -> Optional[EvaluationSession]:
        with self._uow() as uow:
            return uow.sessions.get_by_id(session_id)

    def get_active_for_sample(self, sample_id: Any) -> Optional[EvaluationSession]:
        with self._uow() as uow:
            return uow.sessions.find_active_for_sample(sample_id)

    def list_for_sample(self, sample_id: Any) -> List[EvaluationSession]:
        with self._uow() as uow:
            return uow.sessions.list_for_sample(sample_id)
