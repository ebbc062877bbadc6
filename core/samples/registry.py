#!/usr/bin/env python3
"""
Product sample registry.

Samples are numbered per competition event from the ``sample_number``
sequence. Once a sample has been evaluated, excluded or completed it is
part of the record and can no longer be deleted.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from core.exceptions import InvalidStateError, NotFoundError, ValidationError
from database.models import ProductSample, SampleStatus
from database.repositories import SAMPLE_NUMBER
from database.uow import EvaluationUnitOfWork, evaluation_uow
from notification import events

logger = logging.getLogger(__name__)


class ProductSampleRegistry:
    def __init__(self, uow_factory: Callable = evaluation_uow):
        self._uow = uow_factory

    def register(
        self,
        event_id: Any,
        applicant_id: Any,
        category_id: Any,
        name: str,
        description: Optional[str] = None
    ) -> ProductSample:
        """Create a Draft sample carrying the next sequential number of its event."""
        if not name or not name.strip():
            raise ValidationError("Product sample name is required")

        with self._uow() as uow:
            number = uow.sequences.next_value(event_id, SAMPLE_NUMBER)
            sample = ProductSample(
                event_id=event_id,
                applicant_id=applicant_id,
                category_id=category_id,
                sequential_number=number,
                name=name.strip(),
                description=description,
                status=SampleStatus.DRAFT,
            )
            uow.samples.add(sample)
            logger.info(f"Registered sample #{number} ({sample.id}) for event {event_id}")
            return sample

    def submit(self, sample_id: Any) -> ProductSample:
        with self._uow() as uow:
            sample = self._get_for_update(uow, sample_id)
            if sample.status != SampleStatus.DRAFT:
                raise InvalidStateError(
                    "Only draft samples can be submitted",
                    entity_id=sample_id,
                    state=sample.status.value,
                )

            old_status = sample.status
            sample.transition_to(SampleStatus.SUBMITTED)
            sample.submitted_at = datetime.now(timezone.utc)
            uow.flush()

            logger.info(f"Sample {sample.id} submitted")
            uow.emit(events.status_changed(sample, old_status))
            return sample

    def delete(self, sample_id: Any) -> None:
        with self._uow() as uow:
            sample = self._get_for_update(uow, sample_id)
            if sample.is_locked_for_deletion:
                logger.warning(f"Refused deletion of sample {sample_id} in status {sample.status.value}")
                raise InvalidStateError(
                    "Evaluated, excluded or completed samples cannot be deleted",
                    entity_id=sample_id,
                    state=sample.status.value,
                )
            if sample.active_session_id is not None:
                raise InvalidStateError(
                    "Cannot delete a sample with an active evaluation session",
                    entity_id=sample_id,
                    state=sample.status.value,
                )
            uow.samples.delete(sample)
            logger.info(f"Deleted sample {sample_id}")

    def get(self, sample_id: Any) -> Optional[ProductSample]:
        with self._uow() as uow:
            return uow.samples.get_by_id(sample_id)

    def list_for_event(self, event_id: Any) -> List[ProductSample]:
        with self._uow() as uow:
            return uow.samples.list_for_event(event_id)

    @staticmethod
    def _get_for_update(uow: EvaluationUnitOfWork, sample_id: Any) -> ProductSample:
        sample = uow.samples.get_for_update(sample_id)
        if sample is None:
            raise NotFoundError("Product sample not found", entity_id=sample_id)
        return sample
