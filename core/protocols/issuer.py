#!/usr/bin/env python3
"""
Protocol issuance.

A protocol is the numbered certificate of an evaluated sample. Numbers
come from the per-event ``protocol_number`` sequence, so concurrent
issuers never share one. Issued protocols are append-only.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from core.exceptions import InvalidStateError, NotFoundError
from core.scorer.service import ScoringEngine
from database.models import Protocol, ProtocolStatus, SampleStatus
from database.repositories import PROTOCOL_NUMBER
from database.uow import evaluation_uow
from notification import events

logger = logging.getLogger(__name__)


class ProtocolIssuer:
    def __init__(self, scoring_engine: Optional[ScoringEngine] = None, uow_factory: Callable = evaluation_uow):
        self.scoring_engine = scoring_engine or ScoringEngine(uow_factory=uow_factory)
        self._uow = uow_factory

    def generate(self, sample_id: Any, issuer_user_id: Any) -> Protocol:
        """
        Issue version 1 of the protocol of an evaluated sample.

        The score is recalculated in the same transaction and captured on the
        protocol.

        Raises:
            NotFoundError: unknown sample
            InvalidStateError: sample not Evaluated or without a score
        """
        with self._uow() as uow:
            sample = uow.samples.get_by_id(sample_id)
            if sample is None:
                raise NotFoundError("Product sample not found", entity_id=sample_id)
            if sample.status != SampleStatus.EVALUATED:
                raise InvalidStateError(
                    "Protocol can only be generated for evaluated product samples",
                    entity_id=sample_id,
                    state=sample.status.value,
                )
            if sample.final_score is None:
                raise InvalidStateError("Product sample must have a calculated score", entity_id=sample_id)

            self.scoring_engine.calculate_within(uow, sample.id)
            uow.session.refresh(sample)
            if sample.final_score is None:
                raise InvalidStateError("Failed to calculate score for product sample", entity_id=sample_id)

            number = uow.sequences.next_value(sample.event_id, PROTOCOL_NUMBER)
            now = datetime.now(timezone.utc)
            protocol = Protocol(
                event_id=sample.event_id,
                product_sample_id=sample.id,
                applicant_id=sample.applicant_id,
                protocol_number=number,
                version=1,
                final_score=sample.final_score,
                status=ProtocolStatus.GENERATED,
                generated_at=now,
                version_created_at=now,
                version_created_by=issuer_user_id,
            )
            uow.protocols.add(protocol)

            logger.info(f"Protocol #{number} generated for sample {sample.id} with score {sample.final_score}")
            uow.emit(events.protocol_generated(protocol))
            return protocol

    def get(self, protocol_id: Any) -> Optional[Protocol]:
        with self._uow() as uow:
            return uow.protocols.get_by_id(protocol_id)

    def list_for_event(self, event_id: Any) -> List[Protocol]:
        with self._uow() as uow:
            return uow.protocols.list_for_event(event_id)

    def list_for_sample(self, sample_id: Any) -> List[Protocol]:
        """All versions of the sample's protocols, newest first."""
        with self._uow() as uow:
            return uow.protocols.list_for_sample(sample_id)

    def latest_for_sample(self, sample_id: Any) -> Optional[Protocol]:
        with self._uow() as uow:
            return uow.protocols.latest_for_sample(sample_id)
