import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text, Boolean, Numeric, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship

from core.exceptions import ValidationError, InvalidStateError
from .base import Base


class ExpertEvaluation(Base):
    """
    One commission member's score and exclusion vote within a session.

    Editable until ``submitted_at`` is set, immutable afterwards.
    Trainee evaluations are recorded with ``is_excluded_from_calculation``
    so they never count toward the average or the exclusion tally.
    """
    __tablename__ = 'expert_evaluation'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    evaluation_session_id = Column(Uuid, ForeignKey('evaluation_session.id', ondelete='CASCADE'), nullable=False)
    product_sample_id = Column(Uuid, ForeignKey('product_sample.id', ondelete='CASCADE'), nullable=False)
    commission_member_id = Column(Uuid, ForeignKey('commission_member.id'), nullable=False)

    final_score = Column(Numeric(9, 4), nullable=True)
    exclude_vote = Column(Boolean, nullable=False, default=False)
    exclusion_note = Column(Text)
    is_excluded_from_calculation = Column(Boolean, nullable=False, default=False)

    submitted_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    modified_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    session = relationship("EvaluationSession", back_populates="evaluations")
    member = relationship("CommissionMember")

    __table_args__ = (
        UniqueConstraint('evaluation_session_id', 'commission_member_id', name='uq_expert_evaluation_session_member'),
        Index('idx_expert_evaluation_sample', 'product_sample_id'),
    )

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None

    def set_exclusion_vote(self, exclude: bool, note: Optional[str]) -> None:
        if exclude and (note is None or not note.strip()):
            raise ValidationError("Exclusion note is required when excluding a sample", entity_id=self.id)

        self.exclude_vote = exclude
        self.exclusion_note = note if exclude else None
        self.modified_at = datetime.now(timezone.utc)

    def submit(self) -> None:
        if self.is_submitted:
            raise InvalidStateError("Evaluation has already been submitted", entity_id=self.id, state="Submitted")

        now = datetime.now(timezone.utc)
        self.submitted_at = now
        self.modified_at = now
