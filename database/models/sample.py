import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Text, Integer, Numeric, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship

from core.exceptions import ValidationError, InvalidStateError
from .base import Base, enum_column_type
from .enums import SampleStatus

# Allowed forward moves; Excluded and Completed are terminal.
_TRANSITIONS = {
    SampleStatus.DRAFT: {SampleStatus.SUBMITTED},
    SampleStatus.SUBMITTED: {SampleStatus.EVALUATED, SampleStatus.EXCLUDED},
    SampleStatus.EVALUATED: {SampleStatus.COMPLETED},
    SampleStatus.EXCLUDED: set(),
    SampleStatus.COMPLETED: set(),
}


class ProductSample(Base):
    """
    A product sample entered into a competition event.

    Mutated by the scoring engine (final score, Evaluated) and by the
    exclusion vote (Excluded). ``active_session_id`` points at the one
    Active evaluation session, if any.
    """
    __tablename__ = 'product_sample'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, nullable=False)
    applicant_id = Column(Uuid, nullable=False)
    category_id = Column(Uuid, nullable=True)

    sequential_number = Column(Integer, nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text)

    status = Column(enum_column_type(SampleStatus, 'sample_status'), nullable=False, default=SampleStatus.DRAFT)
    final_score = Column(Numeric(9, 4), nullable=True)

    submitted_at = Column(TIMESTAMP(timezone=True))
    evaluated_at = Column(TIMESTAMP(timezone=True))
    excluded_at = Column(TIMESTAMP(timezone=True))
    exclusion_reason = Column(Text)

    active_session_id = Column(
        Uuid,
        ForeignKey('evaluation_session.id', use_alter=True, name='fk_product_sample_active_session', ondelete='SET NULL'),
        nullable=True
    )
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    sessions = relationship(
        "EvaluationSession",
        back_populates="product_sample",
        foreign_keys="EvaluationSession.product_sample_id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint('event_id', 'sequential_number', name='uq_product_sample_event_number'),
        Index('idx_product_sample_event', 'event_id'),
        Index('idx_product_sample_status', 'status'),
    )

    def can_transition_to(self, new_status: SampleStatus) -> bool:
        return new_status in _TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status: SampleStatus) -> None:
        if not self.can_transition_to(new_status):
            raise InvalidStateError(
                f"Product sample cannot move from {self.status.value} to {new_status.value}",
                entity_id=self.id,
                state=self.status.value,
            )
        self.status = new_status

    def exclude(self, reason: str) -> None:
        """Exclude the sample; a reason is mandatory and the move is one-way."""
        if not reason or not reason.strip():
            raise ValidationError("Exclusion reason is required", entity_id=self.id)
        if self.status == SampleStatus.COMPLETED:
            raise InvalidStateError("Cannot exclude a completed sample", entity_id=self.id, state=self.status.value)

        self.transition_to(SampleStatus.EXCLUDED)
        self.exclusion_reason = reason
        self.excluded_at = datetime.now(timezone.utc)

    @property
    def is_locked_for_deletion(self) -> bool:
        return self.status in (SampleStatus.EVALUATED, SampleStatus.EXCLUDED, SampleStatus.COMPLETED)
