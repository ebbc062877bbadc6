import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, TIMESTAMP, ForeignKey, Uuid, Index, func
from sqlalchemy.sql import text as sql_text
from sqlalchemy.orm import relationship

from core.exceptions import InvalidStateError
from .base import Base, enum_column_type
from .enums import SessionStatus


class EvaluationSession(Base):
    """
    A judging window binding one product sample to one commission.

    At most one Active session may exist per sample; the partial unique
    index below is the storage-level guard for that rule.
    """
    __tablename__ = 'evaluation_session'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_sample_id = Column(Uuid, ForeignKey('product_sample.id', ondelete='CASCADE'), nullable=False)
    commission_id = Column(Uuid, ForeignKey('commission.id'), nullable=False)

    activated_by = Column(Uuid, nullable=False)
    activated_at = Column(TIMESTAMP(timezone=True), nullable=False)
    status = Column(enum_column_type(SessionStatus, 'session_status'), nullable=False, default=SessionStatus.ACTIVE)
    completed_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    product_sample = relationship("ProductSample", back_populates="sessions", foreign_keys=[product_sample_id])
    commission = relationship("Commission")
    evaluations = relationship("ExpertEvaluation", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (
        Index(
            'uq_evaluation_session_active_sample', 'product_sample_id', unique=True,
            postgresql_where=sql_text("status = 'Active'"),
            sqlite_where=sql_text("status = 'Active'"),
        ),
        Index('idx_evaluation_session_sample_completed', 'product_sample_id', 'completed_at'),
    )

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def complete(self) -> None:
        """Close the judging window. Driven by the external workflow."""
        self._close(SessionStatus.COMPLETED)

    def cancel(self) -> None:
        self._close(SessionStatus.CANCELLED)

    def _close(self, new_status: SessionStatus) -> None:
        if not self.is_active:
            raise InvalidStateError(
                f"Only active sessions can be moved to {new_status.value}",
                entity_id=self.id,
                state=self.status.value,
            )
        self.status = new_status
        self.completed_at = datetime.now(timezone.utc)

        sample = self.product_sample
        if sample is not None and sample.active_session_id == self.id:
            sample.active_session_id = None
