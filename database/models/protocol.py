import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import Column, Integer, Numeric, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint, Index, event, func
from sqlalchemy.orm import Session

from core.exceptions import InvalidStateError
from .base import Base, enum_column_type
from .enums import ProtocolStatus


class Protocol(Base):
    """
    Immutable, numbered certificate record for an evaluated sample.

    Append-only: a correction is a new row whose ``previous_version_id``
    points at its predecessor. Persisted rows are never updated or deleted.
    """
    __tablename__ = 'protocol'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, nullable=False)
    product_sample_id = Column(Uuid, ForeignKey('product_sample.id'), nullable=False)
    applicant_id = Column(Uuid, nullable=False)

    protocol_number = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    previous_version_id = Column(Uuid, ForeignKey('protocol.id'), nullable=True)

    final_score = Column(Numeric(9, 4), nullable=False)
    status = Column(enum_column_type(ProtocolStatus, 'protocol_status'), nullable=False, default=ProtocolStatus.GENERATED)

    generated_at = Column(TIMESTAMP(timezone=True))
    version_created_at = Column(TIMESTAMP(timezone=True), nullable=False)
    version_created_by = Column(Uuid, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint('event_id', 'protocol_number', 'version', name='uq_protocol_event_number_version'),
        Index('idx_protocol_sample_version', 'product_sample_id', 'version'),
    )

    def new_version(self, created_by: Any, final_score: Optional[Decimal] = None) -> "Protocol":
        """Build (without persisting) the next version of this protocol."""
        now = datetime.now(timezone.utc)
        return Protocol(
            id=uuid.uuid4(),
            event_id=self.event_id,
            product_sample_id=self.product_sample_id,
            applicant_id=self.applicant_id,
            protocol_number=self.protocol_number,
            version=self.version + 1,
            previous_version_id=self.id,
            final_score=final_score if final_score is not None else self.final_score,
            status=ProtocolStatus.DRAFT,
            version_created_at=now,
            version_created_by=created_by,
        )


@event.listens_for(Session, "before_flush")
def _reject_protocol_rewrites(session, flush_context, instances):
    for obj in session.dirty:
        if isinstance(obj, Protocol) and session.is_modified(obj, include_collections=False):
            raise InvalidStateError(
                "Protocols are immutable; create a new version instead",
                entity_id=obj.id,
                state=obj.status.value if obj.status else None,
            )
    for obj in session.deleted:
        if isinstance(obj, Protocol):
            raise InvalidStateError("Protocols cannot be deleted", entity_id=obj.id)
