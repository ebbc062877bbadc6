import uuid

from sqlalchemy import Column, Integer, TIMESTAMP, Uuid, func

from .base import Base


class ScoringPolicy(Base):
    """Per-event trimming and rounding rules. One row per event."""
    __tablename__ = 'scoring_policy'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, nullable=False, unique=True)

    trim_high_low_from_count = Column(Integer, nullable=False, default=5)
    trim_count_high = Column(Integer, nullable=False, default=1)
    trim_count_low = Column(Integer, nullable=False, default=1)
    rounding_decimals = Column(Integer, nullable=False, default=2)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    modified_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def should_trim(self, evaluation_count: int) -> bool:
        return evaluation_count >= self.trim_high_low_from_count
