from sqlalchemy import Column, Text, Integer, Uuid

from .base import Base


class EventSequence(Base):
    """
    Per-event named counter (sample numbers, protocol numbers).

    Only ever advanced through a single upsert-and-return statement,
    see SequenceRepository.next_value.
    """
    __tablename__ = 'event_sequence'

    event_id = Column(Uuid, primary_key=True)
    name = Column(Text, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
