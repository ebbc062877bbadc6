import logging
from typing import List, Optional, Any
from sqlalchemy import select

from database.models import Protocol
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ProtocolRepository(BaseRepository):
    """Append-only access to protocols. There is deliberately no update or delete."""

    def get_by_id(self, protocol_id: Any) -> Optional[Protocol]:
        return self.db.get(Protocol, protocol_id)

    def list_for_event(self, event_id: Any) -> List[Protocol]:
        stmt = select(Protocol).where(
            Protocol.event_id == event_id
        ).order_by(Protocol.protocol_number, Protocol.version)
        return list(self.db.execute(stmt).scalars().all())

    def list_for_sample(self, sample_id: Any) -> List[Protocol]:
        stmt = select(Protocol).where(
            Protocol.product_sample_id == sample_id
        ).order_by(Protocol.version.desc())
        return list(self.db.execute(stmt).scalars().all())

    def latest_for_sample(self, sample_id: Any) -> Optional[Protocol]:
        stmt = select(Protocol).where(
            Protocol.product_sample_id == sample_id
        ).order_by(Protocol.version.desc()).limit(1)
        return self.db.execute(stmt).scalars().first()

    def add(self, protocol: Protocol) -> Protocol:
        return self._save(protocol)
