import logging
from typing import List, Optional, Any
from sqlalchemy import select

from database.models import ProductSample
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class SampleRepository(BaseRepository):
    def get_by_id(self, sample_id: Any) -> Optional[ProductSample]:
        return self.db.get(ProductSample, sample_id)

    def get_for_update(self, sample_id: Any) -> Optional[ProductSample]:
        """Load the sample holding a row lock until the transaction ends."""
        return self._locked(ProductSample, sample_id)

    def list_for_event(self, event_id: Any) -> List[ProductSample]:
        stmt = select(ProductSample).where(
            ProductSample.event_id == event_id
        ).order_by(ProductSample.sequential_number)
        return list(self.db.execute(stmt).scalars().all())

    def add(self, sample: ProductSample) -> ProductSample:
        return self._save(sample)

    def delete(self, sample: ProductSample) -> None:
        self.db.delete(sample)
        self.db.flush()
