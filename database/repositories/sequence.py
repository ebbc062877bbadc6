import logging
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite

from core.exceptions import ConfigurationError
from database.models import EventSequence
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

SAMPLE_NUMBER = "sample_number"
PROTOCOL_NUMBER = "protocol_number"

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SequenceRepository(BaseRepository):
    def next_value(self, event_id: Any, name: str) -> int:
        """
        Advance and return the named per-event counter.

        A single INSERT .. ON CONFLICT DO UPDATE .. RETURNING statement, so
        concurrent callers serialize on the counter row and never observe
        the same value.
        """
        dialect = self.db.get_bind().dialect.name
        insert = _INSERTS.get(dialect)
        if insert is None:
            raise ConfigurationError(f"Sequence allocation is not supported on dialect '{dialect}'")

        table = EventSequence.__table__
        stmt = insert(table).values(event_id=event_id, name=name, last_value=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.event_id, table.c.name],
            set_={"last_value": table.c.last_value + 1},
        ).returning(table.c.last_value)

        value = self.db.execute(stmt).scalar_one()
        logger.debug(f"Allocated {name}={value} for event {event_id}")
        return value
