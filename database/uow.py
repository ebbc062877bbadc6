import contextlib
import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from database import database
from database.repositories import (
    SampleRepository,
    CommissionRepository,
    SessionRepository,
    EvaluationRepository,
    PolicyRepository,
    ProtocolRepository,
    SequenceRepository,
)
from notification.events import EvaluationNotification

logger = logging.getLogger(__name__)


class EvaluationUnitOfWork:
    """Repositories sharing one Session, plus the events raised while it is open."""

    def __init__(self, session: Session):
        self.session = session
        self.samples = SampleRepository(session)
        self.commissions = CommissionRepository(session)
        self.sessions = SessionRepository(session)
        self.evaluations = EvaluationRepository(session)
        self.policies = PolicyRepository(session)
        self.protocols = ProtocolRepository(session)
        self.sequences = SequenceRepository(session)
        self.events: List[EvaluationNotification] = []

    def emit(self, notification: EvaluationNotification) -> None:
        self.events.append(notification)

    def flush(self) -> None:
        self.session.flush()


@contextlib.contextmanager
def evaluation_uow(notifier=None, session_factory: Optional[Callable[[], Session]] = None):
    """Per-operation transaction scope.

    Yields an EvaluationUnitOfWork bound to a fresh Session. Commits on
    success, rolls back on exception, always closes. Events emitted during
    the block are handed to ``notifier`` only after the commit succeeded.

    Usage:
        with evaluation_uow(notifier) as uow:
            sample = uow.samples.get_for_update(sample_id)
            # perform operations...
        # commit (then publish) happens automatically on successful exit
    """
    session = (session_factory or database.SessionLocal)()
    uow = EvaluationUnitOfWork(session)
    try:
        yield uow
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if notifier is not None and uow.events:
        notifier.publish(uow.events)
