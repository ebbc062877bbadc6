"""
Evaluation domain events.

Events are collected by the unit of work while an operation runs and handed
to the NotificationService only after the transaction commits. Every event
of a competition event shares the delivery group ``evaluation-<event_id>``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

STATUS_CHANGED = "status_changed"
SESSION_CREATED = "session_created"
EVALUATION_SUBMITTED = "evaluation_submitted"
SCORE_CALCULATED = "score_calculated"
PROTOCOL_GENERATED = "protocol_generated"

EVENT_TYPES = (
    STATUS_CHANGED,
    SESSION_CREATED,
    EVALUATION_SUBMITTED,
    SCORE_CALCULATED,
    PROTOCOL_GENERATED,
)


def group_for_event(event_id: Any) -> str:
    return f"evaluation-{event_id}"


@dataclass
class EvaluationNotification:
    type: str
    event_id: Any
    payload: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.type not in EVENT_TYPES:
            raise ValueError(f"Unknown notification type: {self.type}")

    @property
    def group(self) -> str:
        return group_for_event(self.event_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'group': self.group,
            'event_id': str(self.event_id),
            'occurred_at': self.occurred_at.isoformat(),
            'payload': {k: _jsonable(v) for k, v in self.payload.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def status_changed(sample, old_status) -> EvaluationNotification:
    return EvaluationNotification(
        type=STATUS_CHANGED,
        event_id=sample.event_id,
        payload={
            'product_sample_id': sample.id,
            'old_status': old_status,
            'new_status': sample.status,
        },
    )


def session_created(session, event_id: Any) -> EvaluationNotification:
    return EvaluationNotification(
        type=SESSION_CREATED,
        event_id=event_id,
        payload={
            'session_id': session.id,
            'product_sample_id': session.product_sample_id,
            'commission_id': session.commission_id,
            'activated_by': session.activated_by,
        },
    )


def evaluation_submitted(evaluation, event_id: Any) -> EvaluationNotification:
    return EvaluationNotification(
        type=EVALUATION_SUBMITTED,
        event_id=event_id,
        payload={
            'evaluation_id': evaluation.id,
            'session_id': evaluation.evaluation_session_id,
            'product_sample_id': evaluation.product_sample_id,
            'commission_member_id': evaluation.commission_member_id,
        },
    )


def score_calculated(sample, evaluation_count: int, calculated_at: Optional[datetime]) -> EvaluationNotification:
    return EvaluationNotification(
        type=SCORE_CALCULATED,
        event_id=sample.event_id,
        payload={
            'product_sample_id': sample.id,
            'final_score': sample.final_score,
            'evaluation_count': evaluation_count,
            'calculated_at': calculated_at,
        },
    )


def protocol_generated(protocol) -> EvaluationNotification:
    return EvaluationNotification(
        type=PROTOCOL_GENERATED,
        event_id=protocol.event_id,
        payload={
            'protocol_id': protocol.id,
            'protocol_number': protocol.protocol_number,
            'version': protocol.version,
            'product_sample_id': protocol.product_sample_id,
            'final_score': protocol.final_score,
        },
    )
