from .base import Base
from .enums import SampleStatus, CommissionStatus, MemberRole, SessionStatus, ProtocolStatus
from .sample import ProductSample
from .commission import Commission, CommissionMember
from .session import EvaluationSession
from .evaluation import ExpertEvaluation
from .policy import ScoringPolicy
from .protocol import Protocol
from .sequence import EventSequence

__all__ = [
    'Base',
    'SampleStatus',
    'CommissionStatus',
    'MemberRole',
    'SessionStatus',
    'ProtocolStatus',
    'ProductSample',
    'Commission',
    'CommissionMember',
    'EvaluationSession',
    'ExpertEvaluation',
    'ScoringPolicy',
    'Protocol',
    'EventSequence',
]
