from database.repositories.base import BaseRepository
from database.repositories.sample import SampleRepository
from database.repositories.commission import CommissionRepository
from database.repositories.session import SessionRepository
from database.repositories.evaluation import EvaluationRepository
from database.repositories.policy import PolicyRepository
from database.repositories.protocol import ProtocolRepository
from database.repositories.sequence import SequenceRepository, SAMPLE_NUMBER, PROTOCOL_NUMBER

__all__ = [
    'BaseRepository',
    'SampleRepository',
    'CommissionRepository',
    'SessionRepository',
    'EvaluationRepository',
    'PolicyRepository',
    'ProtocolRepository',
    'SequenceRepository',
    'SAMPLE_NUMBER',
    'PROTOCOL_NUMBER',
]
