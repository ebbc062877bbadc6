"""Expert evaluation collection and the exclusion vote."""
from core.evaluations.collector import ExpertEvaluationCollector
from core.evaluations.exclusion import ExclusionVotingRule

__all__ = ['ExpertEvaluationCollector', 'ExclusionVotingRule']
