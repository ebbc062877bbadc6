#!/usr/bin/env python3
"""
Scoring Module.

Public API:
- ScoringEngine: calculates and persists final sample scores
- ScoringPolicyStore: per-event trimming/rounding policy
- ScoreResult: outcome of a calculation

- aggregation.py: trimmed mean and rounding (pure Decimal maths)
- policy.py: policy lookup, lazy creation and validated updates
- service.py: ScoringEngine orchestrator
"""

from core.scorer.models import ScoreResult
from core.scorer.policy import ScoringPolicyStore, validate_policy
from core.scorer.service import ScoringEngine

__all__ = ['ScoringEngine', 'ScoringPolicyStore', 'ScoreResult', 'validate_policy']
