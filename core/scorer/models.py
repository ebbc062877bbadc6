#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional


@dataclass
class ScoreResult:
    """Outcome of a score calculation for one product sample.

    ``score`` is None when the sample has no completed session or no
    countable evaluations; that is a normal outcome, not an error.
    """
    product_sample_id: Any
    score: Optional[Decimal] = None
    evaluation_count: int = 0
    calculated_at: Optional[datetime] = None
    trimmed: bool = False

    @property
    def has_score(self) -> bool:
        return self.score is not None
