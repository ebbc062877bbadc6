#!/usr/bin/env python3
"""
Scoring policy store - per-event trimming and rounding rules.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy.exc import IntegrityError

from core.config_loader import ScoringDefaultsConfig
from core.exceptions import ConfigurationError
from database.models import ScoringPolicy
from database.uow import EvaluationUnitOfWork, evaluation_uow

logger = logging.getLogger(__name__)

MAX_ROUNDING_DECIMALS = 4  # scores are stored as NUMERIC(9, 4)


def validate_policy(
    trim_high_low_from_count: int,
    trim_count_high: int,
    trim_count_low: int,
    rounding_decimals: int
) -> None:
    """
    Reject policies that cannot produce a score.

    Raises:
        ConfigurationError: If any value is out of range or trimming would
            discard every evaluation at the trimming threshold.
    """
    for name, value in (
        ('trim_high_low_from_count', trim_high_low_from_count),
        ('trim_count_high', trim_count_high),
        ('trim_count_low', trim_count_low),
        ('rounding_decimals', rounding_decimals),
    ):
        if value < 0:
            raise ConfigurationError(f"{name} must be >= 0, got {value}")

    if rounding_decimals > MAX_ROUNDING_DECIMALS:
        raise ConfigurationError(
            f"rounding_decimals must be between 0 and {MAX_ROUNDING_DECIMALS}, got {rounding_decimals}"
        )

    trimmed = trim_count_high + trim_count_low
    if trimmed > 0 and trimmed >= trim_high_low_from_count:
        raise ConfigurationError(
            f"Trimming {trim_count_low} low and {trim_count_high} high needs more than "
            f"{trimmed} evaluations, but trimming starts at {trim_high_low_from_count}"
        )


class ScoringPolicyStore:
    """Lazily creates and updates the ScoringPolicy of an event."""

    def __init__(self, defaults: Optional[ScoringDefaultsConfig] = None, uow_factory: Callable = evaluation_uow):
        self.defaults = defaults or ScoringDefaultsConfig()
        validate_policy(
            self.defaults.trim_high_low_from_count,
            self.defaults.trim_count_high,
            self.defaults.trim_count_low,
            self.defaults.rounding_decimals,
        )
        self._uow = uow_factory

    def get_or_create(self, event_id: Any) -> ScoringPolicy:
        with self._uow() as uow:
            return self.get_or_create_within(uow, event_id)

    def get_or_create_within(self, uow: EvaluationUnitOfWork, event_id: Any) -> ScoringPolicy:
        policy = uow.policies.get_for_event(event_id)
        if policy is not None:
            return policy

        policy = ScoringPolicy(
            event_id=event_id,
            trim_high_low_from_count=self.defaults.trim_high_low_from_count,
            trim_count_high=self.defaults.trim_count_high,
            trim_count_low=self.defaults.trim_count_low,
            rounding_decimals=self.defaults.rounding_decimals,
        )
        try:
            # Savepoint: a concurrent creator wins the unique event_id, we reuse its row
            with uow.session.begin_nested():
                uow.policies.add(policy)
        except IntegrityError:
            logger.info(f"Scoring policy for event {event_id} created concurrently; reloading")
            return uow.policies.get_for_event(event_id)

        logger.info(f"Created default scoring policy for event {event_id}")
        return policy

    def update(
        self,
        event_id: Any,
        trim_high_low_from_count: int,
        trim_count_high: int,
        trim_count_low: int,
        rounding_decimals: int
    ) -> ScoringPolicy:
        """
        Replace the event's policy values.

        Raises:
            ConfigurationError: If the values are invalid (see validate_policy).
        """
        validate_policy(trim_high_low_from_count, trim_count_high, trim_count_low, rounding_decimals)

        with self._uow() as uow:
            policy = self.get_or_create_within(uow, event_id)
            policy.trim_high_low_from_count = trim_high_low_from_count
            policy.trim_count_high = trim_count_high
            policy.trim_count_low = trim_count_low
            policy.rounding_decimals = rounding_decimals
            policy.modified_at = datetime.now(timezone.utc)
            uow.flush()

            logger.info(
                f"Updated scoring policy for event {event_id}: trim {trim_count_low}/{trim_count_high} "
                f"from {trim_high_low_from_count}, {rounding_decimals} decimals"
            )
            return policy
