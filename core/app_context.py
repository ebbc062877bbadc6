import functools
from dataclasses import dataclass
from typing import Callable, Optional

from core.config_loader import AppConfig
from core.commission.roster import CommissionRoster
from core.evaluations.collector import ExpertEvaluationCollector
from core.evaluations.exclusion import ExclusionVotingRule
from core.protocols.issuer import ProtocolIssuer
from core.samples.registry import ProductSampleRegistry
from core.scorer.policy import ScoringPolicyStore
from core.scorer.service import ScoringEngine
from core.sessions.manager import SessionManager
from database.uow import evaluation_uow
from notification.service import NotificationService


@dataclass
class AppContext:
    """Application context container that holds all wired services.

    Every service opens its own unit of work per operation through
    ``uow_factory``, which also carries the notification service so events
    are published after each commit.
    """
    config: AppConfig
    uow_factory: Callable
    roster: CommissionRoster
    samples: ProductSampleRegistry
    sessions: SessionManager
    policies: ScoringPolicyStore
    scoring: ScoringEngine
    evaluations: ExpertEvaluationCollector
    protocols: ProtocolIssuer
    notification_service: Optional[NotificationService] = None

    @classmethod
    def build(cls, config: AppConfig, session_factory: Optional[Callable] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            session_factory: Session factory override (tests); defaults to SessionLocal

        Returns:
            Fully wired AppContext instance
        """
        notification_service = None
        if config.notifications and config.notifications.enabled:
            notification_service = cls._build_notification_service(config)

        uow_factory = functools.partial(
            evaluation_uow,
            notifier=notification_service,
            session_factory=session_factory,
        )

        policies = ScoringPolicyStore(defaults=config.scoring, uow_factory=uow_factory)
        scoring = ScoringEngine(policy_store=policies, uow_factory=uow_factory)

        return cls(
            config=config,
            uow_factory=uow_factory,
            roster=CommissionRoster(uow_factory=uow_factory),
            samples=ProductSampleRegistry(uow_factory=uow_factory),
            sessions=SessionManager(uow_factory=uow_factory),
            policies=policies,
            scoring=scoring,
            evaluations=ExpertEvaluationCollector(
                exclusion_rule=ExclusionVotingRule(uow_factory=uow_factory),
                uow_factory=uow_factory,
            ),
            protocols=ProtocolIssuer(scoring_engine=scoring, uow_factory=uow_factory),
            notification_service=notification_service,
        )

    @staticmethod
    def _build_notification_service(config: AppConfig) -> NotificationService:
        """Build notification service from the notifications section."""
        return NotificationService(config.notifications)
