"""
Builders for evaluation scenarios used by the DB-backed tests.

Everything goes through the real services so the fixtures exercise the
same code paths as production callers.
"""

import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from core.commission.roster import CommissionRoster
from core.evaluations.collector import ExpertEvaluationCollector
from core.protocols.issuer import ProtocolIssuer
from core.samples.registry import ProductSampleRegistry
from core.scorer.service import ScoringEngine
from core.sessions.manager import SessionManager
from database.models import Commission, CommissionMember, MemberRole


@dataclass
class Panel:
    commission: Commission
    main_member: CommissionMember
    president: Optional[CommissionMember] = None
    members: List[CommissionMember] = field(default_factory=list)
    trainees: List[CommissionMember] = field(default_factory=list)

    @property
    def activator(self) -> CommissionMember:
        return self.president or self.main_member

    @property
    def judges(self) -> List[CommissionMember]:
        """Members whose evaluations count, in a stable order."""
        judges = [self.main_member]
        if self.president:
            judges.append(self.president)
        return judges + self.members


class EvaluationScenario:
    def __init__(self, uow_factory: Callable, event_id: Optional[uuid.UUID] = None):
        self.uow_factory = uow_factory
        self.event_id = event_id or uuid.uuid4()
        self.roster = CommissionRoster(uow_factory=uow_factory)
        self.registry = ProductSampleRegistry(uow_factory=uow_factory)
        self.sessions = SessionManager(uow_factory=uow_factory)
        self.collector = ExpertEvaluationCollector(uow_factory=uow_factory)
        self.scoring = ScoringEngine(uow_factory=uow_factory)
        self.protocols = ProtocolIssuer(scoring_engine=self.scoring, uow_factory=uow_factory)

    def panel(self, members: int = 2, president: bool = False, trainees: int = 0) -> Panel:
        commission = self.roster.create_commission(self.event_id, "Panel", uuid.uuid4())
        main_member = self.roster.members(commission.id)[0]
        panel = Panel(commission=commission, main_member=main_member)
        if president:
            panel.president = self.roster.add_member(commission.id, uuid.uuid4(), MemberRole.PRESIDENT)
        for _ in range(members):
            panel.members.append(self.roster.add_member(commission.id, uuid.uuid4(), MemberRole.MEMBER))
        for _ in range(trainees):
            panel.trainees.append(self.roster.add_member(commission.id, uuid.uuid4(), MemberRole.TRAINEE))
        return panel

    def sample(self, submit: bool = True, name: str = "Smoked ham"):
        sample = self.registry.register(self.event_id, uuid.uuid4(), None, name)
        if submit:
            sample = self.registry.submit(sample.id)
        return sample

    def open_session(self, sample, panel: Panel):
        return self.sessions.activate(sample.id, panel.commission.id, panel.activator.user_id)

    def evaluate(self, session, member: CommissionMember, score=None, exclude: bool = False,
                 note: Optional[str] = None, submit: bool = True):
        evaluation = self.collector.create(
            session.id, session.product_sample_id, member.id,
            score=score, exclude_vote=exclude, exclusion_note=note,
        )
        if submit:
            evaluation = self.collector.submit(evaluation.id)
        return evaluation

    def scored_session(self, scores: Sequence, trainee_scores: Sequence = (), complete: bool = True):
        """Sample judged by ``len(scores)`` counting members (plus trainees), optionally completed."""
        panel = self.panel(members=len(scores) - 1, trainees=len(trainee_scores))
        sample = self.sample()
        session = self.open_session(sample, panel)
        for member, score in zip(panel.judges, scores):
            self.evaluate(session, member, score)
        for member, score in zip(panel.trainees, trainee_scores):
            self.evaluate(session, member, score)
        if complete:
            session = self.sessions.complete(session.id)
        return sample, session, panel
