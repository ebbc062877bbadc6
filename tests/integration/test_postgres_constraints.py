"""
PostgreSQL-only checks: row locks, the partial unique index on Active
sessions and the upsert-backed counters under real concurrency.
"""

import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from core.exceptions import ConflictError
from database.models import EvaluationSession, SessionStatus
from tests.fixtures.evaluation_fixtures import EvaluationScenario

pytestmark = pytest.mark.db


@pytest.fixture
def pg_scenario(pg_uow_factory):
    return EvaluationScenario(pg_uow_factory)


def _run_concurrently(fn, count):
    with ThreadPoolExecutor(max_workers=count) as pool:
        futures = [pool.submit(fn, i) for i in range(count)]
        return [f.exception() or f.result() for f in futures]


class TestActiveSessionIndex:

    def test_index_rejects_second_active_row(self, pg_scenario, pg_uow_factory):
        panel = pg_scenario.panel()
        sample = pg_scenario.sample()
        pg_scenario.open_session(sample, panel)

        with pytest.raises(IntegrityError):
            with pg_uow_factory() as uow:
                uow.session.add(EvaluationSession(
                    product_sample_id=sample.id,
                    commission_id=panel.commission.id,
                    activated_by=panel.activator.user_id,
                    activated_at=datetime.now(timezone.utc),
                    status=SessionStatus.ACTIVE,
                ))
                uow.flush()

    def test_completed_rows_do_not_count(self, pg_scenario):
        panel = pg_scenario.panel()
        sample = pg_scenario.sample()
        first = pg_scenario.open_session(sample, panel)
        pg_scenario.sessions.complete(first.id)

        second = pg_scenario.open_session(sample, panel)

        assert second.id != first.id
        assert [s.status for s in pg_scenario.sessions.list_for_sample(sample.id)].count(SessionStatus.ACTIVE) == 1


class TestConcurrency:

    def test_concurrent_activation(self, pg_scenario):
        panel = pg_scenario.panel()
        sample = pg_scenario.sample()

        outcomes = _run_concurrently(lambda _: pg_scenario.open_session(sample, panel), 6)

        assert sum(1 for o in outcomes if isinstance(o, ConflictError)) == 5
        assert sum(1 for o in outcomes if isinstance(o, EvaluationSession)) == 1

    def test_concurrent_sample_numbers(self, pg_scenario):
        samples = _run_concurrently(lambda i: pg_scenario.sample(submit=False, name=f"Wine {i}"), 10)
        assert sorted(s.sequential_number for s in samples) == list(range(1, 11))

    def test_concurrent_protocol_numbers(self, pg_scenario):
        sample_ids = []
        for _ in range(5):
            sample, _, _ = pg_scenario.scored_session([81, 83])
            pg_scenario.scoring.calculate(sample.id)
            sample_ids.append(sample.id)

        protocols = _run_concurrently(lambda i: pg_scenario.protocols.generate(sample_ids[i], uuid.uuid4()), 5)

        assert sorted(p.protocol_number for p in protocols) == [1, 2, 3, 4, 5]
