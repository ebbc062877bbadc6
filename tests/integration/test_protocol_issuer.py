import uuid
from decimal import Decimal

import pytest

from core.exceptions import InvalidStateError, NotFoundError
from database.models import ProtocolStatus
from tests.fixtures.evaluation_fixtures import EvaluationScenario


def _evaluated_sample(scenario, scores=(70, 75, 80, 85, 200)):
    sample, _, _ = scenario.scored_session(list(scores))
    scenario.scoring.calculate(sample.id)
    return sample


class TestProtocolIssuer:

    def test_generate_first_protocol(self, scenario, notifier):
        sample = _evaluated_sample(scenario)
        issuer = uuid.uuid4()
        notifier.reset_mock()

        protocol = scenario.protocols.generate(sample.id, issuer)

        assert protocol.protocol_number == 1
        assert protocol.version == 1
        assert protocol.previous_version_id is None
        assert protocol.status == ProtocolStatus.GENERATED
        assert protocol.final_score == Decimal("80.00")
        assert protocol.version_created_by == issuer
        assert protocol.applicant_id == sample.applicant_id
        assert protocol.generated_at == protocol.version_created_at

        published = [n.type for call in notifier.publish.call_args_list for n in call.args[0]]
        assert published == ["score_calculated", "protocol_generated"]

    def test_numbers_increase_per_event(self, scenario, uow_factory):
        first = scenario.protocols.generate(_evaluated_sample(scenario).id, uuid.uuid4())
        second = scenario.protocols.generate(_evaluated_sample(scenario).id, uuid.uuid4())
        assert (first.protocol_number, second.protocol_number) == (1, 2)

        other_event = EvaluationScenario(uow_factory)
        other = other_event.protocols.generate(_evaluated_sample(other_event).id, uuid.uuid4())
        assert other.protocol_number == 1

        numbers = [p.protocol_number for p in scenario.protocols.list_for_event(scenario.event_id)]
        assert numbers == [1, 2]

    def test_requires_evaluated_sample(self, scenario):
        sample, _, _ = scenario.scored_session([70, 80])
        with pytest.raises(InvalidStateError) as exc:
            scenario.protocols.generate(sample.id, uuid.uuid4())
        assert exc.value.state == "Submitted"
        assert scenario.protocols.list_for_sample(sample.id) == []

    def test_excluded_sample_refused(self, scenario):
        panel = scenario.panel(members=0)
        sample = scenario.sample()
        session = scenario.open_session(sample, panel)
        scenario.evaluate(session, panel.main_member, 10, exclude=True, note="Spoiled")
        with pytest.raises(InvalidStateError):
            scenario.protocols.generate(sample.id, uuid.uuid4())

    def test_unknown_sample(self, scenario):
        with pytest.raises(NotFoundError):
            scenario.protocols.generate(uuid.uuid4(), uuid.uuid4())

    def test_read_helpers(self, scenario):
        sample = _evaluated_sample(scenario)
        protocol = scenario.protocols.generate(sample.id, uuid.uuid4())

        assert scenario.protocols.get(protocol.id).protocol_number == 1
        assert scenario.protocols.latest_for_sample(sample.id).id == protocol.id
        assert scenario.protocols.get(uuid.uuid4()) is None


class TestProtocolImmutability:

    def _protocol(self, scenario):
        return scenario.protocols.generate(_evaluated_sample(scenario).id, uuid.uuid4())

    def test_update_rejected(self, scenario, uow_factory):
        protocol = self._protocol(scenario)
        with pytest.raises(InvalidStateError):
            with uow_factory() as uow:
                stored = uow.protocols.get_by_id(protocol.id)
                stored.final_score = Decimal("99.00")
                uow.flush()
        assert scenario.protocols.get(protocol.id).final_score == Decimal("80.00")

    def test_delete_rejected(self, scenario, uow_factory):
        protocol = self._protocol(scenario)
        with pytest.raises(InvalidStateError):
            with uow_factory() as uow:
                uow.session.delete(uow.protocols.get_by_id(protocol.id))
                uow.flush()
        assert scenario.protocols.get(protocol.id) is not None

    def test_correction_is_a_new_version(self, scenario, uow_factory):
        protocol = self._protocol(scenario)
        with uow_factory() as uow:
            original = uow.protocols.get_by_id(protocol.id)
            uow.protocols.add(original.new_version(uuid.uuid4(), final_score=Decimal("81.00")))

        versions = scenario.protocols.list_for_sample(protocol.product_sample_id)
        assert [v.version for v in versions] == [2, 1]
        assert versions[0].previous_version_id == protocol.id
        assert versions[0].protocol_number == protocol.protocol_number
        assert scenario.protocols.get(protocol.id).final_score == Decimal("80.00")
