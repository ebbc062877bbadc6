import uuid

import pytest

from core.commission.roster import CommissionRoster
from core.exceptions import AuthorizationError, ConflictError, InvalidStateError, NotFoundError, ValidationError
from database.models import CommissionStatus, MemberRole


@pytest.fixture
def roster(uow_factory):
    return CommissionRoster(uow_factory=uow_factory)


@pytest.fixture
def commission(roster):
    return roster.create_commission(uuid.uuid4(), "Dairy panel", uuid.uuid4(), description="Cheeses")


class TestCommissionRoster:

    def test_create_commission_adds_main_member(self, roster, commission):
        members = roster.members(commission.id)
        assert commission.status == CommissionStatus.ACTIVE
        assert len(members) == 1
        assert members[0].role == MemberRole.MAIN_MEMBER

    def test_add_members(self, roster, commission):
        president = roster.add_member(commission.id, uuid.uuid4(), MemberRole.PRESIDENT)
        member = roster.add_member(commission.id, uuid.uuid4(), MemberRole.MEMBER)
        trainee = roster.add_member(commission.id, uuid.uuid4(), MemberRole.TRAINEE)

        roles = sorted(m.role.value for m in roster.members(commission.id))
        assert roles == ["MainMember", "Member", "President", "Trainee"]
        assert roster.find_member(commission.id, member.user_id).id == member.id
        assert president.is_excluded is False
        assert trainee.role == MemberRole.TRAINEE

    def test_second_main_member_refused(self, roster, commission):
        with pytest.raises(ConflictError):
            roster.add_member(commission.id, uuid.uuid4(), MemberRole.MAIN_MEMBER)

    def test_second_president_refused(self, roster, commission):
        roster.add_member(commission.id, uuid.uuid4(), MemberRole.PRESIDENT)
        with pytest.raises(ConflictError):
            roster.add_member(commission.id, uuid.uuid4(), MemberRole.PRESIDENT)

    def test_duplicate_user_refused(self, roster, commission):
        user_id = uuid.uuid4()
        roster.add_member(commission.id, user_id, MemberRole.MEMBER)
        with pytest.raises(ConflictError):
            roster.add_member(commission.id, user_id, MemberRole.TRAINEE)
        assert len(roster.members(commission.id)) == 2

    def test_unknown_commission(self, roster):
        with pytest.raises(NotFoundError):
            roster.add_member(uuid.uuid4(), uuid.uuid4(), MemberRole.MEMBER)

    def test_exclude_member(self, roster, commission):
        member = roster.add_member(commission.id, uuid.uuid4(), MemberRole.MEMBER)
        excluded = roster.exclude_member(member.id, "Related to applicant")
        assert excluded.is_excluded
        assert roster.find_member(commission.id, member.user_id).exclusion_reason == "Related to applicant"

    def test_exclude_requires_reason(self, roster, commission):
        member = roster.add_member(commission.id, uuid.uuid4(), MemberRole.MEMBER)
        with pytest.raises(ValidationError):
            roster.exclude_member(member.id, "")
        assert not roster.find_member(commission.id, member.user_id).is_excluded

    def test_main_member_cannot_be_excluded(self, roster, commission):
        main = roster.members(commission.id)[0]
        with pytest.raises(InvalidStateError):
            roster.exclude_member(main.id, "Absent")

    def test_authorize_activation_follows_president(self, roster, commission):
        main = roster.members(commission.id)[0]
        assert roster.authorize_activation(commission.id, main.user_id).id == main.id

        president = roster.add_member(commission.id, uuid.uuid4(), MemberRole.PRESIDENT)
        with pytest.raises(AuthorizationError):
            roster.authorize_activation(commission.id, main.user_id)
        assert roster.authorize_activation(commission.id, president.user_id).id == president.id

        roster.exclude_member(president.id, "Recused")
        for user_id in (main.user_id, president.user_id):
            with pytest.raises(AuthorizationError):
                roster.authorize_activation(commission.id, user_id)
