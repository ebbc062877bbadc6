import unittest
import uuid

from core.commission.roles import authorize_activation, required_activation_role
from core.exceptions import AuthorizationError
from database.models import CommissionMember, MemberRole


def _member(role: MemberRole, excluded: bool = False) -> CommissionMember:
    return CommissionMember(id=uuid.uuid4(), user_id=uuid.uuid4(), role=role, is_excluded=excluded)


class TestRequiredActivationRole(unittest.TestCase):

    def test_main_member_without_president(self):
        members = [_member(MemberRole.MAIN_MEMBER), _member(MemberRole.MEMBER)]
        self.assertEqual(required_activation_role(members), MemberRole.MAIN_MEMBER)

    def test_president_takes_over(self):
        members = [_member(MemberRole.MAIN_MEMBER), _member(MemberRole.PRESIDENT)]
        self.assertEqual(required_activation_role(members), MemberRole.PRESIDENT)

    def test_excluded_president_still_holds_the_role(self):
        members = [_member(MemberRole.MAIN_MEMBER), _member(MemberRole.PRESIDENT, excluded=True)]
        self.assertEqual(required_activation_role(members), MemberRole.PRESIDENT)


class TestAuthorizeActivation(unittest.TestCase):

    def setUp(self):
        self.main = _member(MemberRole.MAIN_MEMBER)
        self.president = _member(MemberRole.PRESIDENT)
        self.member = _member(MemberRole.MEMBER)
        self.trainee = _member(MemberRole.TRAINEE)

    def test_president_may_activate(self):
        members = [self.main, self.president, self.member]
        self.assertIs(authorize_activation(members, self.president.user_id), self.president)

    def test_main_member_refused_when_president_present(self):
        members = [self.main, self.president]
        with self.assertRaises(AuthorizationError) as ctx:
            authorize_activation(members, self.main.user_id)
        self.assertIn("President", ctx.exception.message)
        self.assertEqual(ctx.exception.state, "MainMember")

    def test_main_member_may_activate_without_president(self):
        members = [self.main, self.member, self.trainee]
        self.assertIs(authorize_activation(members, self.main.user_id), self.main)

    def test_regular_member_and_trainee_refused(self):
        members = [self.main, self.member, self.trainee]
        for user in (self.member, self.trainee):
            with self.subTest(role=user.role):
                with self.assertRaises(AuthorizationError):
                    authorize_activation(members, user.user_id)

    def test_non_member_refused(self):
        with self.assertRaises(AuthorizationError) as ctx:
            authorize_activation([self.main], uuid.uuid4())
        self.assertIn("not a commission member", ctx.exception.message)

    def test_excluded_member_counts_as_non_member(self):
        excluded = _member(MemberRole.MEMBER, excluded=True)
        with self.assertRaises(AuthorizationError) as ctx:
            authorize_activation([self.main, excluded], excluded.user_id)
        self.assertIn("not a commission member", ctx.exception.message)

    def test_excluded_president_blocks_main_member_and_self(self):
        president = _member(MemberRole.PRESIDENT, excluded=True)
        members = [self.main, president]
        with self.assertRaises(AuthorizationError) as ctx:
            authorize_activation(members, self.main.user_id)
        self.assertIn("President", ctx.exception.message)
        with self.assertRaises(AuthorizationError):
            authorize_activation(members, president.user_id)
