#!/usr/bin/env python3
"""
Commission roster management.

Keeps the roster invariants: exactly one MainMember, at most one
President, no user listed twice. The partial unique indexes on
``commission_member`` back these checks at the storage level.
"""

import logging
from typing import Any, Callable, List, Optional

from sqlalchemy.exc import IntegrityError

from core.commission import roles
from core.exceptions import ConflictError, InvalidStateError, NotFoundError
from database.models import Commission, CommissionMember, CommissionStatus, MemberRole
from database.uow import EvaluationUnitOfWork, evaluation_uow

logger = logging.getLogger(__name__)


class CommissionRoster:
    def __init__(self, uow_factory: Callable = evaluation_uow):
        self._uow = uow_factory

    def create_commission(
        self,
        event_id: Any,
        name: str,
        main_member_user_id: Any,
        category_id: Any = None,
        description: Optional[str] = None,
    ) -> Commission:
        """Create an Active commission together with its MainMember."""
        with self._uow() as uow:
            commission = Commission(
                event_id=event_id,
                category_id=category_id,
                name=name,
                description=description,
                status=CommissionStatus.ACTIVE,
            )
            uow.commissions.add(commission)
            uow.commissions.add_member(CommissionMember(
                commission_id=commission.id,
                user_id=main_member_user_id,
                role=MemberRole.MAIN_MEMBER,
                is_excluded=False,
            ))
            logger.info(f"Created commission {commission.id} for event {event_id}")
            return commission

    def add_member(self, commission_id: Any, user_id: Any, role: MemberRole) -> CommissionMember:
        """
        Add a user to the commission.

        Raises:
            NotFoundError: unknown commission
            ConflictError: second MainMember/President, or user already listed
        """
        with self._uow() as uow:
            if uow.commissions.get_by_id(commission_id) is None:
                raise NotFoundError("Commission not found", entity_id=commission_id)

            members = uow.commissions.get_members(commission_id)
            if any(m.user_id == user_id for m in members):
                raise ConflictError("User is already a member of this commission", entity_id=user_id)
            if role == MemberRole.MAIN_MEMBER:
                raise ConflictError("Commission already has a MainMember", entity_id=commission_id)
            if role == MemberRole.PRESIDENT and any(m.role == MemberRole.PRESIDENT for m in members):
                raise ConflictError("Commission already has a President", entity_id=commission_id)

            member = CommissionMember(commission_id=commission_id, user_id=user_id, role=role, is_excluded=False)
            try:
                uow.commissions.add_member(member)
            except IntegrityError as e:
                raise ConflictError("Commission roster constraint violated", entity_id=commission_id) from e

            logger.info(f"Added {role.value} {user_id} to commission {commission_id}")
            return member

    def exclude_member(self, member_id: Any, reason: str) -> CommissionMember:
        with self._uow() as uow:
            member = uow.commissions.get_member(member_id)
            if member is None:
                raise NotFoundError("Commission member not found", entity_id=member_id)
            if member.role == MemberRole.MAIN_MEMBER:
                raise InvalidStateError("The MainMember cannot be excluded", entity_id=member_id, state=member.role.value)

            member.exclude(reason)
            logger.info(f"Excluded commission member {member_id}: {reason}")
            return member

    def members(self, commission_id: Any) -> List[CommissionMember]:
        with self._uow() as uow:
            return uow.commissions.get_members(commission_id)

    def find_member(self, commission_id: Any, user_id: Any) -> Optional[CommissionMember]:
        with self._uow() as uow:
            return uow.commissions.find_member(commission_id, user_id)

    def authorize_activation(self, commission_id: Any, user_id: Any) -> CommissionMember:
        with self._uow() as uow:
            return self.authorize_activation_within(uow, commission_id, user_id)

    @staticmethod
    def authorize_activation_within(uow: EvaluationUnitOfWork, commission_id: Any, user_id: Any) -> CommissionMember:
        if uow.commissions.get_by_id(commission_id) is None:
            raise NotFoundError("Commission not found", entity_id=commission_id)
        return roles.authorize_activation(uow.commissions.get_members(commission_id), user_id)
