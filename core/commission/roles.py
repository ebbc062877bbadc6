"""
Who may open an evaluation session.

A commission whose roster holds a President lets only the President
activate, even while that President is excluded; otherwise the MainMember
does. Excluded members never activate. This is the single place that
rule lives.
"""

from typing import Any, Iterable, List

from core.exceptions import AuthorizationError
from database.models import CommissionMember, MemberRole


def required_activation_role(members: Iterable[CommissionMember]) -> MemberRole:
    for member in members:
        if member.role == MemberRole.PRESIDENT:
            return MemberRole.PRESIDENT
    return MemberRole.MAIN_MEMBER


def authorize_activation(members: Iterable[CommissionMember], user_id: Any) -> CommissionMember:
    """
    Return the member allowed to activate, or raise.

    Raises:
        AuthorizationError: user is not an active member, or holds the wrong role
    """
    members: List[CommissionMember] = list(members)

    member = next((m for m in members if m.user_id == user_id and not m.is_excluded), None)
    if member is None:
        raise AuthorizationError("User is not a commission member", entity_id=user_id)

    required = required_activation_role(members)
    if member.role != required:
        raise AuthorizationError(
            f"Only the {required.value} can activate an evaluation session",
            entity_id=user_id,
            state=member.role.value,
        )
    return member
