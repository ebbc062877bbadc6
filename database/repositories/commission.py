import logging
from typing import List, Optional, Any
from sqlalchemy import select

from database.models import Commission, CommissionMember
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class CommissionRepository(BaseRepository):
    def get_by_id(self, commission_id: Any) -> Optional[Commission]:
        return self.db.get(Commission, commission_id)

    def get_member(self, member_id: Any) -> Optional[CommissionMember]:
        return self.db.get(CommissionMember, member_id)

    def get_members(self, commission_id: Any) -> List[CommissionMember]:
        stmt = select(CommissionMember).where(
            CommissionMember.commission_id == commission_id
        ).order_by(CommissionMember.joined_at)
        return list(self.db.execute(stmt).scalars().all())

    def find_member(self, commission_id: Any, user_id: Any) -> Optional[CommissionMember]:
        stmt = select(CommissionMember).where(
            CommissionMember.commission_id == commission_id,
            CommissionMember.user_id == user_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add(self, commission: Commission) -> Commission:
        return self._save(commission)

    def add_member(self, member: CommissionMember) -> CommissionMember:
        return self._save(member)
