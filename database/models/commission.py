import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Text, Boolean, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint, Index, func
from sqlalchemy.sql import text as sql_text
from sqlalchemy.orm import relationship

from core.exceptions import ValidationError
from .base import Base, enum_column_type
from .enums import CommissionStatus, MemberRole


class Commission(Base):
    """
    A judging commission for one competition event.

    Roster invariants: exactly one MainMember, at most one President,
    no user listed twice.
    """
    __tablename__ = 'commission'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, nullable=False)
    category_id = Column(Uuid, nullable=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    status = Column(enum_column_type(CommissionStatus, 'commission_status'), nullable=False, default=CommissionStatus.ACTIVE)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    members = relationship("CommissionMember", back_populates="commission", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_commission_event', 'event_id'),
    )


class CommissionMember(Base):
    __tablename__ = 'commission_member'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    commission_id = Column(Uuid, ForeignKey('commission.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Uuid, nullable=False)
    role = Column(enum_column_type(MemberRole, 'member_role'), nullable=False, default=MemberRole.MEMBER)

    is_excluded = Column(Boolean, nullable=False, default=False)
    excluded_at = Column(TIMESTAMP(timezone=True))
    exclusion_reason = Column(Text)

    joined_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    commission = relationship("Commission", back_populates="members")

    __table_args__ = (
        UniqueConstraint('commission_id', 'user_id', name='uq_commission_member_user'),
        Index(
            'uq_commission_single_main_member', 'commission_id', unique=True,
            postgresql_where=sql_text("role = 'MainMember'"),
            sqlite_where=sql_text("role = 'MainMember'"),
        ),
        Index(
            'uq_commission_single_president', 'commission_id', unique=True,
            postgresql_where=sql_text("role = 'President'"),
            sqlite_where=sql_text("role = 'President'"),
        ),
    )

    def exclude(self, reason: str) -> None:
        """Exclude the member from judging; the exclusion must be justified."""
        if not reason or not reason.strip():
            raise ValidationError("Exclusion reason is required", entity_id=self.id)
        self.is_excluded = True
        self.exclusion_reason = reason
        self.excluded_at = datetime.now(timezone.utc)

    def can_submit_evaluation(self) -> bool:
        return not self.is_excluded
