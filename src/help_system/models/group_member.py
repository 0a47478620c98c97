from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint
from .base import Base


class GroupMemberModel(Base):
    __tablename__ = "group_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, index=True)
    group_name = Column(String(255), nullable=False, index=True)
    admin_rights = Column(Boolean, nullable=False, default=False)
    viewing_rights = Column(Boolean, nullable=False, default=False)
    role = Column(String(20), nullable=False)

    # A user holds at most one membership row per group
    __table_args__ = (
        UniqueConstraint("username", "group_name", name="uq_group_members_user_group"),
    )
