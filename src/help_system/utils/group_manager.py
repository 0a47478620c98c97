"""Special access group membership.

A group has no table of its own: it exists while at least one membership row
names it. Every membership carries two capability bits, admin rights and
viewing rights, which the core API only ever grants.
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from help_system.core.database import commit
from help_system.core.exceptions import DuplicateKeyError, InvalidArgumentError, NotFoundError
from help_system.models.group_member import GroupMemberModel
from help_system.schemas.common import Capability, Role, parse_choice
from help_system.schemas.group import GroupMember
from help_system.utils.converters import model_to_group_member

logger = logging.getLogger(__name__)


def _check_group_name(group_name: str) -> None:
    # Names are stored and looked up verbatim
    if not group_name or not group_name.strip():
        raise InvalidArgumentError("Group name cannot be empty.")
    if group_name != group_name.strip():
        raise InvalidArgumentError(f"Group name has surrounding whitespace: '{group_name}'")


class GroupManager:
    """Manages group membership and per-group rights."""

    def __init__(self, db: Session):
        self.db = db

    def _get_membership(self, username: str, group_name: str) -> Optional[GroupMemberModel]:
        return (
            self.db.query(GroupMemberModel)
            .filter(
                GroupMemberModel.username == username,
                GroupMemberModel.group_name == group_name,
            )
            .first()
        )

    def _insert(
        self,
        username: str,
        group_name: str,
        role: Role,
        admin_rights: bool,
        viewing_rights: bool,
    ) -> GroupMember:
        _check_group_name(group_name)
        if self._get_membership(username, group_name) is not None:
            raise DuplicateKeyError(
                f"User '{username}' is already a member of group '{group_name}'"
            )

        if not self.group_exists(group_name):
            # The first member founds the group and holds every right
            admin_rights = viewing_rights = True
            logger.info("Group %s founded by %s", group_name, username)

        model = GroupMemberModel(
            username=username,
            group_name=group_name,
            admin_rights=admin_rights,
            viewing_rights=viewing_rights,
            role=role.value,
        )
        self.db.add(model)
        commit(self.db)
        logger.info("Added %s to group %s as %s", username, group_name, role.value)
        return model_to_group_member(model)

    def add_first_instructor(self, username: str, group_name: str) -> GroupMember:
        """Create a group with its founding instructor.

        Raises:
            DuplicateKeyError: If the group already exists.
        """
        _check_group_name(group_name)
        if self.group_exists(group_name):
            raise DuplicateKeyError(f"Group '{group_name}' already exists")
        return self._insert(username, group_name, Role.INSTRUCTOR, True, True)

    def add_admin(self, username: str, group_name: str) -> GroupMember:
        return self._insert(username, group_name, Role.ADMIN, False, True)

    def add_instructor(self, username: str, group_name: str) -> GroupMember:
        return self._insert(username, group_name, Role.INSTRUCTOR, False, True)

    def add_student(self, username: str, group_name: str) -> GroupMember:
        return self._insert(username, group_name, Role.STUDENT, False, True)

    def add_member(self, username: str, group_name: str, role: str) -> GroupMember:
        """Dispatch to the add_* call matching role."""
        role = parse_choice(Role, role, "role")
        if role is Role.ADMIN:
            return self.add_admin(username, group_name)
        if role is Role.INSTRUCTOR:
            return self.add_instructor(username, group_name)
        return self.add_student(username, group_name)

    def _grant(self, username: str, group_name: str, column: str) -> GroupMember:
        model = self._get_membership(username, group_name)
        if model is None:
            raise NotFoundError("GroupMember", f"{username}@{group_name}")
        setattr(model, column, True)
        commit(self.db)
        logger.info("Granted %s to %s in group %s", column, username, group_name)
        return model_to_group_member(model)

    def grant_admin_rights(self, username: str, group_name: str) -> GroupMember:
        return self._grant(username, group_name, "admin_rights")

    def grant_viewing_rights(self, username: str, group_name: str) -> GroupMember:
        return self._grant(username, group_name, "viewing_rights")

    def grant(self, username: str, group_name: str, capability: str) -> GroupMember:
        capability = parse_choice(Capability, capability, "capability")
        if capability is Capability.ADMIN:
            return self.grant_admin_rights(username, group_name)
        return self.grant_viewing_rights(username, group_name)

    def has_admin_rights(self, username: str, group_name: Optional[str]) -> bool:
        model = self._get_membership(username, group_name)
        return bool(model and model.admin_rights)

    def has_viewing_rights(self, username: str, group_name: Optional[str]) -> bool:
        model = self._get_membership(username, group_name)
        return bool(model and model.viewing_rights)

    def viewable_groups(self, username: str) -> List[str]:
        """Names of every group in which the user holds viewing rights."""
        rows = (
            self.db.query(GroupMemberModel.group_name)
            .filter(
                GroupMemberModel.username == username,
                GroupMemberModel.viewing_rights.is_(True),
            )
            .order_by(GroupMemberModel.id)
            .all()
        )
        return [row.group_name for row in rows]

    def get_user_group(self, username: str) -> Optional[str]:
        """Return the first group the user joined, or None."""
        groups = self.groups_for(username)
        return groups[0] if groups else None

    def groups_for(self, username: str) -> List[str]:
        rows = (
            self.db.query(GroupMemberModel.group_name)
            .filter(GroupMemberModel.username == username)
            .order_by(GroupMemberModel.id)
            .all()
        )
        return [row.group_name for row in rows]

    def is_member(self, username: str, group_name: str) -> bool:
        return self._get_membership(username, group_name) is not None

    def group_exists(self, group_name: str) -> bool:
        return (
            self.db.query(GroupMemberModel.id)
            .filter(GroupMemberModel.group_name == group_name)
            .first()
            is not None
        )

    def list_groups(self) -> List[str]:
        rows = (
            self.db.query(GroupMemberModel.group_name, func.min(GroupMemberModel.id))
            .group_by(GroupMemberModel.group_name)
            .order_by(func.min(GroupMemberModel.id))
            .all()
        )
        return [row[0] for row in rows]

    def list_members(self, group_name: str) -> List[GroupMember]:
        models = (
            self.db.query(GroupMemberModel)
            .filter(GroupMemberModel.group_name == group_name)
            .order_by(GroupMemberModel.id)
            .all()
        )
        return [model_to_group_member(m) for m in models]

    def list_by_role_and_capability(
        self, role: str, capability: str, group_name: Optional[str] = None
    ) -> List[GroupMember]:
        """List memberships with the given role that hold the capability."""
        role = parse_choice(Role, role, "role")
        capability = parse_choice(Capability, capability, "capability")
        column = (
            GroupMemberModel.admin_rights
            if capability is Capability.ADMIN
            else GroupMemberModel.viewing_rights
        )
        query = self.db.query(GroupMemberModel).filter(
            GroupMemberModel.role == role.value, column.is_(True)
        )
        if group_name is not None:
            query = query.filter(GroupMemberModel.group_name == group_name)
        return [model_to_group_member(m) for m in query.order_by(GroupMemberModel.id).all()]

    def remove_user(self, username: str) -> int:
        """Remove the user from every group.

        Returns:
            Number of memberships removed.
        """
        removed = (
            self.db.query(GroupMemberModel)
            .filter(GroupMemberModel.username == username)
            .delete()
        )
        commit(self.db)
        if removed:
            logger.info("Removed %s from %d group(s)", username, removed)
        return removed
