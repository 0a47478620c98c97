"""Registration invitation codes.

Redeeming a code is three calls made in order by the caller: ``exists``,
``role_of`` and ``revoke``. Only administrators write this table.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from help_system.config import INVITATION_EXPIRE_DAYS
from help_system.core.database import commit
from help_system.core.exceptions import DuplicateKeyError, InvalidArgumentError, NotFoundError
from help_system.models.invitation_code import InvitationCodeModel
from help_system.schemas.common import Role, parse_choice
from help_system.schemas.user import Invitation
from help_system.utils.converters import model_to_invitation

logger = logging.getLogger(__name__)

INVITABLE_ROLES = (Role.INSTRUCTOR, Role.STUDENT)


class InvitationManager:
    """Manages invitation codes using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _live_model(self, code: str) -> Optional[InvitationCodeModel]:
        model = (
            self.db.query(InvitationCodeModel)
            .filter(InvitationCodeModel.code == code)
            .first()
        )
        if model is None:
            return None
        if model.expires_at:
            expires_at = datetime.fromisoformat(model.expires_at.replace("Z", "+00:00"))
            if datetime.now(pytz.utc) > expires_at:
                return None
        return model

    def create(
        self,
        role: str,
        code: Optional[str] = None,
        created_by: Optional[str] = None,
        expires_in_days: Optional[int] = None,
    ) -> Invitation:
        """Create an invitation code.

        Args:
            role: Target role for the invitation code ('instructor' or 'student').
            code: Explicit code. A random url-safe code is generated when omitted.
            created_by: Username of the creator.
            expires_in_days: Days until expiration (default: INVITATION_EXPIRE_DAYS).

        Returns:
            The created Invitation.

        Raises:
            InvalidArgumentError: If role is not invitable.
            DuplicateKeyError: If the code is already in use.
        """
        role = parse_choice(Role, role, "role")
        if role not in INVITABLE_ROLES:
            raise InvalidArgumentError(
                f"Invalid role: {role.value}. Must be 'instructor' or 'student'."
            )
        if code is None:
            code = secrets.token_urlsafe(16)
        elif self.db.get(InvitationCodeModel, code) is not None:
            raise DuplicateKeyError(f"Invitation code '{code}' already exists")

        now = datetime.now(pytz.utc)
        days = INVITATION_EXPIRE_DAYS if expires_in_days is None else expires_in_days
        model = InvitationCodeModel(
            code=code,
            role=role.value,
            created_by=created_by,
            created_at=now.isoformat(),
            expires_at=(now + timedelta(days=days)).isoformat(),
        )
        self.db.add(model)
        commit(self.db)
        logger.info("Generated invitation code for role: %s, created by: %s", role.value, created_by)
        return model_to_invitation(model)

    def exists(self, code: str) -> bool:
        """Return True if the code is live (present and not expired)."""
        return self._live_model(code) is not None

    def role_of(self, code: str) -> Role:
        """Return the role the code grants.

        Raises:
            NotFoundError: If the code is not live.
        """
        model = self._live_model(code)
        if model is None:
            raise NotFoundError("Invitation", code)
        return Role(model.role)

    def revoke(self, code: str) -> bool:
        """Delete a code. Safe to repeat.

        Returns:
            True if a code was deleted.
        """
        deleted = (
            self.db.query(InvitationCodeModel)
            .filter(InvitationCodeModel.code == code)
            .delete()
        )
        commit(self.db)
        if deleted:
            logger.info("Revoked invitation code")
        return bool(deleted)

    def list(self, role: Optional[str] = None) -> List[Invitation]:
        """List invitation codes, newest first."""
        query = self.db.query(InvitationCodeModel)
        if role:
            query = query.filter(
                InvitationCodeModel.role == parse_choice(Role, role, "role").value
            )
        models = query.order_by(InvitationCodeModel.created_at.desc()).all()
        return [model_to_invitation(m) for m in models]
