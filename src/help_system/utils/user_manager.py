"""User management utilities.

This module provides user management functionality including user storage,
password hashing, role changes, and the one-time password reset workflow.
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

import bcrypt
import pytz
from sqlalchemy.orm import Session

from help_system.config import BCRYPT_ROUNDS, OTP_VALID_DAYS
from help_system.core.database import commit
from help_system.core.exceptions import DuplicateKeyError, NotFoundError
from help_system.models.user import UserModel
from help_system.schemas.common import Level, Role, parse_choice
from help_system.schemas.user import User
from help_system.utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def utc_today() -> date:
    return datetime.now(pytz.utc).date()


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        password_bytes = password.encode("utf-8")
        if len(password_bytes) > _BCRYPT_MAX_BYTES:
            logger.warning(
                "Password exceeds %d bytes (%d bytes), truncating",
                _BCRYPT_MAX_BYTES,
                len(password_bytes),
            )
            password_bytes = password_bytes[:_BCRYPT_MAX_BYTES]

        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        password_bytes = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def _get_model(self, username: str) -> UserModel:
        model = self.db.query(UserModel).filter(UserModel.username == username).first()
        if model is None:
            raise NotFoundError("User", username)
        return model

    def is_empty(self) -> bool:
        """Return True when no user has registered yet."""
        return self.db.query(UserModel.id).first() is None

    def register(
        self,
        username: str,
        password: str,
        role: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
        pref_name: Optional[str] = None,
        skill_level: Optional[str] = None,
    ) -> User:
        """Create a new user.

        Args:
            username: Username for the new user.
            password: Plain text password.
            role: User role ('admin', 'instructor', or 'student').
            email: Optional email address, unique when given.
            full_name: Optional full name.
            pref_name: Optional preferred name.
            skill_level: Optional skill level.

        Returns:
            Created User object.

        Raises:
            DuplicateKeyError: If username or email already exists.
            InvalidArgumentError: If role or skill level is invalid.
        """
        role = parse_choice(Role, role, "role")
        if skill_level is not None:
            skill_level = parse_choice(Level, skill_level, "skill level")

        if self.user_exists(username):
            raise DuplicateKeyError(f"User '{username}' already exists")

        user = User(
            username=username,
            password_hash=self.hash_password(password),
            role=role,
            email=email,
            full_name=full_name,
            pref_name=pref_name,
            one_time_password=False,
            skill_level=skill_level,
        )
        self.db.add(user_to_model(user))
        commit(self.db)
        logger.info("Created user: %s (role=%s)", username, role.value)
        return user

    def authenticate(self, username: str, password: str, role: str) -> bool:
        """Check that a user with this username, password and role exists.

        The result never says which of the three did not match.
        """
        role_value = role.value if isinstance(role, Role) else role
        model = (
            self.db.query(UserModel)
            .filter(UserModel.username == username, UserModel.role == role_value)
            .first()
        )
        if model is None:
            return False
        return self.verify_password(password, model.password_hash)

    def user_exists(self, username: str) -> bool:
        return (
            self.db.query(UserModel.id).filter(UserModel.username == username).first()
            is not None
        )

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username.

        Args:
            username: Username to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self.db.query(UserModel).filter(UserModel.username == username).first()
        if model:
            return model_to_user(model)
        return None

    def get_user(self, username: str) -> User:
        """Like get_user_by_username, but raises NotFoundError."""
        return model_to_user(self._get_model(username))

    def role_of_user(self, username: str) -> Role:
        return Role(self._get_model(username).role)

    def list_users(self) -> List[User]:
        """List all users in registration order."""
        models = self.db.query(UserModel).order_by(UserModel.id).all()
        return [model_to_user(m) for m in models]

    def change_role(self, username: str, new_role: str) -> User:
        """Assign a new system-wide role to a user."""
        new_role = parse_choice(Role, new_role, "role")
        model = self._get_model(username)
        model.role = new_role.value
        commit(self.db)
        logger.info("Changed role of %s to %s", username, new_role.value)
        return model_to_user(model)

    def update_profile(
        self,
        username: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
        pref_name: Optional[str] = None,
        skill_level: Optional[str] = None,
    ) -> User:
        """Update the optional profile fields that are given."""
        model = self._get_model(username)
        if skill_level is not None:
            model.skill_level = parse_choice(Level, skill_level, "skill level").value
        if email is not None:
            model.email = email
        if full_name is not None:
            model.full_name = full_name
        if pref_name is not None:
            model.pref_name = pref_name
        commit(self.db)
        return model_to_user(model)

    def delete_user(self, username: str) -> bool:
        """Delete a user.

        Returns:
            True if a user was deleted, False if none existed.
        """
        deleted = (
            self.db.query(UserModel).filter(UserModel.username == username).delete()
        )
        commit(self.db)
        if deleted:
            logger.info("Deleted user: %s", username)
        return bool(deleted)

    # --- One-time passwords ---

    def issue_otp(
        self, username: str, otp_secret: str, expiry: Optional[date] = None
    ) -> None:
        """Replace the user's password with a single-use one.

        Args:
            username: User being reset.
            otp_secret: The one-time password handed to the user.
            expiry: Last day the one-time password is accepted. Defaults to
                OTP_VALID_DAYS from today.
        """
        if expiry is None:
            expiry = utc_today() + timedelta(days=OTP_VALID_DAYS)
        model = self._get_model(username)
        model.password_hash = self.hash_password(otp_secret)
        model.password_expires = expiry
        model.one_time_password = True
        commit(self.db)
        logger.info("Issued one-time password for %s, expires %s", username, expiry)

    def validate_otp(self, username: str, secret: str) -> bool:
        """Return True iff the user holds an unused one-time password equal to secret."""
        model = (
            self.db.query(UserModel)
            .filter(UserModel.username == username, UserModel.one_time_password.is_(True))
            .first()
        )
        if model is None:
            return False
        return self.verify_password(secret, model.password_hash)

    def otp_expiry(self, username: str) -> Optional[date]:
        return self._get_model(username).password_expires

    def consume_otp(self, username: str, new_password: str) -> None:
        """Set a new password and retire the one-time password.

        The caller checks the expiry date before calling this.
        """
        model = self._get_model(username)
        model.password_hash = self.hash_password(new_password)
        model.one_time_password = False
        model.password_expires = None
        commit(self.db)
        logger.info("One-time password used by %s", username)
