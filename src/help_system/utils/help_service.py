"""Caller-scoped entry points of the help system.

Every operation takes the authenticated caller (a ``User``) where access
matters, checks it against the VisibilityResolver or the caller's role, and
then calls the managers. Results are records; failures are HelpSystemError
subclasses.
"""

import io
import logging
import secrets
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from help_system.core.exceptions import (
    AuthFailedError,
    InvalidArgumentError,
    NotFoundError,
    OTPExpiredError,
    OTPInvalidError,
    PermissionDeniedError,
)
from help_system.schemas.article import (
    Article,
    ArticleCreate,
    ArticleUpdate,
    GroupArticle,
    GroupArticleCreate,
)
from help_system.schemas.backup import RestoreReport
from help_system.schemas.common import Role
from help_system.schemas.group import GroupMember
from help_system.schemas.query import StudentQuery
from help_system.schemas.user import Invitation, User
from help_system.utils import backup_codec
from help_system.utils.article_manager import ArticleManager
from help_system.utils.backup_codec import BackupCodec
from help_system.utils.codec import Codec
from help_system.utils.group_article_manager import GroupArticleManager
from help_system.utils.group_manager import GroupManager
from help_system.utils.invitation_manager import InvitationManager
from help_system.utils.query_manager import QueryManager
from help_system.utils.user_manager import UserManager, utc_today
from help_system.utils.visibility import AUTHOR_ROLES, VisibilityResolver

logger = logging.getLogger(__name__)


def require_role(caller: User, *roles: Role) -> None:
    if caller.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise PermissionDeniedError(
            f"User '{caller.username}' needs one of the roles: {allowed}"
        )


class HelpService:
    """Facade over users, invitations, groups, articles, questions and backups."""

    def __init__(self, db: Session, codec: Optional[Codec] = None):
        self.db = db
        self.users = UserManager(db)
        self.invitations = InvitationManager(db)
        self.groups = GroupManager(db)
        self.articles = ArticleManager(db)
        self.group_articles = GroupArticleManager(db, codec=codec)
        self.queries = QueryManager(db, self.articles)
        self.visibility = VisibilityResolver(self.groups, self.articles, self.group_articles)
        self.backups = BackupCodec(self.articles, self.group_articles)

    # --- Authentication and registration ---

    def login(self, username: str, password: str, role: str) -> User:
        """Authenticate and return the user.

        Raises:
            AuthFailedError: If username, password and role do not all match.
        """
        if not self.users.authenticate(username, password, role):
            raise AuthFailedError()
        return self.users.get_user(username)

    def register_first_admin(self, username: str, password: str, **profile) -> User:
        """Register the administrator of an empty system."""
        if not self.users.is_empty():
            raise PermissionDeniedError("The system already has users")
        return self.users.register(username, password, Role.ADMIN, **profile)

    def redeem_invitation(
        self, code: str, username: str, password: str, **profile
    ) -> User:
        """Register a user with the role an invitation code grants.

        The code is revoked once the user exists.

        Raises:
            NotFoundError: If the code is not live.
            DuplicateKeyError: If the username is taken; the code stays live.
        """
        if not self.invitations.exists(code):
            raise NotFoundError("Invitation", code)
        role = self.invitations.role_of(code)
        user = self.users.register(username, password, role, **profile)
        self.invitations.revoke(code)
        return user

    def register(
        self,
        username: str,
        password: str,
        invitation_code: Optional[str] = None,
        **profile,
    ) -> User:
        """Register through an invitation, or as admin while the system is empty."""
        if self.users.is_empty():
            return self.register_first_admin(username, password, **profile)
        if not invitation_code:
            raise InvalidArgumentError("An invitation code is required to register.")
        return self.redeem_invitation(invitation_code, username, password, **profile)

    def reset_password(
        self,
        username: str,
        one_time_password: str,
        new_password: str,
        today: Optional[date] = None,
    ) -> User:
        """Replace a one-time password with a new password.

        Raises:
            OTPInvalidError: If the one-time password does not match or was used.
            OTPExpiredError: If its expiry date is before today.
        """
        if not self.users.validate_otp(username, one_time_password):
            raise OTPInvalidError()
        expiry = self.users.otp_expiry(username)
        if expiry is not None and expiry < (today or utc_today()):
            raise OTPExpiredError(username)
        self.users.consume_otp(username, new_password)
        return self.users.get_user(username)

    # --- Administration ---

    def list_users(self, caller: User) -> List[User]:
        require_role(caller, Role.ADMIN)
        return self.users.list_users()

    def change_role(self, caller: User, username: str, new_role: str) -> User:
        require_role(caller, Role.ADMIN)
        return self.users.change_role(username, new_role)

    def delete_user(self, caller: User, username: str) -> bool:
        """Delete a user and their group memberships."""
        require_role(caller, Role.ADMIN)
        if username == caller.username:
            raise InvalidArgumentError("Administrators cannot delete themselves.")
        self.groups.remove_user(username)
        return self.users.delete_user(username)

    def issue_otp(
        self,
        caller: User,
        username: str,
        secret: Optional[str] = None,
        expiry: Optional[date] = None,
    ) -> str:
        """Give a user a one-time password and return it."""
        require_role(caller, Role.ADMIN)
        if secret is None:
            secret = secrets.token_urlsafe(8)
        self.users.issue_otp(username, secret, expiry)
        return secret

    def create_invitation(
        self,
        caller: User,
        role: str,
        code: Optional[str] = None,
        expires_in_days: Optional[int] = None,
    ) -> Invitation:
        require_role(caller, Role.ADMIN)
        return self.invitations.create(
            role, code=code, created_by=caller.username, expires_in_days=expires_in_days
        )

    def list_invitations(self, caller: User) -> List[Invitation]:
        require_role(caller, Role.ADMIN)
        return self.invitations.list()

    def revoke_invitation(self, caller: User, code: str) -> bool:
        require_role(caller, Role.ADMIN)
        return self.invitations.revoke(code)

    def update_profile(self, caller: User, **fields) -> User:
        return self.users.update_profile(caller.username, **fields)

    # --- Articles ---

    def search_articles(
        self,
        caller: User,
        keyword: str = "",
        group: Optional[str] = None,
        level: Optional[str] = None,
    ) -> List[Article]:
        return self.visibility.visible_articles(caller, keyword, group=group, level=level)

    def get_article(self, caller: User, article_id: int) -> Article:
        return self.visibility.read_article(caller, article_id)

    def create_article(self, caller: User, req: ArticleCreate) -> Article:
        self.visibility.require_article_write(caller, req)
        return self.articles.create(**req.model_dump())

    def update_article(self, caller: User, article_id: int, req: ArticleUpdate) -> Article:
        current = self.articles.get(article_id)
        self.visibility.require_article_write(caller, current)
        changes = req.model_dump(exclude_none=True)
        # The article as it would be after the change must stay writable
        self.visibility.require_article_write(caller, current.model_copy(update=changes))
        return self.articles.update(article_id, **changes)

    def delete_article(self, caller: User, article_id: int) -> bool:
        """Delete an article; False if the id does not exist."""
        require_role(caller, *AUTHOR_ROLES)
        try:
            current = self.articles.get(article_id)
        except NotFoundError:
            return False
        self.visibility.require_article_write(caller, current)
        return self.articles.delete(article_id)

    # --- Groups ---

    def create_group(self, caller: User, group: str) -> GroupMember:
        """Found a group with the caller as its first instructor."""
        require_role(caller, *AUTHOR_ROLES)
        return self.groups.add_first_instructor(caller.username, group)

    def add_group_member(
        self, caller: User, group: str, username: str, role: str
    ) -> GroupMember:
        self.visibility.require_membership_manager(caller, group)
        if not self.users.user_exists(username):
            raise NotFoundError("User", username)
        return self.groups.add_member(username, group, role)

    def grant_group_rights(
        self, caller: User, group: str, username: str, capability: str
    ) -> GroupMember:
        self.visibility.require_membership_manager(caller, group)
        return self.groups.grant(username, group, capability)

    def list_group_members(self, caller: User, group: str) -> List[GroupMember]:
        self.visibility.require_group_viewer(caller, group)
        return self.groups.list_members(group)

    def my_groups(self, caller: User) -> List[str]:
        return self.groups.groups_for(caller.username)

    # --- Group articles ---

    def create_group_article(
        self, caller: User, group: str, req: GroupArticleCreate
    ) -> GroupArticle:
        self.visibility.require_group_admin(caller, group)
        return self.group_articles.create(group, author=caller.username, **req.model_dump())

    def search_group_articles(
        self,
        caller: User,
        group: str,
        keyword: str = "",
        author: Optional[str] = None,
    ) -> List[GroupArticle]:
        return self.visibility.visible_group_articles(caller, group, keyword, author=author)

    def get_group_article(self, caller: User, article_id: int) -> GroupArticle:
        return self.visibility.read_group_article(caller, article_id)

    def update_group_article_body(
        self, caller: User, article_id: int, body: str
    ) -> GroupArticle:
        self.visibility.require_group_article_write(caller, article_id)
        return self.group_articles.update_body(article_id, body)

    def delete_group_article(self, caller: User, article_id: int) -> bool:
        try:
            self.visibility.require_group_article_write(caller, article_id)
        except NotFoundError:
            return False
        return self.group_articles.delete(article_id)

    # --- Student questions ---

    def ask(self, caller: User, question: str) -> StudentQuery:
        require_role(caller, Role.STUDENT)
        return self.queries.ask(caller.username, question)

    def my_questions(self, caller: User) -> List[StudentQuery]:
        return self.queries.list_for_user(caller.username)

    def unanswered_questions(self, caller: User) -> List[StudentQuery]:
        require_role(caller, *AUTHOR_ROLES)
        return self.queries.list_unanswered()

    def answer_question(
        self, caller: User, query_id: int, answer: str, level: Optional[str] = None
    ) -> StudentQuery:
        require_role(caller, *AUTHOR_ROLES)
        return self.queries.answer(query_id, answer, level=level)

    # --- Backup ---

    def export_articles(self, caller: User, group: Optional[str] = None) -> str:
        self.visibility.require_catalogue_backup(caller)
        buffer = io.StringIO()
        self.backups.export_articles(buffer, group=group)
        return buffer.getvalue()

    def backup_articles(
        self, caller: User, path: Union[str, Path], group: Optional[str] = None
    ) -> int:
        self.visibility.require_catalogue_backup(caller)
        return backup_codec.backup_to_file(self.backups, path, group=group)

    def restore_articles(self, caller: User, content: str, mode: str) -> RestoreReport:
        """Restore from the text of a backup file."""
        self.visibility.require_catalogue_backup(caller)
        return self.backups.restore_articles(io.StringIO(content), mode)

    def restore_articles_from_file(
        self, caller: User, path: Union[str, Path], mode: str
    ) -> RestoreReport:
        self.visibility.require_catalogue_backup(caller)
        return backup_codec.restore_from_file(self.backups, path, mode)

    def export_group_articles(self, caller: User, group: str) -> str:
        self.visibility.require_group_viewer(caller, group)
        buffer = io.StringIO()
        self.backups.export_group_articles(buffer, group)
        return buffer.getvalue()

    def backup_group_articles(self, caller: User, path: Union[str, Path], group: str) -> int:
        self.visibility.require_group_viewer(caller, group)
        return backup_codec.backup_group_to_file(self.backups, path, group)

    def restore_group_articles(
        self, caller: User, group: str, content: str, mode: str
    ) -> RestoreReport:
        self.visibility.require_group_admin(caller, group)
        return self.backups.restore_group_articles(io.StringIO(content), group, mode)

    def restore_group_articles_from_file(
        self, caller: User, path: Union[str, Path], group: str, mode: str
    ) -> RestoreReport:
        self.visibility.require_group_admin(caller, group)
        return backup_codec.restore_group_from_file(self.backups, path, group, mode)
