"""Article visibility and mutation policy.

Rules, for every caller role:

* public articles are readable by everyone;
* a restricted article tagged with group G is readable by holders of viewing
  rights in G;
* articles are created, changed and deleted by instructors and admins, and a
  restricted article additionally needs viewing rights in its group;
* memberships of G are managed by system administrators and by holders of
  admin rights in G;
* group articles of G are readable with viewing rights in G and mutable with
  admin rights in G;
* backups of the article catalogue are taken and restored by system
  administrators only; backups of a group's articles need viewing rights
  (export) or admin rights (restore) in that group.

Granting a right never shrinks what a caller can see.
"""

import logging
from typing import List, Optional, Union

from sqlalchemy import and_, false, or_
from sqlalchemy.sql.elements import ColumnElement

from help_system.core.exceptions import PermissionDeniedError
from help_system.models.article import ArticleModel
from help_system.schemas.article import Article, ArticleCreate, GroupArticle
from help_system.schemas.common import AccessLevel, Role
from help_system.schemas.user import User
from help_system.utils.article_manager import ArticleManager
from help_system.utils.group_article_manager import GroupArticleManager
from help_system.utils.group_manager import GroupManager

logger = logging.getLogger(__name__)

AUTHOR_ROLES = (Role.ADMIN, Role.INSTRUCTOR)


class VisibilityResolver:
    """Decides what a caller may observe or change."""

    def __init__(
        self,
        groups: GroupManager,
        articles: ArticleManager,
        group_articles: GroupArticleManager,
    ):
        self.groups = groups
        self.articles = articles
        self.group_articles = group_articles

    # --- Articles ---

    def article_clause(self, caller: User) -> ColumnElement:
        """SQL filter selecting the articles the caller may read."""
        viewable = self.groups.viewable_groups(caller.username)
        restricted = (
            and_(
                ArticleModel.access_level == AccessLevel.RESTRICTED.value,
                ArticleModel.group_identifier.in_(viewable),
            )
            if viewable
            else false()
        )
        return or_(ArticleModel.access_level == AccessLevel.PUBLIC.value, restricted)

    def can_read_article(self, caller: User, article: Article) -> bool:
        if article.access_level == AccessLevel.PUBLIC:
            return True
        return self.groups.has_viewing_rights(caller.username, article.group_identifier)

    def can_write_article(
        self, caller: User, article: Union[Article, ArticleCreate]
    ) -> bool:
        if caller.role not in AUTHOR_ROLES:
            return False
        if article.access_level == AccessLevel.RESTRICTED:
            return self.groups.has_viewing_rights(caller.username, article.group_identifier)
        return True

    def require_article_write(
        self, caller: User, article: Union[Article, ArticleCreate]
    ) -> None:
        if not self.can_write_article(caller, article):
            logger.info("Denied article change by %s", caller.username)
            raise PermissionDeniedError(
                f"User '{caller.username}' may not change this article"
            )

    def visible_articles(
        self,
        caller: User,
        keyword: str = "",
        group: Optional[str] = None,
        level: Optional[str] = None,
    ) -> List[Article]:
        """Search the catalogue, keeping only what the caller may read."""
        return self.articles.search(
            keyword, group=group, level=level, where=self.article_clause(caller)
        )

    def read_article(self, caller: User, article_id: int) -> Article:
        """Fetch one article.

        Raises:
            NotFoundError: If the id does not exist.
            PermissionDeniedError: If the caller may not read it.
        """
        article = self.articles.get(article_id)
        if not self.can_read_article(caller, article):
            raise PermissionDeniedError(
                f"User '{caller.username}' may not read article {article_id}"
            )
        return article

    # --- Group articles ---

    def require_group_viewer(self, caller: User, group: str) -> None:
        if not self.groups.has_viewing_rights(caller.username, group):
            raise PermissionDeniedError(
                f"User '{caller.username}' has no viewing rights in group '{group}'"
            )

    def require_group_admin(self, caller: User, group: str) -> None:
        if not self.groups.has_admin_rights(caller.username, group):
            raise PermissionDeniedError(
                f"User '{caller.username}' has no admin rights in group '{group}'"
            )

    def require_membership_manager(self, caller: User, group: str) -> None:
        """System administrators manage every group; others need admin rights in it."""
        if caller.role is Role.ADMIN:
            return
        self.require_group_admin(caller, group)

    def visible_group_articles(
        self, caller: User, group: str, keyword: str = "", author: Optional[str] = None
    ) -> List[GroupArticle]:
        self.require_group_viewer(caller, group)
        return self.group_articles.search(group, keyword, author=author)

    def read_group_article(self, caller: User, article_id: int) -> GroupArticle:
        group = self.group_articles.group_of(article_id)
        self.require_group_viewer(caller, group)
        return self.group_articles.get(article_id)

    def require_group_article_write(self, caller: User, article_id: int) -> str:
        """Check admin rights over the article's group and return the group."""
        group = self.group_articles.group_of(article_id)
        self.require_group_admin(caller, group)
        return group

    # --- Backup ---

    def require_catalogue_backup(self, caller: User) -> None:
        """Only system administrators export or restore the whole catalogue."""
        if caller.role is not Role.ADMIN:
            raise PermissionDeniedError(
                f"User '{caller.username}' may not back up or restore articles"
            )
