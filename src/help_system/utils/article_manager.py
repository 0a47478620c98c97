"""General help article catalogue.

This module stores and queries articles. It applies no access policy of its
own; callers pass the visibility clause built by the VisibilityResolver.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from help_system.core.database import commit
from help_system.core.exceptions import DuplicateKeyError, InvalidArgumentError, NotFoundError
from help_system.models.article import ArticleModel
from help_system.schemas.article import Article
from help_system.schemas.common import AccessLevel, Level, parse_choice
from help_system.utils.converters import model_to_article
from help_system.utils.identifiers import fresh_unique_id

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("title", "description", "body", "group_identifier", "keywords", "other", "links")


def keyword_clause(model, keyword: str) -> Optional[ColumnElement]:
    """Case-insensitive substring match on title, description or keywords.

    Returns None for an empty keyword, which matches everything.
    """
    if not keyword:
        return None
    return or_(
        model.title.icontains(keyword, autoescape=True),
        model.description.icontains(keyword, autoescape=True),
        model.keywords.icontains(keyword, autoescape=True),
    )


class ArticleManager:
    """Manages Article operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_model(self, article_id: int) -> ArticleModel:
        model = self.db.get(ArticleModel, article_id)
        if model is None:
            raise NotFoundError("Article", article_id)
        return model

    def create(
        self,
        title: str,
        description: Optional[str] = None,
        body: Optional[str] = None,
        level: str = Level.BEGINNER,
        group_identifier: Optional[str] = None,
        keywords: Optional[str] = None,
        access_level: str = AccessLevel.PUBLIC,
        other: Optional[str] = None,
        links: Optional[str] = None,
        unique_id: Optional[int] = None,
    ) -> Article:
        """Create an article.

        Titles are not unique; two calls with the same title make two rows.

        Args:
            title: Article title.
            description: Short description.
            body: Article text.
            level: One of beginner, intermediate, advanced, expert.
            group_identifier: Group the article is tagged with.
            keywords: Free text searched by substring.
            access_level: 'public' or 'restricted'.
            other: Free text.
            links: Free text.
            unique_id: Identity to keep, e.g. when restoring a backup. A fresh
                random one is drawn when omitted.

        Returns:
            The created Article.

        Raises:
            InvalidArgumentError: If level or access_level is invalid.
            DuplicateKeyError: If unique_id is already taken.
        """
        if not title or not title.strip():
            raise InvalidArgumentError("Article title cannot be empty.")
        level = parse_choice(Level, level, "level")
        access_level = parse_choice(AccessLevel, access_level, "access level")

        if unique_id is None:
            unique_id = fresh_unique_id(self.exists)
        elif self.exists(unique_id):
            raise DuplicateKeyError(f"Article unique ID {unique_id} already exists")

        model = ArticleModel(
            title=title,
            description=description,
            body=body,
            level=level.value,
            group_identifier=group_identifier,
            keywords=keywords,
            access_level=access_level.value,
            other=other,
            links=links,
            unique_id=unique_id,
        )
        self.db.add(model)
        commit(self.db)
        logger.info("Created article: %s (id=%s)", title, model.id)
        return model_to_article(model)

    def get(self, article_id: int) -> Article:
        return model_to_article(self._get_model(article_id))

    def update(self, article_id: int, **fields: Any) -> Article:
        """Update the given fields of an article. None values are ignored."""
        model = self._get_model(article_id)
        for name, value in fields.items():
            if value is None:
                continue
            if name == "title" and not value.strip():
                raise InvalidArgumentError("Article title cannot be empty.")
            if name == "level":
                value = parse_choice(Level, value, "level").value
            elif name == "access_level":
                value = parse_choice(AccessLevel, value, "access level").value
            elif name not in _TEXT_FIELDS:
                raise InvalidArgumentError(f"Unknown article field: {name}")
            setattr(model, name, value)
        commit(self.db)
        logger.info("Updated article %s", article_id)
        return model_to_article(model)

    def delete(self, article_id: int) -> bool:
        """Delete an article.

        Returns:
            False if no article had this id.
        """
        deleted = (
            self.db.query(ArticleModel).filter(ArticleModel.id == article_id).delete()
        )
        commit(self.db)
        if deleted:
            logger.info("Deleted article %s", article_id)
        return bool(deleted)

    def delete_all(self) -> int:
        deleted = self.db.query(ArticleModel).delete()
        commit(self.db)
        logger.info("Deleted all %d articles", deleted)
        return deleted

    def exists(self, unique_id: int) -> bool:
        return (
            self.db.query(ArticleModel.id)
            .filter(ArticleModel.unique_id == unique_id)
            .first()
            is not None
        )

    def exists_title(self, title: str) -> bool:
        return (
            self.db.query(ArticleModel.id).filter(ArticleModel.title == title).first()
            is not None
        )

    def has_any(self) -> bool:
        return self.db.query(ArticleModel.id).first() is not None

    def search(
        self,
        keyword: str = "",
        group: Optional[str] = None,
        level: Optional[str] = None,
        where: Optional[ColumnElement] = None,
    ) -> List[Article]:
        """Find articles in insertion order.

        Args:
            keyword: Substring matched against title, description and keywords.
                Empty matches every article.
            group: Only articles with this group identifier.
            level: Only articles of this level.
            where: Extra filter, typically a visibility clause.

        Returns:
            Matching articles, possibly empty.
        """
        query = self.db.query(ArticleModel)
        match = keyword_clause(ArticleModel, keyword)
        if match is not None:
            query = query.filter(match)
        if group is not None:
            query = query.filter(ArticleModel.group_identifier == group)
        if level is not None:
            query = query.filter(
                ArticleModel.level == parse_choice(Level, level, "level").value
            )
        if where is not None:
            query = query.filter(where)
        return [model_to_article(m) for m in query.order_by(ArticleModel.id).all()]

    def list_all(self) -> List[Article]:
        return self.search()

    def list_by_group(self, group: str) -> List[Article]:
        return self.search(group=group)
