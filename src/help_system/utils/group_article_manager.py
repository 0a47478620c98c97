"""Articles that exist only inside one special access group.

Bodies are wrapped by the configured codec before they are stored and
unwrapped on the way out. Without a codec they are stored as given.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from help_system.core.database import commit
from help_system.core.exceptions import (
    CodecFailureError,
    DuplicateKeyError,
    InvalidArgumentError,
    NotFoundError,
)
from help_system.models.group_article import GroupArticleModel
from help_system.schemas.article import GroupArticle
from help_system.utils.article_manager import keyword_clause
from help_system.utils.codec import Codec, iv_from_unique_id
from help_system.utils.converters import model_to_group_article
from help_system.utils.identifiers import fresh_unique_id

logger = logging.getLogger(__name__)


class GroupArticleManager:
    """Manages GroupArticle operations."""

    def __init__(self, db: Session, codec: Optional[Codec] = None):
        self.db = db
        self.codec = codec

    def _wrap(self, body: Optional[str], unique_id: int) -> Optional[str]:
        if body is None or self.codec is None:
            return body
        return self.codec.wrap(body, iv_from_unique_id(unique_id))

    def _unwrap(self, body: Optional[str], unique_id: int) -> Optional[str]:
        if body is None or self.codec is None:
            return body
        return self.codec.unwrap(body, iv_from_unique_id(unique_id))

    def body_is_readable(self, stored_body: Optional[str], unique_id: int) -> bool:
        """Return False if a stored body does not unwrap under unique_id."""
        try:
            self._unwrap(stored_body, unique_id)
        except CodecFailureError:
            return False
        return True

    def _to_schema(self, model: GroupArticleModel) -> GroupArticle:
        return model_to_group_article(model, body=self._unwrap(model.body, model.unique_id))

    def _get_model(self, article_id: int) -> GroupArticleModel:
        model = self.db.get(GroupArticleModel, article_id)
        if model is None:
            raise NotFoundError("GroupArticle", article_id)
        return model

    def create(
        self,
        group: str,
        title: str,
        author: Optional[str] = None,
        description: Optional[str] = None,
        body: Optional[str] = None,
        keywords: Optional[str] = None,
        other: Optional[str] = None,
        links: Optional[str] = None,
        unique_id: Optional[int] = None,
        body_is_stored_form: bool = False,
    ) -> GroupArticle:
        """Create a group article.

        Args:
            group: Group the article belongs to.
            title: Article title.
            author: Username of the author.
            description: Short description.
            body: Plain text body, or the stored (wrapped) form when
                body_is_stored_form is set.
            keywords: Free text searched by substring.
            other: Free text.
            links: Free text.
            unique_id: Identity to keep; drawn at random when omitted.
            body_is_stored_form: Store body as-is, as read from a backup.

        Returns:
            The created GroupArticle with a plain text body.

        Raises:
            DuplicateKeyError: If unique_id is already taken.
            CodecFailureError: If the body cannot be wrapped or unwrapped.
        """
        if not group:
            raise InvalidArgumentError("Group identifier cannot be empty.")
        if not title:
            raise InvalidArgumentError("Article title cannot be empty.")

        if unique_id is None:
            unique_id = fresh_unique_id(self.exists)
        elif self.exists(unique_id):
            raise DuplicateKeyError(f"Group article unique ID {unique_id} already exists")
        if body_is_stored_form and not self.body_is_readable(body, unique_id):
            raise CodecFailureError(f"Stored body of group article {unique_id} does not unwrap")

        model = GroupArticleModel(
            title=title,
            author=author,
            description=description,
            body=body if body_is_stored_form else self._wrap(body, unique_id),
            group_identifier=group,
            keywords=keywords,
            other=other,
            links=links,
            unique_id=unique_id,
        )
        self.db.add(model)
        commit(self.db)
        logger.info("Created group article: %s (id=%s, group=%s)", title, model.id, group)
        return self._to_schema(model)

    def get(self, article_id: int) -> GroupArticle:
        return self._to_schema(self._get_model(article_id))

    def group_of(self, article_id: int) -> str:
        return self._get_model(article_id).group_identifier

    def search(
        self, group: str, keyword: str = "", author: Optional[str] = None
    ) -> List[GroupArticle]:
        """Find articles of one group in insertion order."""
        query = self.db.query(GroupArticleModel).filter(
            GroupArticleModel.group_identifier == group
        )
        match = keyword_clause(GroupArticleModel, keyword)
        if match is not None:
            query = query.filter(match)
        if author is not None:
            query = query.filter(GroupArticleModel.author == author)
        return [self._to_schema(m) for m in query.order_by(GroupArticleModel.id).all()]

    def list(self, group: str) -> List[GroupArticle]:
        return self.search(group)

    def list_by_author(self, author: str, group: str) -> List[GroupArticle]:
        return self.search(group, author=author)

    def list_stored(self, group: str) -> List[GroupArticle]:
        """Rows of a group exactly as stored, bodies still wrapped."""
        models = (
            self.db.query(GroupArticleModel)
            .filter(GroupArticleModel.group_identifier == group)
            .order_by(GroupArticleModel.id)
            .all()
        )
        return [model_to_group_article(m) for m in models]

    def update_body(self, article_id: int, body: str) -> GroupArticle:
        model = self._get_model(article_id)
        model.body = self._wrap(body, model.unique_id)
        commit(self.db)
        logger.info("Updated body of group article %s", article_id)
        return self._to_schema(model)

    def delete(self, article_id: int) -> bool:
        deleted = (
            self.db.query(GroupArticleModel)
            .filter(GroupArticleModel.id == article_id)
            .delete()
        )
        commit(self.db)
        if deleted:
            logger.info("Deleted group article %s", article_id)
        return bool(deleted)

    def delete_group(self, group: str) -> int:
        deleted = (
            self.db.query(GroupArticleModel)
            .filter(GroupArticleModel.group_identifier == group)
            .delete()
        )
        commit(self.db)
        logger.info("Deleted %d articles of group %s", deleted, group)
        return deleted

    def exists(self, unique_id: int) -> bool:
        return (
            self.db.query(GroupArticleModel.id)
            .filter(GroupArticleModel.unique_id == unique_id)
            .first()
            is not None
        )

    def has_any(self, group: str) -> bool:
        return (
            self.db.query(GroupArticleModel.id)
            .filter(GroupArticleModel.group_identifier == group)
            .first()
            is not None
        )
