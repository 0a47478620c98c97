"""Generic help questions asked by students."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from help_system.config import QUERY_GROUP_IDENTIFIER
from help_system.core.database import commit
from help_system.core.exceptions import InvalidArgumentError, NotFoundError
from help_system.models.student_query import StudentQueryModel
from help_system.schemas.common import AccessLevel, Level
from help_system.schemas.query import StudentQuery
from help_system.utils.article_manager import ArticleManager
from help_system.utils.converters import model_to_student_query

logger = logging.getLogger(__name__)

# Articles answering a question reuse the question as their title
_TITLE_MAX = 255


class QueryManager:
    """Manages student questions and their answers."""

    def __init__(self, db: Session, articles: ArticleManager):
        self.db = db
        self.articles = articles

    def ask(self, username: str, question: str) -> StudentQuery:
        if not question or not question.strip():
            raise InvalidArgumentError("Question cannot be empty.")
        model = StudentQueryModel(username=username, question=question, answered=False)
        self.db.add(model)
        commit(self.db)
        logger.info("Question %s asked by %s", model.id, username)
        return model_to_student_query(model)

    def get(self, query_id: int) -> StudentQuery:
        model = self.db.get(StudentQueryModel, query_id)
        if model is None:
            raise NotFoundError("StudentQuery", query_id)
        return model_to_student_query(model)

    def list_unanswered(self) -> List[StudentQuery]:
        models = (
            self.db.query(StudentQueryModel)
            .filter(StudentQueryModel.answered.is_(False))
            .order_by(StudentQueryModel.id)
            .all()
        )
        return [model_to_student_query(m) for m in models]

    def list_for_user(self, username: str) -> List[StudentQuery]:
        models = (
            self.db.query(StudentQueryModel)
            .filter(StudentQueryModel.username == username)
            .order_by(StudentQueryModel.id)
            .all()
        )
        return [model_to_student_query(m) for m in models]

    def answer(
        self, query_id: int, answer: str, level: Optional[str] = None
    ) -> StudentQuery:
        """Post the answer as a public query article and mark the question answered.

        Answering an already answered question posts another article; the
        flag stays true.
        """
        model = self.db.get(StudentQueryModel, query_id)
        if model is None:
            raise NotFoundError("StudentQuery", query_id)

        article = self.articles.create(
            title=model.question[:_TITLE_MAX],
            description=f"Answer to a question from {model.username}",
            body=answer,
            level=level or Level.BEGINNER,
            group_identifier=QUERY_GROUP_IDENTIFIER,
            keywords=model.question,
            access_level=AccessLevel.PUBLIC,
        )
        model.answered = True
        model.answer_article_id = article.id
        commit(self.db)
        logger.info("Question %s answered by article %s", query_id, article.id)
        return model_to_student_query(model)
