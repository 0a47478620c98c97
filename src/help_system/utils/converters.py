"""Conversions between ORM rows and schema records."""

from typing import Optional

from help_system.models.article import ArticleModel
from help_system.models.group_article import GroupArticleModel
from help_system.models.group_member import GroupMemberModel
from help_system.models.invitation_code import InvitationCodeModel
from help_system.models.student_query import StudentQueryModel
from help_system.models.user import UserModel
from help_system.schemas.article import Article, GroupArticle
from help_system.schemas.group import GroupMember
from help_system.schemas.query import StudentQuery
from help_system.schemas.user import Invitation, User


def model_to_user(model: UserModel) -> User:
    return User(
        username=model.username,
        password_hash=model.password_hash,
        role=model.role,
        email=model.email,
        full_name=model.full_name,
        pref_name=model.pref_name,
        one_time_password=bool(model.one_time_password),
        password_expires=model.password_expires,
        skill_level=model.skill_level,
    )


def user_to_model(user: User) -> UserModel:
    return UserModel(
        username=user.username,
        password_hash=user.password_hash,
        role=user.role.value,
        email=user.email,
        full_name=user.full_name,
        pref_name=user.pref_name,
        one_time_password=user.one_time_password,
        password_expires=user.password_expires,
        skill_level=user.skill_level.value if user.skill_level else None,
    )


def model_to_invitation(model: InvitationCodeModel) -> Invitation:
    return Invitation(
        code=model.code,
        role=model.role,
        created_by=model.created_by,
        created_at=model.created_at,
        expires_at=model.expires_at,
    )


def model_to_article(model: ArticleModel) -> Article:
    return Article(
        id=model.id,
        title=model.title,
        description=model.description,
        body=model.body,
        level=model.level,
        group_identifier=model.group_identifier,
        keywords=model.keywords,
        access_level=model.access_level,
        other=model.other,
        links=model.links,
        unique_id=model.unique_id,
    )


def model_to_group_article(
    model: GroupArticleModel, body: Optional[str] = None
) -> GroupArticle:
    """Convert a group article row.

    Args:
        model: The stored row.
        body: Plain text body to use instead of the stored (possibly wrapped) one.
    """
    return GroupArticle(
        id=model.id,
        title=model.title,
        author=model.author,
        description=model.description,
        body=model.body if body is None else body,
        group_identifier=model.group_identifier,
        keywords=model.keywords,
        other=model.other,
        links=model.links,
        unique_id=model.unique_id,
    )


def model_to_group_member(model: GroupMemberModel) -> GroupMember:
    return GroupMember(
        username=model.username,
        group_name=model.group_name,
        admin_rights=bool(model.admin_rights),
        viewing_rights=bool(model.viewing_rights),
        role=model.role,
    )


def model_to_student_query(model: StudentQueryModel) -> StudentQuery:
    return StudentQuery(
        id=model.id,
        username=model.username,
        question=model.question,
        answered=bool(model.answered),
        answer_article_id=model.answer_article_id,
    )
