from .base import Base
from .user import UserModel
from .invitation_code import InvitationCodeModel
from .article import ArticleModel
from .group_member import GroupMemberModel
from .group_article import GroupArticleModel
from .student_query import StudentQueryModel

__all__ = [
    "Base",
    "UserModel",
    "InvitationCodeModel",
    "ArticleModel",
    "GroupMemberModel",
    "GroupArticleModel",
    "StudentQueryModel",
]
