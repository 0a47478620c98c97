from sqlalchemy import BigInteger, CheckConstraint, Column, Integer, String, Text
from .base import Base


class ArticleModel(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(String(500))
    body = Column(Text)
    level = Column(String(20), nullable=False)
    group_identifier = Column(String(100), index=True)
    keywords = Column(String(500))
    access_level = Column(String(20), nullable=False, default="public")
    other = Column(String(500))
    links = Column(String(500))
    unique_id = Column(BigInteger, unique=True, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(
            "level IN ('beginner', 'intermediate', 'advanced', 'expert')",
            name="ck_articles_level",
        ),
        CheckConstraint(
            "access_level IN ('public', 'restricted')",
            name="ck_articles_access_level",
        ),
    )
