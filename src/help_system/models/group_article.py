from sqlalchemy import BigInteger, Column, Integer, String, Text
from .base import Base


class GroupArticleModel(Base):
    __tablename__ = "group_articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255))
    description = Column(String(500))
    body = Column(Text)  # base64 ciphertext when a codec is configured
    group_identifier = Column(String(100), nullable=False, index=True)
    keywords = Column(String(500))
    other = Column(String(500))
    links = Column(String(500))
    unique_id = Column(BigInteger, unique=True, nullable=False, index=True)
