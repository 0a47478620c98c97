from sqlalchemy import Boolean, Column, Integer, String, Text
from .base import Base


class StudentQueryModel(Base):
    __tablename__ = "student_queries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, index=True)
    question = Column(Text, nullable=False)
    answered = Column(Boolean, nullable=False, default=False)
    answer_article_id = Column(Integer, nullable=True)
