from typing import Optional

from pydantic import BaseModel, Field


class StudentQuery(BaseModel):
    id: int
    username: str
    question: str
    answered: bool = False
    answer_article_id: Optional[int] = None


class AskRequest(BaseModel):
    question: str = Field(min_length=1)


class AnswerRequest(BaseModel):
    answer: str = Field(min_length=1)
