"""Article and group article schema definitions."""

from typing import Optional

from pydantic import BaseModel, Field

from help_system.schemas.common import AccessLevel, Level


class Article(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    body: Optional[str] = None
    level: Level
    group_identifier: Optional[str] = None
    keywords: Optional[str] = None
    access_level: AccessLevel = AccessLevel.PUBLIC
    other: Optional[str] = None
    links: Optional[str] = None
    unique_id: int = Field(description="64-bit identity kept across backup and restore.")


class ArticleCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    body: Optional[str] = None
    level: Level = Level.BEGINNER
    group_identifier: Optional[str] = None
    keywords: Optional[str] = None
    access_level: AccessLevel = AccessLevel.PUBLIC
    other: Optional[str] = None
    links: Optional[str] = None


class ArticleUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    body: Optional[str] = None
    level: Optional[Level] = None
    group_identifier: Optional[str] = None
    keywords: Optional[str] = None
    access_level: Optional[AccessLevel] = None
    other: Optional[str] = None
    links: Optional[str] = None


class GroupArticle(BaseModel):
    """Article that lives only inside one group.

    ``body`` is plain text in records returned to callers; the stored row may
    hold a wrapped version.
    """

    id: int
    title: str
    author: Optional[str] = None
    description: Optional[str] = None
    body: Optional[str] = None
    group_identifier: str
    keywords: Optional[str] = None
    other: Optional[str] = None
    links: Optional[str] = None
    unique_id: int


class GroupArticleCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    body: Optional[str] = None
    keywords: Optional[str] = None
    other: Optional[str] = None
    links: Optional[str] = None


class UpdateBodyRequest(BaseModel):
    body: str
