"""Help article routes. Results depend on who is asking."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from help_system.api.routes.auth import get_current_user
from help_system.core.dependencies import HelpServiceDep
from help_system.schemas.article import Article, ArticleCreate, ArticleUpdate
from help_system.schemas.common import Level
from help_system.schemas.user import User

router = APIRouter(prefix="/api/articles", tags=["Article"])


@router.get("", response_model=List[Article], summary="Search articles")
def search_articles(
    service: HelpServiceDep,
    keyword: str = "",
    group: Optional[str] = None,
    level: Optional[Level] = None,
    current_user: User = Depends(get_current_user),
) -> List[Article]:
    return service.search_articles(current_user, keyword, group=group, level=level)


@router.get("/{article_id}", response_model=Article, summary="Read an article")
def get_article(
    article_id: int,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> Article:
    return service.get_article(current_user, article_id)


@router.post("", response_model=Article, summary="Create an article")
def create_article(
    req: ArticleCreate,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> Article:
    return service.create_article(current_user, req)


@router.patch("/{article_id}", response_model=Article, summary="Update an article")
def update_article(
    article_id: int,
    req: ArticleUpdate,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> Article:
    return service.update_article(current_user, article_id, req)


@router.delete("/{article_id}", summary="Delete an article")
def delete_article(
    article_id: int,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    return {"deleted": service.delete_article(current_user, article_id)}
