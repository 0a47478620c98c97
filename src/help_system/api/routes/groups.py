"""Special access group routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from help_system.api.routes.auth import get_current_user
from help_system.core.dependencies import HelpServiceDep
from help_system.schemas.article import GroupArticle, GroupArticleCreate, UpdateBodyRequest
from help_system.schemas.group import (
    AddMemberRequest,
    CreateGroupRequest,
    GrantRightsRequest,
    GroupMember,
)
from help_system.schemas.user import User

router = APIRouter(prefix="/api/groups", tags=["Group"])
article_router = APIRouter(prefix="/api/group-articles", tags=["Group"])


@router.get("", response_model=List[str], summary="Groups of the current user")
def my_groups(
    service: HelpServiceDep, current_user: User = Depends(get_current_user)
) -> List[str]:
    return service.my_groups(current_user)


@router.post("", response_model=GroupMember, summary="Create a group")
def create_group(
    req: CreateGroupRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> GroupMember:
    return service.create_group(current_user, req.group_name)


@router.get("/{group}/members", response_model=List[GroupMember], summary="List members")
def list_members(
    group: str,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> List[GroupMember]:
    return service.list_group_members(current_user, group)


@router.post("/{group}/members", response_model=GroupMember, summary="Add a member")
def add_member(
    group: str,
    req: AddMemberRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> GroupMember:
    return service.add_group_member(current_user, group, req.username, req.role)


@router.post("/{group}/rights", response_model=GroupMember, summary="Grant rights")
def grant_rights(
    group: str,
    req: GrantRightsRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> GroupMember:
    return service.grant_group_rights(current_user, group, req.username, req.capability)


@router.get("/{group}/articles", response_model=List[GroupArticle], summary="Search group articles")
def search_group_articles(
    group: str,
    service: HelpServiceDep,
    keyword: str = "",
    author: Optional[str] = None,
    current_user: User = Depends(get_current_user),
) -> List[GroupArticle]:
    return service.search_group_articles(current_user, group, keyword, author=author)


@router.post("/{group}/articles", response_model=GroupArticle, summary="Create a group article")
def create_group_article(
    group: str,
    req: GroupArticleCreate,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> GroupArticle:
    return service.create_group_article(current_user, group, req)


@article_router.get("/{article_id}", response_model=GroupArticle, summary="Read a group article")
def get_group_article(
    article_id: int,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> GroupArticle:
    return service.get_group_article(current_user, article_id)


@article_router.put("/{article_id}/body", response_model=GroupArticle, summary="Replace the body")
def update_group_article_body(
    article_id: int,
    req: UpdateBodyRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> GroupArticle:
    return service.update_group_article_body(current_user, article_id, req.body)


@article_router.delete("/{article_id}", summary="Delete a group article")
def delete_group_article(
    article_id: int,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    return {"deleted": service.delete_group_article(current_user, article_id)}
