"""Backup and restore routes.

Exports are returned as the text of a backup file; restores take that text
in a JSON body.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from help_system.api.routes.auth import get_current_user
from help_system.core.dependencies import HelpServiceDep
from help_system.schemas.backup import RestoreReport, RestoreRequest
from help_system.schemas.user import User

router = APIRouter(prefix="/api/backup", tags=["Backup"])


@router.get("/articles", response_class=PlainTextResponse, summary="Export articles")
def export_articles(
    service: HelpServiceDep,
    group: Optional[str] = None,
    current_user: User = Depends(get_current_user),
) -> str:
    return service.export_articles(current_user, group=group)


@router.post("/articles/restore", response_model=RestoreReport, summary="Restore articles")
def restore_articles(
    req: RestoreRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> RestoreReport:
    return service.restore_articles(current_user, req.content, req.mode)


@router.get("/groups/{group}", response_class=PlainTextResponse, summary="Export group articles")
def export_group_articles(
    group: str,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> str:
    return service.export_group_articles(current_user, group)


@router.post("/groups/{group}/restore", response_model=RestoreReport, summary="Restore group articles")
def restore_group_articles(
    group: str,
    req: RestoreRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> RestoreReport:
    return service.restore_group_articles(current_user, group, req.content, req.mode)
