"""Student question routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from help_system.api.routes.auth import get_current_user
from help_system.core.dependencies import HelpServiceDep
from help_system.schemas.common import Level
from help_system.schemas.query import AnswerRequest, AskRequest, StudentQuery
from help_system.schemas.user import User

router = APIRouter(prefix="/api/queries", tags=["Query"])


@router.post("", response_model=StudentQuery, summary="Ask a question")
def ask(
    req: AskRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> StudentQuery:
    return service.ask(current_user, req.question)


@router.get("/mine", response_model=List[StudentQuery], summary="Own questions")
def my_questions(
    service: HelpServiceDep, current_user: User = Depends(get_current_user)
) -> List[StudentQuery]:
    return service.my_questions(current_user)


@router.get("/unanswered", response_model=List[StudentQuery], summary="Unanswered questions")
def unanswered(
    service: HelpServiceDep, current_user: User = Depends(get_current_user)
) -> List[StudentQuery]:
    return service.unanswered_questions(current_user)


@router.post("/{query_id}/answer", response_model=StudentQuery, summary="Answer a question")
def answer(
    query_id: int,
    req: AnswerRequest,
    service: HelpServiceDep,
    level: Optional[Level] = None,
    current_user: User = Depends(get_current_user),
) -> StudentQuery:
    return service.answer_question(current_user, query_id, req.answer, level=level)
