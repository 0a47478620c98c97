"""User and invitation administration routes."""

from typing import List

from fastapi import APIRouter, Depends

from help_system.api.routes.auth import get_current_user
from help_system.core.dependencies import HelpServiceDep
from help_system.schemas.user import (
    ChangeRoleRequest,
    GenerateInvitationCodeRequest,
    Invitation,
    IssueOTPRequest,
    User,
    UserInfo,
)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/users", response_model=List[UserInfo], summary="List users")
def list_users(
    service: HelpServiceDep, current_user: User = Depends(get_current_user)
) -> List[UserInfo]:
    return [UserInfo.from_user(u) for u in service.list_users(current_user)]


@router.put("/users/{username}/role", response_model=UserInfo, summary="Change a user's role")
def change_role(
    username: str,
    req: ChangeRoleRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> UserInfo:
    return UserInfo.from_user(service.change_role(current_user, username, req.role))


@router.delete("/users/{username}", summary="Delete a user")
def delete_user(
    username: str,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    return {"deleted": service.delete_user(current_user, username)}


@router.post("/users/{username}/otp", summary="Issue a one-time password")
def issue_otp(
    username: str,
    req: IssueOTPRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    service.issue_otp(current_user, username, req.secret, req.expires_on)
    return {"success": True, "expires_on": service.users.otp_expiry(username)}


@router.post("/invitations", response_model=Invitation, summary="Create an invitation code")
def create_invitation(
    req: GenerateInvitationCodeRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> Invitation:
    return service.create_invitation(
        current_user, req.role, code=req.code, expires_in_days=req.expires_in_days
    )


@router.get("/invitations", response_model=List[Invitation], summary="List invitation codes")
def list_invitations(
    service: HelpServiceDep, current_user: User = Depends(get_current_user)
) -> List[Invitation]:
    return service.list_invitations(current_user)


@router.delete("/invitations/{code}", summary="Revoke an invitation code")
def revoke_invitation(
    code: str,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    return {"revoked": service.revoke_invitation(current_user, code)}
