"""User and invitation schema definitions."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from help_system.schemas.common import Level, Role


class User(BaseModel):
    username: str = Field(description="Unique login name.")
    password_hash: str = Field(description="Bcrypt hash of the current password.")
    role: Role = Field(description="System-wide role of the user.")
    email: Optional[str] = Field(default=None, description="Unique when present.")
    full_name: Optional[str] = None
    pref_name: Optional[str] = Field(default=None, description="Preferred name.")
    one_time_password: bool = Field(
        default=False,
        description="True while the current password is a single-use reset password.",
    )
    password_expires: Optional[date] = Field(
        default=None, description="Expiry date of the one-time password."
    )
    skill_level: Optional[Level] = None


class UserInfo(BaseModel):
    """User data safe to hand to clients."""

    username: str
    role: Role
    email: Optional[str] = None
    full_name: Optional[str] = None
    pref_name: Optional[str] = None
    one_time_password: bool = False
    skill_level: Optional[Level] = None

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(**user.model_dump(exclude={"password_hash", "password_expires"}))


class Invitation(BaseModel):
    code: str
    role: Role
    created_by: Optional[str] = None
    created_at: str
    expires_at: Optional[str] = None


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    invitation_code: Optional[str] = Field(
        default=None,
        description="Required unless the system has no users yet.",
    )
    email: Optional[str] = None
    full_name: Optional[str] = None
    pref_name: Optional[str] = None
    skill_level: Optional[Level] = None


class LoginRequest(BaseModel):
    username: str
    password: str
    role: Role


class LoginResponse(BaseModel):
    user: UserInfo
    token: str


class CurrentUserResponse(BaseModel):
    user: UserInfo


class GenerateInvitationCodeRequest(BaseModel):
    role: Role
    code: Optional[str] = Field(
        default=None, description="Explicit code; generated when omitted."
    )
    expires_in_days: Optional[int] = Field(default=None, ge=1, le=365)


class ChangeRoleRequest(BaseModel):
    role: Role


class UpdateProfileRequest(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    pref_name: Optional[str] = None
    skill_level: Optional[Level] = None


class IssueOTPRequest(BaseModel):
    secret: str = Field(min_length=1)
    expires_on: Optional[date] = None


class ResetPasswordRequest(BaseModel):
    username: str
    one_time_password: str
    new_password: str = Field(min_length=1)
