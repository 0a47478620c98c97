"""Authentication routes.

This module handles HTTP endpoints for login, registration and the
one-time password reset flow.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import pytz
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from help_system.config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, JWT_SECRET_KEY
from help_system.core.dependencies import HelpServiceDep
from help_system.core.exceptions import AuthFailedError
from help_system.schemas.user import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
    User,
    UserInfo,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security; a missing header is reported as auth_failed
security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    to_encode = data.copy()
    expire = datetime.now(pytz.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Verify JWT token from Authorization header.

    Raises:
        AuthFailedError: If the token is missing, invalid or expired.
    """
    if credentials is None:
        raise AuthFailedError("Missing authentication credentials")
    try:
        payload = jwt.decode(
            credentials.credentials, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM]
        )
    except JWTError:
        raise AuthFailedError("Invalid authentication credentials")
    if payload.get("sub") is None:
        raise AuthFailedError("Invalid authentication credentials")
    return payload


def get_current_user(
    service: HelpServiceDep,
    token_payload: dict = Depends(verify_token),
) -> User:
    """Get current authenticated user.

    The role in the token must still be the user's role; a role change
    invalidates older tokens.
    """
    user = service.users.get_user_by_username(token_payload["sub"])
    if user is None or user.role.value != token_payload.get("role"):
        raise AuthFailedError("Invalid authentication credentials")
    return user


@router.post("/register", response_model=UserInfo, summary="Register")
def register(req: RegisterRequest, service: HelpServiceDep) -> UserInfo:
    """Register a new user.

    The first user of an empty system becomes its administrator; everyone
    after that needs an invitation code, which fixes their role.
    """
    user = service.register(
        req.username,
        req.password,
        invitation_code=req.invitation_code,
        email=req.email,
        full_name=req.full_name,
        pref_name=req.pref_name,
        skill_level=req.skill_level,
    )
    return UserInfo.from_user(user)


@router.post("/login", response_model=LoginResponse, summary="Login")
def login(req: LoginRequest, service: HelpServiceDep) -> LoginResponse:
    user = service.login(req.username, req.password, req.role)
    token = create_access_token({"sub": user.username, "role": user.role.value})
    return LoginResponse(user=UserInfo.from_user(user), token=token)


@router.post("/reset-password", response_model=UserInfo, summary="Use a one-time password")
def reset_password(req: ResetPasswordRequest, service: HelpServiceDep) -> UserInfo:
    user = service.reset_password(req.username, req.one_time_password, req.new_password)
    return UserInfo.from_user(user)


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserInfo.from_user(current_user))


@router.patch("/me", response_model=UserInfo, summary="Update own profile")
def update_profile(
    req: UpdateProfileRequest,
    service: HelpServiceDep,
    current_user: User = Depends(get_current_user),
) -> UserInfo:
    user = service.update_profile(current_user, **req.model_dump(exclude_none=True))
    return UserInfo.from_user(user)
