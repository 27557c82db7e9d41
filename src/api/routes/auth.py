"""Authentication routes.

This module handles HTTP endpoints for login, the current user and password
recovery, plus the token dependencies shared by the other routers.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import pytz
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_USER_ID,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
)
from core.dependencies import UserManagerDep
from core.exceptions import AuthenticationError, PermissionDeniedError
from schemas.user import (
    CompletePasswordResetRequest,
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    User,
)
from utils.user_manager import admin_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security
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
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def token_for(user: User) -> str:
    return create_access_token(
        data={"sub": user.id, "role": user.role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        AuthenticationError: If token is missing, invalid or expired.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    try:
        payload = jwt.decode(
            credentials.credentials, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM]
        )
    except JWTError:
        raise AuthenticationError("Invalid authentication credentials")
    if payload.get("sub") is None:
        raise AuthenticationError("Invalid authentication credentials")
    return payload


def get_current_user(
    token_payload: dict = Depends(verify_token),
    user_manager: UserManagerDep = None,
) -> User:
    """Get current authenticated user.

    Args:
        token_payload: Decoded JWT token payload.
        user_manager: Injected UserManager instance.

    Returns:
        Current User object.

    Raises:
        AuthenticationError: If the user no longer exists.
    """
    user_id = token_payload["sub"]
    if user_id == ADMIN_USER_ID and token_payload.get("role") == "admin":
        return admin_user()

    model = user_manager.get_user_by_id(user_id)
    if model is None:
        raise AuthenticationError("User not found")
    return User.model_validate(model)


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require the admin role."""
    if current_user.role != "admin":
        raise PermissionDeniedError("Admin access required")
    return current_user


@router.post("/login", response_model=LoginResponse, summary="用户登录")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep = None,
) -> LoginResponse:
    """Login with email and password.

    The configured admin credential pair bypasses the database; students are
    looked up by email and role.

    Args:
        req: Login request with email and password.
        user_manager: Injected UserManager instance.

    Returns:
        LoginResponse with user information and JWT token.
    """
    user = user_manager.authenticate(req.email.strip(), req.password)
    logger.info("User %s logged in as %s", user.id, user.role)
    return LoginResponse(user=user, token=token_for(user))


@router.post("/logout", summary="用户登出")
def logout() -> dict:
    """Logout endpoint.

    Note: Since we're using stateless JWT tokens, logout is handled
    client-side by removing the token. This endpoint exists for API
    consistency.
    """
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse, summary="获取当前用户信息")
def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> CurrentUserResponse:
    return CurrentUserResponse(user=current_user)


@router.post("/reset-password", summary="重置密码")
def reset_password(
    req: CompletePasswordResetRequest,
    user_manager: UserManagerDep = None,
) -> dict:
    """Set a new password with a recovery token."""
    user_manager.complete_password_reset(req.token, req.password, req.confirm_password)
    return {"success": True, "message": "Password updated successfully"}
