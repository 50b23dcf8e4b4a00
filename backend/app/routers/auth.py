"""
Authentication router for the Recruiting Company API.

Handles user registration, email verification, login and password reset
endpoints, and provides the bearer-token dependencies used by every
protected route.
"""

from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.dependencies import UserManagerDep
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import verify_token
from app.models.user import UserRole
from app.schemas.auth import (
    UserRegister,
    RegisterResponse,
    UserLogin,
    Token,
    EmailVerification,
    PasswordResetRequest,
    PasswordReset,
    AdminPasswordReset,
    MessageResponse
)
from app.schemas.user import CurrentUser, UserResponse


router = APIRouter()

# Bearer scheme; missing credentials are reported as 401 below
bearer_scheme = HTTPBearer(auto_error=False)


# Dependencies
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Get the identity asserted by the request's JWT.

    Decoded from the token alone; no database lookup.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    try:
        return CurrentUser(
            id=payload["id"],
            email=payload["email"],
            role=payload["role"],
        )
    except (KeyError, ValueError):
        raise AuthenticationError("Invalid or expired token")


def require_role(*roles: str):
    """
    Build a dependency that admits only the given roles.
    """
    def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise AuthorizationError("Insufficient permissions")
        return current_user

    return role_checker


get_current_admin_user = require_role(UserRole.ADMIN.value)


# Endpoints
@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    user_manager: UserManagerDep,
) -> Dict[str, Any]:
    """
    Register a new user and email them a verification code.
    """
    user = user_manager.register(
        email=user_data.email,
        phone=user_data.phone,
        name=user_data.name,
        password=user_data.password,
        role=user_data.role,
    )
    return {
        "message": "Registration successful. Please check your email for verification code.",
        "userId": user.id,
    }


@router.post("/login", response_model=Token)
def login(
    credentials: UserLogin,
    user_manager: UserManagerDep,
) -> Dict[str, Any]:
    """
    Exchange email and password for an access token.
    """
    token, user = user_manager.login(credentials.email, credentials.password)
    return {
        "message": "Login successful",
        "token": token,
        "token_type": "bearer",
        "user": UserResponse.model_validate(user),
    }


@router.post("/verify-email", response_model=MessageResponse)
def verify_email(
    verification: EmailVerification,
    user_manager: UserManagerDep,
) -> Dict[str, str]:
    """
    Verify user email with the emailed code.
    """
    user_manager.verify_email(verification.email, verification.code)
    return {"message": "Email verified successfully. You can now log in."}


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    request_data: PasswordResetRequest,
    user_manager: UserManagerDep,
) -> Dict[str, str]:
    """
    Request a password reset link. The response never reveals whether
    the email exists.
    """
    message = user_manager.request_password_reset(request_data.email)
    return {"message": message}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    reset_data: PasswordReset,
    user_manager: UserManagerDep,
) -> Dict[str, str]:
    """
    Reset password using reset token.
    """
    user_manager.reset_password(reset_data.token, reset_data.new_password)
    return {"message": "Password reset successful. You can now login with your new password."}


@router.post("/admin/reset-user-password")
def admin_reset_user_password(
    reset_data: AdminPasswordReset,
    user_manager: UserManagerDep,
    admin_user: CurrentUser = Depends(get_current_admin_user),
) -> Dict[str, Any]:
    """
    Set a new password for any user.
    """
    user = user_manager.admin_reset_password(reset_data.user_id, reset_data.new_password)
    return {
        "message": "Password reset successfully",
        "user": UserResponse.model_validate(user),
    }
