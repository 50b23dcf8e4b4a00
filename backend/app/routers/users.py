"""
Users router for the Recruiting Company API.

Profile lookup for the signed-in user and admin user listings.
"""

from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, Query

from app.core.dependencies import UserManagerDep
from app.routers.auth import get_current_user, get_current_admin_user
from app.schemas.user import (
    CurrentUser,
    UserEnvelope,
    UserList,
    UserResponse,
    UserStatsEnvelope
)


router = APIRouter()


@router.get("/me", response_model=UserEnvelope)
def get_profile(
    user_manager: UserManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Get current user information.
    """
    user = user_manager.get_user(current_user.id)
    return {"user": UserResponse.model_validate(user)}


@router.get("/admin/all-users", response_model=UserList)
def list_users(
    user_manager: UserManagerDep,
    role: Optional[str] = Query(None),
    admin_user: CurrentUser = Depends(get_current_admin_user),
) -> Dict[str, Any]:
    """
    List all non-admin users, optionally filtered by role.
    """
    users = user_manager.list_users(role)
    return {
        "users": [UserResponse.model_validate(u) for u in users],
        "total": len(users),
    }


@router.get("/admin/user/{user_id}", response_model=UserEnvelope)
def get_user(
    user_id: int,
    user_manager: UserManagerDep,
    admin_user: CurrentUser = Depends(get_current_admin_user),
) -> Dict[str, Any]:
    """
    Get any user's profile.
    """
    user = user_manager.get_user(user_id)
    return {"user": UserResponse.model_validate(user)}


@router.get("/admin/stats", response_model=UserStatsEnvelope)
def get_stats(
    user_manager: UserManagerDep,
    admin_user: CurrentUser = Depends(get_current_admin_user),
) -> Dict[str, Any]:
    """
    Counts of users by role and verification state.
    """
    return {"stats": user_manager.user_stats()}
