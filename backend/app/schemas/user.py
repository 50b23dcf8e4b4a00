"""
User schemas. Password hashes never appear in any of these.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    phone: Optional[str] = None
    role: str
    is_verified: bool
    created_at: Optional[datetime] = None


class CurrentUser(BaseModel):
    """Identity asserted by a verified access token."""

    id: int
    email: str
    role: str


class UserEnvelope(BaseModel):
    user: UserResponse


class UserList(BaseModel):
    users: List[UserResponse]
    total: int


class UserStats(BaseModel):
    totalUsers: int
    drivers: int
    welders: int
    students: int
    verifiedUsers: int


class UserStatsEnvelope(BaseModel):
    stats: UserStats
