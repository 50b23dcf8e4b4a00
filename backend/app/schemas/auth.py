"""
Authentication schemas: registration, login, verification and password reset.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.user import SELF_SERVICE_ROLES
from app.schemas.user import UserResponse


class UserRegister(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    phone: Optional[str] = None
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    role: str

    @field_validator("role")
    @classmethod
    def check_role(cls, v: str) -> str:
        if v not in SELF_SERVICE_ROLES:
            raise ValueError("Role must be driver, welder, or student")
        return v


class RegisterResponse(BaseModel):
    message: str
    userId: int


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class Token(BaseModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user: UserResponse


class EmailVerification(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    code: str = Field(min_length=1, max_length=6)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordReset(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(min_length=1)
    new_password: str = Field(min_length=1, alias="newPassword")


class AdminPasswordReset(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    new_password: str = Field(min_length=1, alias="newPassword")


class MessageResponse(BaseModel):
    message: str
