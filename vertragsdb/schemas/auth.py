from typing import Optional

from pydantic import BaseModel, Field, field_validator

from vertragsdb.models.user import Role

USERNAME_PATTERN = r"^[A-Za-z0-9._@-]+$"


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: int
    username: str
    role: Role

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserResponse


class UserCreateRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=8)
    role: Role = Role.VIEWER

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()


class UserUpdateRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100, pattern=USERNAME_PATTERN)
    # Empty or missing keeps the current password
    password: Optional[str] = None
    role: Role

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return v or None
