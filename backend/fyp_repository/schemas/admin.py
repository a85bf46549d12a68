from pydantic import EmailStr, Field, field_validator
from typing import Any

from fyp_repository.schemas.common import CamelModel

CREDENTIALS_REQUIRED = "Email and password are required"


class AdminLogin(CamelModel):
    email: EmailStr = Field(default=None, validate_default=True)
    password: str = Field(default=None, validate_default=True)

    @field_validator("email", "password", mode="before")
    @classmethod
    def credentials_required(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError(CREDENTIALS_REQUIRED)
        return v


class AdminResponse(CamelModel):
    """Public admin fields. The password hash is never part of a response."""
    id: str
    email: str
    role: str

    @field_validator("role", mode="before")
    @classmethod
    def role_value(cls, v: Any) -> str:
        return getattr(v, "value", v)


class LoginResponse(CamelModel):
    token: str
    admin: AdminResponse


class AdminIdentity(CamelModel):
    """Decoded bearer token attached to admin requests"""
    id: str
    email: str
    role: str
