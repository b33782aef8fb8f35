"""
app/schemas/auth.py

Purpose: Auth and profile request/response schemas

- camelCase on the wire (phoneNumber), snake_case in Python
- Phone numbers normalized and checked against E.164 here, at the boundary
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional

from app.models.user import PublicUser
from utils.constants import (
    EMPTY_NAME_MESSAGE,
    INVALID_PHONE_MESSAGE,
    NO_PROFILE_CHANGES_MESSAGE,
    REGISTRATION_PASSWORD_MESSAGE,
)
from utils.validation_utils import (
    REGISTRATION_PASSWORD_MIN_LENGTH,
    normalize_phone_number,
    password_strength_errors,
    validate_phone_number,
)


def _checked_phone(value: str) -> str:
    phone = normalize_phone_number(value)
    if not validate_phone_number(phone):
        raise ValueError(INVALID_PHONE_MESSAGE)
    return phone


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(CamelModel):
    phone_number: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("phone_number")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        # Looked up as-is; no format check so login never reveals format rules
        return normalize_phone_number(v)


class RegisterRequest(CamelModel):
    phone_number: str
    password: str
    name: Optional[str] = None

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _checked_phone(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < REGISTRATION_PASSWORD_MIN_LENGTH:
            raise ValueError(REGISTRATION_PASSWORD_MESSAGE)
        return v

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class ProfileUpdateRequest(CamelModel):
    """
    Admin self-edit. Empty strings count as "not provided".
    """
    name: Optional[str] = None
    phone_number: Optional[str] = None
    password: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError(EMPTY_NAME_MESSAGE)
        return v

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return _checked_phone(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        problems = password_strength_errors(v)
        if problems:
            raise ValueError(f"Password must contain {', '.join(problems)}")
        return v

    @model_validator(mode="after")
    def require_a_change(self) -> "ProfileUpdateRequest":
        if self.name is None and self.phone_number is None and self.password is None:
            raise ValueError(NO_PROFILE_CHANGES_MESSAGE)
        return self


class UserResponse(BaseModel):
    user: PublicUser
