"""
app/models/user.py

Purpose: User document model

- Admin and client variants share one shape, told apart by role
- Phone number is the login identifier (unique across both roles)
- Only the salted password hash is ever stored
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    ADMIN = "admin"
    CLIENT = "client"


class PublicUser(BaseModel):
    """
    User as exposed outside the store: never carries the password hash.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    phone_number: str
    name: Optional[str] = None
    role: UserRole


class User(PublicUser):
    """
    Stored user record.
    """
    password_hash: str

    def to_public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            phone_number=self.phone_number,
            name=self.name,
            role=self.role,
        )
