"""
app/models/session.py

Purpose: Session identity as seen by the core

- Read from the signed session cookie, never written by the core
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.models.user import PublicUser, UserRole


SESSION_USER_ID = "user_id"
SESSION_PHONE_NUMBER = "phone_number"
SESSION_ROLE = "role"


@dataclass(frozen=True)
class SessionIdentity:
    user_id: str
    phone_number: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_session(cls, session: Dict[str, Any]) -> Optional["SessionIdentity"]:
        """Builds an identity from raw session data; None if anything is missing."""
        user_id = session.get(SESSION_USER_ID)
        phone_number = session.get(SESSION_PHONE_NUMBER)
        role = session.get(SESSION_ROLE)

        if not user_id or not phone_number or role not in (UserRole.ADMIN.value, UserRole.CLIENT.value):
            return None

        return cls(user_id=user_id, phone_number=phone_number, role=UserRole(role))

    @classmethod
    def for_user(cls, user: PublicUser) -> "SessionIdentity":
        return cls(user_id=user.id, phone_number=user.phone_number, role=user.role)

    def to_session(self) -> Dict[str, str]:
        return {
            SESSION_USER_ID: self.user_id,
            SESSION_PHONE_NUMBER: self.phone_number,
            SESSION_ROLE: self.role.value,
        }
