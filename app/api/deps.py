"""
app/api/deps.py

Purpose: FastAPI dependencies shared by the routers

- Storage backend from the provider on app.state
- Session identity from the signed session cookie
- Admin gate for admin-only routes
"""

from fastapi import Depends, Request

from app.core.config import Settings, settings
from app.core.exceptions import AuthenticationError
from app.models.session import SessionIdentity
from app.services.access_policy import require_admin
from app.storage.base import Storage
from utils.constants import NOT_AUTHENTICATED_MESSAGE


def get_settings() -> Settings:
    return settings


async def get_storage(request: Request) -> Storage:
    provider = request.app.state.storage_provider
    return await provider.get()


def get_session_identity(request: Request) -> SessionIdentity:
    """
    Raises:
        AuthenticationError: If there is no valid session
    """
    identity = SessionIdentity.from_session(request.session)
    if identity is None:
        raise AuthenticationError(NOT_AUTHENTICATED_MESSAGE)
    return identity


def require_admin_session(
    identity: SessionIdentity = Depends(get_session_identity)
) -> SessionIdentity:
    return require_admin(identity)


def start_session(request: Request, identity: SessionIdentity):
    request.session.clear()
    request.session.update(identity.to_session())
