"""
app/api/auth.py

Purpose: Login, registration, logout and current-user routes

- Session cookie is set on login and register, cleared on logout
- /auth/me re-reads the user so a deleted account ends the session
"""

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_session_identity, get_storage, start_session
from app.core.exceptions import AuthenticationError
from app.core.logging import get_logger
from app.models.session import SessionIdentity
from app.schemas.auth import LoginRequest, RegisterRequest, UserResponse
from app.schemas.response import SuccessResponse
from app.services import user_service
from app.storage.base import Storage
from utils.constants import SESSION_USER_MISSING_MESSAGE

logger = get_logger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=UserResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    storage: Storage = Depends(get_storage)
):
    user = await user_service.authenticate(storage, payload.phone_number, payload.password)
    start_session(request, SessionIdentity.for_user(user))
    return UserResponse(user=user)


@router.post("/register", response_model=UserResponse)
async def register(
    payload: RegisterRequest,
    request: Request,
    storage: Storage = Depends(get_storage)
):
    user = await user_service.register_client(
        storage,
        payload.phone_number,
        payload.password,
        name=payload.name,
    )
    start_session(request, SessionIdentity.for_user(user))
    return UserResponse(user=user)


@router.post("/logout", response_model=SuccessResponse)
async def logout(request: Request):
    request.session.clear()
    return SuccessResponse()


@router.get("/me", response_model=UserResponse)
async def me(
    request: Request,
    identity: SessionIdentity = Depends(get_session_identity),
    storage: Storage = Depends(get_storage)
):
    user = await storage.get_user(identity.user_id)
    if user is None:
        request.session.clear()
        logger.info("Session refers to a missing user", extra={"user_id": identity.user_id})
        raise AuthenticationError(SESSION_USER_MISSING_MESSAGE)

    return UserResponse(user=user.to_public())
