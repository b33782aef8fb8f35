"""
app/api/admin.py

Purpose: Admin self-service profile route
"""

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_storage, require_admin_session, start_session
from app.core.logging import get_logger
from app.models.session import SessionIdentity
from app.schemas.auth import ProfileUpdateRequest, UserResponse
from app.services import user_service
from app.storage.base import Storage

logger = get_logger(__name__)

router = APIRouter(prefix="/admin")


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    request: Request,
    identity: SessionIdentity = Depends(require_admin_session),
    storage: Storage = Depends(get_storage)
):
    user = await user_service.update_admin_profile(
        storage,
        identity.user_id,
        name=payload.name,
        phone_number=payload.phone_number,
        password=payload.password,
    )

    # Keep the session's phone number in step with the account
    start_session(request, SessionIdentity.for_user(user))

    logger.info(
        "Admin profile updated",
        extra={"user_id": user.id, "role": user.role.value}
    )
    return UserResponse(user=user)
