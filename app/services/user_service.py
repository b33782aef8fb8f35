"""
app/services/user_service.py

Purpose: Account management

- Client self-registration
- Login credential checks
- Admin profile updates (name, phone number, password)
- Bootstrap admin creation on startup
"""

from typing import Optional

from app.core.config import Settings
from app.core.exceptions import AuthenticationError, ConflictError, ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.models.user import PublicUser, UserRole
from app.storage.base import Storage
from utils.constants import INVALID_CREDENTIALS_MESSAGE, PHONE_TAKEN_MESSAGE
from utils.validation_utils import normalize_phone_number

logger = get_logger(__name__)


async def register_client(
    storage: Storage,
    phone_number: str,
    password: str,
    name: Optional[str] = None
) -> PublicUser:
    """
    Creates a client account. Registration never creates admins.

    Args:
        storage: Storage backend
        phone_number: Normalized E.164 phone number
        password: Plaintext password (hashed by the store)
        name: Optional display name

    Returns:
        The new user without password hash

    Raises:
        ConflictError: If the phone number is already registered
    """
    if await storage.get_user_by_phone_number(phone_number) is not None:
        raise ConflictError(PHONE_TAKEN_MESSAGE)

    user = await storage.create_user(phone_number, password, UserRole.CLIENT, name=name)
    logger.info("New client registered", extra={"user_id": user.id})
    return user.to_public()


async def authenticate(storage: Storage, phone_number: str, password: str) -> PublicUser:
    """
    Verifies login credentials.

    Raises:
        AuthenticationError: Same message whether the phone number or the
            password was wrong
    """
    user = await storage.verify_password(phone_number, password)
    if user is None:
        logger.info("Login failed")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    logger.info("Login succeeded", extra={"user_id": user.id, "role": user.role.value})
    return user.to_public()


async def update_admin_profile(
    storage: Storage,
    user_id: str,
    name: Optional[str] = None,
    phone_number: Optional[str] = None,
    password: Optional[str] = None
) -> PublicUser:
    """
    Updates the signed-in admin's own profile.

    A new phone number is checked against every user before the write; the
    store's unique index catches a collision that slips in afterwards.

    Raises:
        ConflictError: If the new phone number belongs to another user
        ResourceNotFoundError: If the admin no longer exists
    """
    if phone_number is not None:
        owner = await storage.get_user_by_phone_number(phone_number)
        if owner is not None and owner.id != user_id:
            raise ConflictError(PHONE_TAKEN_MESSAGE)

    user = await storage.update_user(
        user_id,
        name=name,
        phone_number=phone_number,
        password=password,
    )
    if user is None:
        raise ResourceNotFoundError("User not found")

    return user.to_public()


async def ensure_bootstrap_admin(storage: Storage, settings: Settings) -> Optional[PublicUser]:
    """
    Creates the configured admin account if its phone number is unused.

    Returns:
        The created admin, or None when nothing was configured or created
    """
    if not settings.ADMIN_PHONE_NUMBER or not settings.ADMIN_PASSWORD:
        return None

    phone_number = normalize_phone_number(settings.ADMIN_PHONE_NUMBER)

    existing = await storage.get_user_by_phone_number(phone_number)
    if existing is not None:
        if existing.role != UserRole.ADMIN:
            logger.warning("Bootstrap admin phone number belongs to a client account")
        return None

    try:
        user = await storage.create_user(
            phone_number,
            settings.ADMIN_PASSWORD,
            UserRole.ADMIN,
            name=settings.ADMIN_NAME,
        )
    except ConflictError:
        # Another worker created it first
        return None

    with LogContext(user_id=user.id, role=UserRole.ADMIN.value):
        logger.info("✅ Bootstrap admin created")

    return user.to_public()
