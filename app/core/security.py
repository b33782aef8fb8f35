"""
app/core/security.py

Purpose: Password hashing

- One-way salted hashing via fastapi-users' PasswordHelper (pwdlib)
- Hashing runs in a worker thread so the event loop keeps serving requests
- Plaintext passwords are never returned or logged
"""

import asyncio
from typing import Optional

from fastapi_users.password import PasswordHelper
from pwdlib.exceptions import UnknownHashError

_password_helper = PasswordHelper()


async def hash_password(password: str) -> str:
    """
    Hashes a plaintext password.

    Args:
        password: Plaintext password

    Returns:
        Salted hash suitable for storage
    """
    return await asyncio.to_thread(_password_helper.hash, password)


async def verify_password_hash(password: str, password_hash: Optional[str]) -> bool:
    """
    Compares a plaintext password against a stored hash.

    Returns False for a missing or unreadable hash instead of raising.
    """
    if not password or not password_hash:
        return False

    try:
        verified, _ = await asyncio.to_thread(
            _password_helper.verify_and_update, password, password_hash
        )
    except UnknownHashError:
        return False

    return verified
