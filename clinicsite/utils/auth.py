"""
Password verification for admin access.
Checks against a bcrypt hash when ADMIN_PASSWORD_HASH is configured,
otherwise against the plain shared password.
"""
import secrets

import bcrypt
from clinicsite.config import settings


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.
    Used for generating the ADMIN_PASSWORD_HASH value.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hashed password.

    Args:
        password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    try:
        return bcrypt.checkpw(
            password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        return False


def verify_admin_password(password: str) -> bool:
    """
    Verify the submitted admin password.

    Raises:
        ValueError: If neither ADMIN_PASSWORD_HASH nor ADMIN_PASSWORD is configured
    """
    if not password:
        return False

    if settings.ADMIN_PASSWORD_HASH:
        return verify_password(password, settings.ADMIN_PASSWORD_HASH)

    if not settings.ADMIN_PASSWORD:
        raise ValueError("ADMIN_PASSWORD not configured")

    return secrets.compare_digest(password.encode('utf-8'), settings.ADMIN_PASSWORD.encode('utf-8'))
