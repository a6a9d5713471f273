"""
Rate limiting utilities for form endpoints.
Uses slowapi to slow down password guessing and contact-form spam.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from clinicsite.config import settings


def get_client_identifier(request: Request) -> str:
    """
    Get client identifier for rate limiting and visit logging.
    Uses forwarded IP if behind proxy, otherwise remote address.

    Args:
        request: FastAPI request object

    Returns:
        str: Client identifier (IP address)
    """
    # Check for forwarded IP (if behind reverse proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Get first IP in chain (original client)
        return forwarded.split(",")[0].strip()

    # Fall back to direct remote address
    return get_remote_address(request)


# Create limiter instance
limiter = Limiter(
    key_func=get_client_identifier,
    enabled=settings.RATE_LIMIT_ENABLED,
    storage_uri="memory://"  # Single process; per-process counters are enough
)


# Rate limit configurations for specific use cases
RATE_LIMITS = {
    "login": "5/minute",  # Allow only 5 login attempts per minute per IP
    "contact": "10/minute",
}
