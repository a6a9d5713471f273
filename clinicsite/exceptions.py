"""
Error types raised by the access layer and the admin auth gate.
Routes translate them into 404 pages or redirects with an error flag.
"""


class SiteError(Exception):
    """Base class for errors the routes know how to present."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(SiteError):
    """A blog post (or other record) does not exist."""


class ValidationError(SiteError):
    """Required form fields are missing or unusable."""


class SlugConflictError(SiteError):
    """Another blog post already uses the requested slug."""

    def __init__(self, slug: str):
        super().__init__(f"Slug '{slug}' already exists. Please use a different title.")
        self.slug = slug


class StorageFault(SiteError):
    """A database write failed and was rolled back."""


class AdminLoginRequired(Exception):
    """Raised by the auth gate; answered with a redirect to the login page."""
