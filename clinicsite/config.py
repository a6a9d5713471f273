"""
Configuration management for the clinic site.
Uses Pydantic Settings for environment variable management.
"""
import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Site Configuration
    SITE_TITLE: str = "JediCare Medical Centre"
    SITE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Process surface
    # VERCEL is set by the sandboxed hosting platform; storage then lives in /tmp
    VERCEL: bool = False
    PORT: int = 3000

    # Database Configuration
    # Leave empty to use the SQLite file derived from VERCEL
    DATABASE_URL: str = ""

    # Upload Configuration
    UPLOAD_DIR: str = ""
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Admin Password
    # ADMIN_PASSWORD_HASH (bcrypt) takes precedence over the plain shared password
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_PASSWORD_HASH: str = ""

    # Session Configuration
    # SESSION_SECRET_KEY should be a long random string (e.g., generated with: openssl rand -hex 32)
    SESSION_SECRET_KEY: str = "change-this-session-secret-in-production"
    SESSION_EXPIRE_MINUTES: int = 480
    SESSION_COOKIE_SECURE: bool = False

    RATE_LIMIT_ENABLED: bool = True

    # Cloudinary Configuration (optional, local disk storage is used otherwise)
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def database_url(self) -> str:
        """Resolved SQLAlchemy URL, honouring the sandboxed storage flag."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        path = "/tmp/clinicsite.db" if self.VERCEL else "./data/clinicsite.db"
        return f"sqlite+aiosqlite:///{path}"

    @property
    def upload_dir(self) -> str:
        if self.UPLOAD_DIR:
            return self.UPLOAD_DIR
        return "/tmp/uploads" if self.VERCEL else os.path.join("data", "uploads")


# Global settings instance
settings = Settings()
