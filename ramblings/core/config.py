from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Content store
    STORE_BACKEND: str = "file"  # "memory", "file" or "redis"
    CONTENT_DIR: str = "./content"
    REDIS_URL: Optional[str] = None  # e.g., "redis://localhost:6379/0"
    STORE_KEY_PREFIX: str = ""
    STORE_WRITE_RETRIES: int = 3  # Compare-and-swap attempts per mutation

    # Image storage
    IMAGES_DIR: str = "./content/images"
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10MB in bytes
    ALLOWED_IMAGE_TYPES: list[str] = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
    ]

    # Admin session
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin123"  # IMPORTANT: Change in production!
    ADMIN_SESSION_TOKEN: str = "authenticated"
    SESSION_COOKIE_NAME: str = "admin_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7  # 7 days
    COOKIE_SECURE: bool = False

    # Startup
    SEED_SAMPLE_CONTENT: bool = True

    # URLs
    FRONTEND_URL: str = "http://localhost:3000"

    # Site metadata
    SITE_NAME: str = "Random Ramblings"
    SITE_DESCRIPTION: str = "Here lies a man whose name was writ in water."
    SITE_URL: str = "https://joshua-seprodi.com"
    SITE_AUTHOR: str = "Joshua Seprodi"

    @property
    def redis_url(self) -> str:
        return self.REDIS_URL or "redis://localhost:6379/0"

    class Config:
        env_file = ".env"
        extra = "ignore"  # Allow extra fields in .env file

settings = Settings()
