import os
from functools import lru_cache

# Prefer loading environment variables from a .env file if python-dotenv is available
try:
    from dotenv import load_dotenv, find_dotenv
    _env_path = find_dotenv(usecwd=True)
    if _env_path:
        load_dotenv(_env_path, override=False)
except ImportError:
    pass


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL")
    # Primary admin account; users with role ADMIN are admins as well
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")
    # Uploaded product and carousel media; defaults to <project>/media
    MEDIA_ROOT: str = os.getenv("MEDIA_ROOT", "")
    # Comma separated list, "*" allows any origin
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in (self.CORS_ORIGINS or "*").split(",") if o.strip()]


@lru_cache
def get_settings():
    return Settings()
