from os import getenv

from blog.core.errors import ConfigError


def get_database_url() -> str:
    """Connection string for the store, required at startup"""
    db_url = getenv("DATABASE_URL")
    if not db_url:
        raise ConfigError("DATABASE_URL environment variable not set.")
    return db_url


class Settings:
    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "60"))

    # pool + deadlines
    DB_POOL_SIZE = int(getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW = int(getenv("DB_MAX_OVERFLOW", "10"))
    DB_POOL_TIMEOUT = int(getenv("DB_POOL_TIMEOUT", "30"))
    DB_CONNECT_TIMEOUT = int(getenv("DB_CONNECT_TIMEOUT", "5"))
    DB_STATEMENT_TIMEOUT_MS = int(getenv("DB_STATEMENT_TIMEOUT_MS", "5000"))

    DEFAULT_PAGE_LIMIT = int(getenv("DEFAULT_PAGE_LIMIT", "5"))
    MAX_PAGE_LIMIT = int(getenv("MAX_PAGE_LIMIT", "10"))

    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

settings = Settings()
