import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_SQLITE_URL = "sqlite:///./music.db"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _is_enabled(env_var: str, default: bool = False) -> bool:
    """Check if a flag is enabled via environment variable."""
    value = os.getenv(env_var, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _get_int(env_var: str, default: int) -> int:
    value = os.getenv(env_var, "")
    if value:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"{env_var}={value!r} is not an integer, using {default}")
    return default


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    host = os.getenv("DB_HOST")
    if not host:
        return DEFAULT_SQLITE_URL

    user = os.getenv("DB_USER", "")
    password = os.getenv("DB_PASSWORD", "")
    name = os.getenv("DB_NAME", "")
    port = os.getenv("DB_PORT", "5432")
    credentials = f"{user}:{password}@" if user else ""
    return f"postgresql+psycopg://{credentials}{host}:{port}/{name}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: int = logging.DEBUG
    sql_echo: bool = False


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from the environment, loading a .env file first if present.
    Values already set in the environment win over the file.
    """
    if not load_dotenv(env_file):
        logger.warning("No .env file found")

    level_name = os.getenv("LOG_LEVEL", "debug").lower()

    return Settings(
        database_url=_database_url(),
        host=os.getenv("HOST", DEFAULT_HOST),
        port=_get_int("PORT", DEFAULT_PORT),
        log_level=LOG_LEVELS.get(level_name, logging.DEBUG),
        sql_echo=_is_enabled("SQL_ECHO"),
    )


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
