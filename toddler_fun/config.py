# toddler_fun/config.py
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///./toddler_fun.db"

TRUTHY_VALUES = {"true", "1", "yes"}
PRODUCTION_NAMES = {"prod", "production"}


def is_truthy(value):
    # Only "true", "1" and "yes" count, in any case
    if value is None:
        return False
    return value.strip().lower() in TRUTHY_VALUES


def _env_name():
    return (os.getenv("APP_ENV") or os.getenv("ENV") or os.getenv("PYTHON_ENV") or "development").lower()


def load_env(directory=None):
    '''Load .env.prod or .env.local from the working directory, else .env.'''
    base = Path(directory or Path.cwd())
    name = ".env.prod" if _env_name() in PRODUCTION_NAMES else ".env.local"
    for candidate in (base / name, base / ".env"):
        if candidate.exists():
            load_dotenv(dotenv_path=candidate)
            return candidate
    return None


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    environment: str = "development"
    allow_production_writes: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def is_production(self):
        return self.environment.lower() in PRODUCTION_NAMES

    @property
    def writes_enabled(self):
        return not self.is_production or self.allow_production_writes

    @classmethod
    def from_env(cls):
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            environment=_env_name(),
            allow_production_writes=is_truthy(os.getenv("ALLOW_PRODUCTION_WRITES")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
