# app/config.py

import os
import re
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Mapping, Optional, Tuple

DEFAULT_FRONTEND_ORIGIN = "https://talo100uraba.github.io"

_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup."""

    database_url: str
    jwt_secret: str
    jwt_expiration: timedelta
    admin_username: str
    admin_password_hash: str
    frontend_origin: str = DEFAULT_FRONTEND_ORIGIN
    environment: str = "production"
    port: int = 3000
    log_level: str = "INFO"
    azure_account_name: Optional[str] = None
    azure_account_key: Optional[str] = None
    azure_container_name: str = "product-images"
    azure_sas_expiry_hours: int = 24

    @property
    def cors_origins(self) -> Tuple[str, ...]:
        if self.environment == "development":
            return ("*",)
        return (self.frontend_origin,)

    @property
    def image_storage_enabled(self) -> bool:
        return bool(self.azure_account_name and self.azure_account_key)


def parse_duration(value: str) -> timedelta:
    """Parse ``"1h"``, ``"30m"``, ``"45s"``, ``"2d"`` or plain seconds."""
    match = _DURATION_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit or "s"])


def _postgres_url(environ: Mapping[str, str]) -> str:
    user = environ.get("POSTGRES_USER", "postgres")
    password = environ.get("POSTGRES_PASSWORD", "postgres")
    host = environ.get("POSTGRES_HOST", "localhost")
    port = environ.get("POSTGRES_PORT", "5432")
    db = environ.get("POSTGRES_DB", "products")
    return f"postgresql://{user}:{password}@{host}:{port}/{db}"


def _required(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        raise ValueError(f"Environment variable {name} must be set")
    return value


def load_settings(environ: Mapping[str, str] = os.environ) -> Settings:
    return Settings(
        database_url=environ.get("DATABASE_URL") or _postgres_url(environ),
        jwt_secret=_required(environ, "JWT_SECRET"),
        jwt_expiration=parse_duration(environ.get("JWT_EXPIRATION", "1h")),
        admin_username=_required(environ, "ADMIN_USERNAME"),
        admin_password_hash=_required(environ, "ADMIN_PASSWORD_HASH"),
        frontend_origin=environ.get("FRONTEND_ORIGIN", DEFAULT_FRONTEND_ORIGIN),
        environment=environ.get("ENVIRONMENT", "production").lower(),
        port=int(environ.get("PORT", "3000")),
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        azure_account_name=environ.get("AZURE_STORAGE_ACCOUNT_NAME") or None,
        azure_account_key=environ.get("AZURE_STORAGE_ACCOUNT_KEY") or None,
        azure_container_name=environ.get(
            "AZURE_STORAGE_CONTAINER_NAME", "product-images"
        ),
        azure_sas_expiry_hours=int(environ.get("AZURE_SAS_TOKEN_EXPIRY_HOURS", "24")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
