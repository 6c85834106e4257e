from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional, TypeVar


T = TypeVar("T")

_TRUE_WORDS = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "f", "no", "n", "off"})


def _flag(raw: str) -> bool:
    word = raw.lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _env(name: str, default: T, parse: Callable[[str], T]) -> T:
    """Parsed value of env var `name`; unset, blank or unparsable gives `default`."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment.

    Timeouts are in seconds. The registry connection is considered configured
    when either `REGISTRY_DATABASE_URL` is set or both a host and a database
    name are present.
    """

    database_host: str
    database_port: int
    database_user: str
    database_password: str
    registry_database_name: str
    registry_database_url: Optional[str]
    registry_pool_size: int
    registry_timeout_s: float
    registry_enabled: bool

    page_timeout_propertyfinder_s: float
    page_timeout_bayut_s: float
    endpoint_timeout_s: float
    image_timeout_s: float

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_host=os.getenv("DATABASE_HOST", ""),
            database_port=_env("DATABASE_PORT", 5432, int),
            database_user=os.getenv("DATABASE_USER", ""),
            database_password=os.getenv("DATABASE_PASSWORD", ""),
            registry_database_name=os.getenv("DUBAIPULSE_DATABASE_NAME", ""),
            registry_database_url=(os.getenv("REGISTRY_DATABASE_URL") or None),
            registry_pool_size=max(1, _env("REGISTRY_POOL_SIZE", 5, int)),
            registry_timeout_s=_env("REGISTRY_TIMEOUT_S", 10.0, float),
            registry_enabled=_env("DUF_REGISTRY_ENABLED", True, _flag),
            page_timeout_propertyfinder_s=_env(
                "DUF_PAGE_TIMEOUT_PROPERTYFINDER_S", 20.0, float
            ),
            page_timeout_bayut_s=_env("DUF_PAGE_TIMEOUT_BAYUT_S", 25.0, float),
            endpoint_timeout_s=_env("DUF_ENDPOINT_TIMEOUT_S", 20.0, float),
            image_timeout_s=_env("DUF_IMAGE_TIMEOUT_S", 15.0, float),
        )

    @property
    def registry_configured(self) -> bool:
        if not self.registry_enabled:
            return False
        if self.registry_database_url:
            return True
        return bool(self.database_host and self.registry_database_name)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def reset_settings_cache() -> None:
    """Drop the cached Settings so the next `get_settings()` reads the environment again."""
    get_settings.cache_clear()
