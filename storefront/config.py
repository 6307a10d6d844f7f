# storefront/config.py
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./storefront.db"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800
    cache_backend: str = "memory"  # "memory" | "redis"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: int = 60 * 60
    cache_namespace: str = "storefront"
    max_body_bytes: int = 50 * 1024 * 1024
    log_level: str = "INFO"
    port: int = 6000
    cors_origins: list = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
        return cls(
            database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
            pool_size=_int_env("DB_POOL_SIZE", 5),
            max_overflow=_int_env("DB_MAX_OVERFLOW", 10),
            pool_recycle=_int_env("DB_POOL_RECYCLE", 1800),
            cache_backend=os.getenv("CACHE_BACKEND", "memory").lower(),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            cache_ttl_seconds=_int_env("CACHE_TTL_SECONDS", 60 * 60),
            cache_namespace=os.getenv("CACHE_NAMESPACE", "storefront"),
            max_body_bytes=_int_env("MAX_BODY_BYTES", 50 * 1024 * 1024),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            port=_int_env("PORT", 6000),
            cors_origins=origins,
        )
