# storefront/db.py
import logging
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse, ParseResult
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def strip_query_params(url: str, drop_keys=("sslmode", "channel_binding")) -> str:
    p = urlparse(url)
    qs = parse_qs(p.query, keep_blank_values=True)
    for k in list(qs.keys()):
        if k in drop_keys:
            qs.pop(k)
    new_query = urlencode({k: v[0] for k, v in qs.items()})
    newp = ParseResult(
        scheme=p.scheme, netloc=p.netloc, path=p.path,
        params=p.params, query=new_query, fragment=p.fragment
    )
    return urlunparse(newp)


def normalize_database_url(url: str) -> str:
    """Force the async driver and drop libpq-only query args asyncpg rejects."""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql+asyncpg://"):
        url = strip_query_params(url)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(
    url: str,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_recycle: int = 1800,
    **engine_kwargs,
) -> AsyncEngine:
    url = normalize_database_url(url)
    is_sqlite = url.startswith("sqlite")

    kwargs = dict(echo=False, pool_pre_ping=True)
    # sqlite picks its own pool class; pool sizing only applies to server databases
    if not is_sqlite and "poolclass" not in engine_kwargs:
        kwargs.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_recycle=pool_recycle,
        )
    kwargs.update(engine_kwargs)

    engine = create_async_engine(url, **kwargs)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )


async def create_tables(engine: AsyncEngine) -> None:
    # register the mapped tables on Base.metadata
    from storefront import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_connection(engine: AsyncEngine) -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database connection check failed: %s", e)
        return False
    logger.info("Database connection established (%s)", engine.url.get_backend_name())
    return True


# FastAPI dependency: one session per request, closed on every exit path
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    session_factory = request.app.state.sessionmaker
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
