from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from asyncpg.exceptions import UniqueViolationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from interview_agenda.core.config import settings

_UNIQUE_VIOLATION_SQLSTATE = "23505"


def to_async_database_url(database_url: str) -> str:
    """Rewrite a libpq-style URL for asyncpg; other URLs pass through.

    asyncpg does not accept psycopg params like sslmode/channel_binding, so they
    are stripped and SSL is enabled via connect_args instead.
    """
    parsed = urlparse(database_url)
    if parsed.scheme not in ("postgresql", "postgres"):
        return database_url
    query = parse_qs(parsed.query, keep_blank_values=True)
    query.pop("sslmode", None)
    query.pop("channel_binding", None)
    new_query = urlencode(query, doseq=True)
    return urlunparse(
        ("postgresql+asyncpg", parsed.netloc, parsed.path, parsed.params, new_query, parsed.fragment)
    )


if settings.is_postgres:
    engine = create_async_engine(
        to_async_database_url(settings.database_url),
        echo=settings.env == "development",
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        connect_args={"ssl": True},
    )
else:
    engine = create_async_engine(settings.database_url, echo=settings.env == "development")

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def is_unique_violation(exc: IntegrityError) -> bool:
    """True only when the driver reports a unique key/index collision.

    NOT NULL, foreign key and CHECK failures are also IntegrityError and must
    not be mistaken for a lost booking race.
    """
    orig = exc.orig
    cause = getattr(orig, "__cause__", None)
    if isinstance(orig, UniqueViolationError) or isinstance(cause, UniqueViolationError):
        return True
    # asyncpg adapter and psycopg2 both expose the SQLSTATE.
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) == _UNIQUE_VIOLATION_SQLSTATE:
            return True
    if getattr(orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return True
    return str(orig).startswith("UNIQUE constraint failed")


async def init_db() -> None:
    """Create tables if using create_all; prefer Alembic in production."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
