from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse
from app.config import get_settings
import logging

settings = get_settings()
logger = logging.getLogger(__name__)


def convert_database_url(url: str) -> str:
    """
    Convert a database URL to an async-driver format.
    PostgreSQL URLs are rewritten for asyncpg, SQLite URLs for aiosqlite.
    """
    if not url:
        raise ValueError("DATABASE_URL cannot be empty")

    if url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    # Replace postgresql:// (or the legacy postgres://) with postgresql+asyncpg://
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif not url.startswith("postgresql+asyncpg://"):
        raise ValueError(f"Invalid DATABASE_URL format: {url[:50]}...")

    try:
        parsed = urlparse(url)
        query_params = parse_qs(parsed.query)
    except Exception as e:
        raise ValueError(f"Failed to parse DATABASE_URL: {str(e)}")

    # asyncpg uses ssl parameter, not sslmode
    if "sslmode" in query_params:
        sslmode = query_params["sslmode"][0].lower()
        del query_params["sslmode"]
        if sslmode in ["require", "prefer", "allow"]:
            query_params["ssl"] = ["require"]

    # Parameters asyncpg does not understand
    for param in ["channel_binding", "connect_timeout", "application_name"]:
        if param in query_params:
            del query_params[param]

    new_query = urlencode(query_params, doseq=True)
    return urlunparse(parsed._replace(query=new_query))


def build_engine(url: str):
    """Create the async engine with pooling and timeouts suited to the driver"""
    db_url = convert_database_url(url)

    if db_url.startswith("sqlite"):
        # Single shared connection so in-memory databases survive across sessions
        return create_async_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        db_url,
        echo=settings.ENVIRONMENT == "development",
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,   # Recycle connections after 1 hour
        connect_args={
            "command_timeout": settings.DB_COMMAND_TIMEOUT_SECONDS,
            "server_settings": {"application_name": "citizen_services"},
        },
    )


try:
    engine = build_engine(settings.DATABASE_URL)
except Exception as e:
    raise ValueError(
        f"Failed to configure DATABASE_URL: {str(e)}\n"
        f"Please check your DATABASE_URL in .env file or environment variables."
    ) from e

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Initialize database tables"""
    async with engine.begin() as conn:
        # Import all models to ensure they're registered
        from app.models import user, profile, tax_record, complaint  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created / verified")
