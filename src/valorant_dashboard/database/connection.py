from pathlib import Path
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from valorant_dashboard.config.settings import settings
from valorant_dashboard.config.logging import get_logger
from valorant_dashboard.models.stored_session import Base

logger = get_logger("database")


def _engine_options(database_url: str) -> dict:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        # Make sure the directory for a file database exists before first connect
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return {}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,     # Validate connections before use
        "pool_recycle": 3600,      # Recycle connections after 1 hour
        "pool_timeout": 30,
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
    **_engine_options(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def init_db():
    """Create the sessions table, drop expired rows and import a legacy JSON session file."""
    from valorant_dashboard.database.repositories import SessionStore

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        store = SessionStore(session)
        removed = await store.cleanup_expired()
        imported = await store.migrate_from_json(Path(settings.legacy_session_file))
        logger.info("Session database ready", expired_removed=removed, migrated=imported)


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
