import uvicorn
import structlog
from contextlib import asynccontextmanager
from valorant_dashboard.api.main import app
from valorant_dashboard.config.settings import settings
from valorant_dashboard.config.logging import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app):
    logger.info("Starting Valorant Dashboard", environment=settings.environment)

    # Schema, expired-row sweep and legacy session import
    try:
        from valorant_dashboard.database.connection import init_db
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    try:
        yield
    finally:
        from valorant_dashboard.database.connection import engine
        logger.info("Shutting down Valorant Dashboard")
        await engine.dispose()

app.router.lifespan_context = lifespan


def main():
    uvicorn.run(
        "valorant_dashboard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )


if __name__ == "__main__":
    main()
