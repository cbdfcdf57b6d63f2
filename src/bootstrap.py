"""Application startup wiring for the data layer."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from src.core.config import settings
from src.core.infrastructure.database.session import init_db
from src.core.infrastructure.logging import setup_logging
from src.modules.vehicles.infrastructure.database import AutoBrainDatabase


async def bootstrap(engine: AsyncEngine | None = None) -> AutoBrainDatabase:
    """Configure logging, verify the local database and create its tables."""
    setup_logging()
    logger.info(f"Starting {settings.PROJECT_NAME} data layer")

    database = AutoBrainDatabase(engine)
    await init_db(database.engine)
    await database.create_all()

    logger.info(
        f"Local database ready: {database.DATABASE_NAME} "
        f"(schema version {database.VERSION}, {len(database.TABLES)} tables)"
    )
    return database
