"""Local database schema declaration.

Binds each local table to its DAO. List and map columns are wired to the JSON
column converters in the model definitions themselves.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlmodel import SQLModel

from src.core.config import settings
from src.core.infrastructure.database.session import (
    async_engine,
    create_session_factory,
    get_async_session,
)
from src.modules.vehicles.infrastructure.daos import (
    AIScoreDao,
    AudioDiagnosticDao,
    CarImageDao,
    CarLogDao,
    MaintenanceRecordDao,
    ReminderDao,
    VideoDiagnosticDao,
)
from src.modules.vehicles.infrastructure.models import (
    AIScoreModel,
    AudioDiagnosticModel,
    CarImageModel,
    CarLogModel,
    MaintenanceRecordModel,
    ReminderModel,
    VideoDiagnosticModel,
)


class AutoBrainDatabase:
    """Schema of the local database."""

    DATABASE_NAME = settings.LOCAL_DATABASE_NAME
    VERSION = 10

    TABLES: tuple[type[SQLModel], ...] = (
        MaintenanceRecordModel,
        CarLogModel,
        AIScoreModel,
        ReminderModel,
        AudioDiagnosticModel,
        VideoDiagnosticModel,
        CarImageModel,
    )

    def __init__(self, engine: AsyncEngine | None = None):
        self.engine = engine or async_engine
        self._session_factory = create_session_factory(self.engine)

    @classmethod
    def table_names(cls) -> list[str]:
        return [model.__tablename__ for model in cls.TABLES]

    async def create_all(self) -> None:
        """Create every declared table that does not exist yet."""
        tables = [model.__table__ for model in self.TABLES]
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all, tables=tables)

    async def drop_all(self) -> None:
        tables = [model.__table__ for model in self.TABLES]
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all, tables=tables)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session that commits on exit and rolls back on error."""
        async with get_async_session(self._session_factory) as session:
            yield session

    # ==================== DAO ACCESSORS ====================

    def maintenance_record_dao(self, session: AsyncSession) -> MaintenanceRecordDao:
        return MaintenanceRecordDao(session)

    def car_log_dao(self, session: AsyncSession) -> CarLogDao:
        return CarLogDao(session)

    def ai_score_dao(self, session: AsyncSession) -> AIScoreDao:
        return AIScoreDao(session)

    def reminder_dao(self, session: AsyncSession) -> ReminderDao:
        return ReminderDao(session)

    def audio_diagnostic_dao(self, session: AsyncSession) -> AudioDiagnosticDao:
        return AudioDiagnosticDao(session)

    def video_diagnostic_dao(self, session: AsyncSession) -> VideoDiagnosticDao:
        return VideoDiagnosticDao(session)

    def car_image_dao(self, session: AsyncSession) -> CarImageDao:
        return CarImageDao(session)
