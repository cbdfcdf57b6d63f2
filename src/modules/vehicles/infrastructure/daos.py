"""DAOs for local vehicle records."""

from collections.abc import Sequence

from sqlalchemy import func, or_
from sqlmodel import col, select

from src.core.domain.clock import now_millis
from src.core.infrastructure.database.dao import SQLModelDao
from src.core.infrastructure.logging import BusinessEvents
from src.modules.vehicles.infrastructure.models import (
    AIScoreModel,
    AudioDiagnosticModel,
    CarImageModel,
    CarLogModel,
    MaintenanceRecordModel,
    ReminderModel,
    VideoDiagnosticModel,
)

DAY_MILLIS = 86_400_000
MAX_SYNC_ATTEMPTS = 5


class MaintenanceRecordDao(SQLModelDao[MaintenanceRecordModel]):
    model = MaintenanceRecordModel

    async def list_by_user(self, user_id: str) -> list[MaintenanceRecordModel]:
        return await self._all(
            select(MaintenanceRecordModel)
            .where(MaintenanceRecordModel.user_id == user_id)
            .order_by(col(MaintenanceRecordModel.date).desc())
        )

    async def get_unsynced(self, user_id: str) -> list[MaintenanceRecordModel]:
        return await self._all(
            select(MaintenanceRecordModel).where(
                MaintenanceRecordModel.user_id == user_id,
                col(MaintenanceRecordModel.is_synced).is_(False),
            )
        )

    async def mark_as_synced(self, record_id: str) -> None:
        await self._execute_update(
            MaintenanceRecordModel.id == record_id, is_synced=True
        )

    async def delete_user_records(self, user_id: str) -> int:
        return await self._delete_where(MaintenanceRecordModel.user_id == user_id)


class CarLogDao(SQLModelDao[CarLogModel]):
    model = CarLogModel

    async def get_by_user(self, user_id: str) -> CarLogModel | None:
        return await self._first(
            select(CarLogModel).where(CarLogModel.user_id == user_id)
        )

    async def delete_by_user(self, user_id: str) -> int:
        return await self._delete_where(CarLogModel.user_id == user_id)


class AIScoreDao(SQLModelDao[AIScoreModel]):
    """AI score history; newest first."""

    model = AIScoreModel

    async def list_by_user(self, user_id: str) -> list[AIScoreModel]:
        return await self._all(
            select(AIScoreModel)
            .where(AIScoreModel.user_id == user_id)
            .order_by(col(AIScoreModel.created_at).desc())
        )

    async def list_by_car(self, user_id: str, car_id: str) -> list[AIScoreModel]:
        return await self._all(
            select(AIScoreModel)
            .where(AIScoreModel.user_id == user_id, AIScoreModel.car_id == car_id)
            .order_by(col(AIScoreModel.created_at).desc())
        )

    async def get_latest(
        self, user_id: str, car_id: str | None = None
    ) -> AIScoreModel | None:
        statement = select(AIScoreModel).where(AIScoreModel.user_id == user_id)
        if car_id is not None:
            statement = statement.where(AIScoreModel.car_id == car_id)
        return await self._first(
            statement.order_by(col(AIScoreModel.created_at).desc())
        )

    async def get_unsynced(self, user_id: str) -> list[AIScoreModel]:
        return await self._all(
            select(AIScoreModel).where(
                AIScoreModel.user_id == user_id,
                col(AIScoreModel.is_synced).is_(False),
            )
        )

    async def count_by_user(self, user_id: str) -> int:
        return (
            await self._scalar(
                select(func.count())
                .select_from(AIScoreModel)
                .where(AIScoreModel.user_id == user_id)
            )
            or 0
        )

    async def average_score(self, user_id: str) -> float | None:
        return await self._scalar(
            select(func.avg(AIScoreModel.score)).where(AIScoreModel.user_id == user_id)
        )

    async def mark_as_synced(
        self, score_ids: Sequence[str], timestamp: int | None = None
    ) -> int:
        if not score_ids:
            return 0
        return await self._execute_update(
            col(AIScoreModel.id).in_(list(score_ids)),
            is_synced=True,
            updated_at=timestamp if timestamp is not None else now_millis(),
        )

    async def delete_user_scores(self, user_id: str) -> int:
        return await self._delete_where(AIScoreModel.user_id == user_id)

    async def delete_car_scores(self, car_id: str) -> int:
        return await self._delete_where(AIScoreModel.car_id == car_id)


class ReminderDao(SQLModelDao[ReminderModel]):
    """Reminders ordered by due date, soonest first."""

    model = ReminderModel

    async def list_by_user(self, user_id: str) -> list[ReminderModel]:
        return await self._all(
            select(ReminderModel)
            .where(ReminderModel.user_id == user_id)
            .order_by(col(ReminderModel.due_date).asc())
        )

    async def list_active(self, user_id: str) -> list[ReminderModel]:
        return await self._all(
            select(ReminderModel)
            .where(
                ReminderModel.user_id == user_id,
                col(ReminderModel.is_completed).is_(False),
            )
            .order_by(col(ReminderModel.due_date).asc())
        )

    async def list_completed(self, user_id: str) -> list[ReminderModel]:
        return await self._all(
            select(ReminderModel)
            .where(
                ReminderModel.user_id == user_id,
                col(ReminderModel.is_completed).is_(True),
            )
            .order_by(col(ReminderModel.completed_at).desc())
        )

    async def list_by_car(self, user_id: str, car_id: str) -> list[ReminderModel]:
        return await self._all(
            select(ReminderModel)
            .where(ReminderModel.user_id == user_id, ReminderModel.car_id == car_id)
            .order_by(col(ReminderModel.due_date).asc())
        )

    async def list_by_type(self, user_id: str, type_: str) -> list[ReminderModel]:
        return await self._all(
            select(ReminderModel)
            .where(ReminderModel.user_id == user_id, ReminderModel.type == type_)
            .order_by(col(ReminderModel.due_date).asc())
        )

    async def list_upcoming(
        self, user_id: str, start_date: int, end_date: int
    ) -> list[ReminderModel]:
        return await self._all(
            select(ReminderModel)
            .where(
                ReminderModel.user_id == user_id,
                col(ReminderModel.is_completed).is_(False),
                col(ReminderModel.due_date) >= start_date,
                col(ReminderModel.due_date) <= end_date,
            )
            .order_by(col(ReminderModel.due_date).asc())
        )

    async def list_overdue(
        self, user_id: str, current_time: int | None = None
    ) -> list[ReminderModel]:
        now = current_time if current_time is not None else now_millis()
        return await self._all(
            select(ReminderModel)
            .where(
                ReminderModel.user_id == user_id,
                col(ReminderModel.is_completed).is_(False),
                col(ReminderModel.due_date) < now,
            )
            .order_by(col(ReminderModel.due_date).asc())
        )

    async def get_needing_notification(
        self, user_id: str, current_time: int | None = None
    ) -> list[ReminderModel]:
        """Active reminders whose notification window has opened but not fired."""
        now = current_time if current_time is not None else now_millis()
        window_start = col(ReminderModel.due_date) - (
            col(ReminderModel.reminder_days_before) * DAY_MILLIS
        )
        return await self._all(
            select(ReminderModel).where(
                ReminderModel.user_id == user_id,
                col(ReminderModel.is_completed).is_(False),
                col(ReminderModel.is_notification_enabled).is_(True),
                col(ReminderModel.notification_sent).is_(False),
                window_start <= now,
            )
        )

    async def get_unsynced(self, user_id: str) -> list[ReminderModel]:
        return await self._all(
            select(ReminderModel).where(
                ReminderModel.user_id == user_id,
                col(ReminderModel.is_synced).is_(False),
            )
        )

    async def count_active(self, user_id: str) -> int:
        return (
            await self._scalar(
                select(func.count())
                .select_from(ReminderModel)
                .where(
                    ReminderModel.user_id == user_id,
                    col(ReminderModel.is_completed).is_(False),
                )
            )
            or 0
        )

    async def count_overdue(self, user_id: str, current_time: int | None = None) -> int:
        now = current_time if current_time is not None else now_millis()
        return (
            await self._scalar(
                select(func.count())
                .select_from(ReminderModel)
                .where(
                    ReminderModel.user_id == user_id,
                    col(ReminderModel.is_completed).is_(False),
                    col(ReminderModel.due_date) < now,
                )
            )
            or 0
        )

    async def mark_completed(
        self, reminder_id: str, completed_at: int | None = None
    ) -> None:
        ts = completed_at if completed_at is not None else now_millis()
        await self._execute_update(
            ReminderModel.id == reminder_id,
            is_completed=True,
            completed_at=ts,
            updated_at=ts,
        )

    async def mark_notification_sent(
        self, reminder_id: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            ReminderModel.id == reminder_id,
            notification_sent=True,
            updated_at=timestamp if timestamp is not None else now_millis(),
        )

    async def reset_notification_sent(
        self, reminder_id: str, timestamp: int | None = None
    ) -> None:
        """Re-arm the notification of a recurring reminder."""
        await self._execute_update(
            ReminderModel.id == reminder_id,
            notification_sent=False,
            updated_at=timestamp if timestamp is not None else now_millis(),
        )

    async def mark_as_synced(
        self, reminder_id: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            ReminderModel.id == reminder_id,
            is_synced=True,
            updated_at=timestamp if timestamp is not None else now_millis(),
        )

    async def delete_user_reminders(self, user_id: str) -> int:
        return await self._delete_where(ReminderModel.user_id == user_id)

    async def delete_car_reminders(self, car_id: str) -> int:
        return await self._delete_where(ReminderModel.car_id == car_id)

    async def delete_old_completed(self, user_id: str, cutoff_time: int) -> int:
        deleted = await self._delete_where(
            ReminderModel.user_id == user_id,
            col(ReminderModel.is_completed).is_(True),
            col(ReminderModel.completed_at) < cutoff_time,
        )
        BusinessEvents.local_records_pruned(
            table=ReminderModel.__tablename__, deleted=deleted, user_id=user_id
        )
        return deleted


class AudioDiagnosticDao(SQLModelDao[AudioDiagnosticModel]):
    model = AudioDiagnosticModel

    async def list_by_user(self, user_id: str) -> list[AudioDiagnosticModel]:
        return await self._all(
            select(AudioDiagnosticModel)
            .where(AudioDiagnosticModel.user_id == user_id)
            .order_by(col(AudioDiagnosticModel.created_at).desc())
        )

    async def list_by_car(self, car_id: str) -> list[AudioDiagnosticModel]:
        return await self._all(
            select(AudioDiagnosticModel)
            .where(AudioDiagnosticModel.car_id == car_id)
            .order_by(col(AudioDiagnosticModel.created_at).desc())
        )

    async def get_recent(
        self, user_id: str, limit: int = 10
    ) -> list[AudioDiagnosticModel]:
        return await self._all(
            select(AudioDiagnosticModel)
            .where(AudioDiagnosticModel.user_id == user_id)
            .order_by(col(AudioDiagnosticModel.created_at).desc())
            .limit(limit)
        )

    async def list_critical(self, user_id: str) -> list[AudioDiagnosticModel]:
        return await self._all(
            select(AudioDiagnosticModel)
            .where(
                AudioDiagnosticModel.user_id == user_id,
                col(AudioDiagnosticModel.raw_score) < 50,
            )
            .order_by(col(AudioDiagnosticModel.created_at).desc())
        )

    async def get_unsynced(self) -> list[AudioDiagnosticModel]:
        return await self._all(
            select(AudioDiagnosticModel)
            .where(col(AudioDiagnosticModel.is_synced).is_(False))
            .order_by(col(AudioDiagnosticModel.created_at).asc())
        )

    async def get_for_retry(self) -> list[AudioDiagnosticModel]:
        return await self._all(
            select(AudioDiagnosticModel)
            .where(
                col(AudioDiagnosticModel.is_synced).is_(False),
                col(AudioDiagnosticModel.sync_attempts) < MAX_SYNC_ATTEMPTS,
            )
            .order_by(col(AudioDiagnosticModel.last_sync_attempt).asc())
        )

    async def mark_as_synced(self, diagnostic_id: str, timestamp: int | None = None) -> None:
        await self._execute_update(
            AudioDiagnosticModel.id == diagnostic_id,
            is_synced=True,
            updated_at=timestamp if timestamp is not None else now_millis(),
        )

    async def increment_sync_attempts(
        self, diagnostic_id: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            AudioDiagnosticModel.id == diagnostic_id,
            sync_attempts=AudioDiagnosticModel.sync_attempts + 1,
            last_sync_attempt=timestamp if timestamp is not None else now_millis(),
        )

    async def record_sync_error(
        self, diagnostic_id: str, error: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            AudioDiagnosticModel.id == diagnostic_id,
            sync_error=error,
            sync_attempts=AudioDiagnosticModel.sync_attempts + 1,
            last_sync_attempt=timestamp if timestamp is not None else now_millis(),
        )

    async def clear_sync_error(self, diagnostic_id: str) -> None:
        await self._execute_update(
            AudioDiagnosticModel.id == diagnostic_id, sync_error=None
        )

    async def mark_locally_modified(
        self, diagnostic_id: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            AudioDiagnosticModel.id == diagnostic_id,
            local_modified_at=timestamp if timestamp is not None else now_millis(),
            is_synced=False,
        )

    async def update_audio_url(
        self, diagnostic_id: str, url: str, timestamp: int | None = None
    ) -> None:
        """Store the remote URL once the recording has been uploaded."""
        await self._execute_update(
            AudioDiagnosticModel.id == diagnostic_id,
            audio_url=url,
            updated_at=timestamp if timestamp is not None else now_millis(),
        )

    async def count_by_car(self, car_id: str) -> int:
        return (
            await self._scalar(
                select(func.count())
                .select_from(AudioDiagnosticModel)
                .where(AudioDiagnosticModel.car_id == car_id)
            )
            or 0
        )

    async def average_score_for_car(self, car_id: str) -> float | None:
        return await self._scalar(
            select(func.avg(AudioDiagnosticModel.raw_score)).where(
                AudioDiagnosticModel.car_id == car_id
            )
        )

    async def list_by_date_range(
        self, user_id: str, start_time: int, end_time: int
    ) -> list[AudioDiagnosticModel]:
        return await self._all(
            select(AudioDiagnosticModel)
            .where(
                AudioDiagnosticModel.user_id == user_id,
                col(AudioDiagnosticModel.created_at).between(start_time, end_time),
            )
            .order_by(col(AudioDiagnosticModel.created_at).desc())
        )

    async def get_latest_for_car(self, car_id: str) -> AudioDiagnosticModel | None:
        return await self._first(
            select(AudioDiagnosticModel)
            .where(AudioDiagnosticModel.car_id == car_id)
            .order_by(col(AudioDiagnosticModel.created_at).desc())
        )

    async def delete_older_than(self, timestamp: int) -> int:
        deleted = await self._delete_where(
            col(AudioDiagnosticModel.created_at) < timestamp
        )
        BusinessEvents.local_records_pruned(
            table=AudioDiagnosticModel.__tablename__, deleted=deleted
        )
        return deleted

    async def delete_all_for_user(self, user_id: str) -> int:
        return await self._delete_where(AudioDiagnosticModel.user_id == user_id)


class VideoDiagnosticDao(SQLModelDao[VideoDiagnosticModel]):
    model = VideoDiagnosticModel

    async def list_by_user(self, user_id: str) -> list[VideoDiagnosticModel]:
        return await self._all(
            select(VideoDiagnosticModel)
            .where(VideoDiagnosticModel.user_id == user_id)
            .order_by(col(VideoDiagnosticModel.created_at).desc())
        )

    async def list_by_car(self, car_id: str) -> list[VideoDiagnosticModel]:
        return await self._all(
            select(VideoDiagnosticModel)
            .where(VideoDiagnosticModel.car_id == car_id)
            .order_by(col(VideoDiagnosticModel.created_at).desc())
        )

    async def get_recent(self, user_id: str, limit: int) -> list[VideoDiagnosticModel]:
        return await self._all(
            select(VideoDiagnosticModel)
            .where(VideoDiagnosticModel.user_id == user_id)
            .order_by(col(VideoDiagnosticModel.created_at).desc())
            .limit(limit)
        )

    async def list_critical(self, user_id: str) -> list[VideoDiagnosticModel]:
        return await self._all(
            select(VideoDiagnosticModel)
            .where(
                VideoDiagnosticModel.user_id == user_id,
                col(VideoDiagnosticModel.urgency_level).in_(["CRITICAL", "HIGH"]),
            )
            .order_by(col(VideoDiagnosticModel.created_at).desc())
        )

    async def list_problematic(self, user_id: str) -> list[VideoDiagnosticModel]:
        return await self._all(
            select(VideoDiagnosticModel)
            .where(
                VideoDiagnosticModel.user_id == user_id,
                or_(
                    col(VideoDiagnosticModel.smoke_detected).is_(True),
                    col(VideoDiagnosticModel.vibration_detected).is_(True),
                ),
            )
            .order_by(col(VideoDiagnosticModel.created_at).desc())
        )

    async def list_low_score(
        self, user_id: str, max_score: int = 60
    ) -> list[VideoDiagnosticModel]:
        return await self._all(
            select(VideoDiagnosticModel)
            .where(
                VideoDiagnosticModel.user_id == user_id,
                col(VideoDiagnosticModel.final_score) <= max_score,
            )
            .order_by(col(VideoDiagnosticModel.created_at).desc())
        )

    async def get_latest_for_car(self, car_id: str) -> VideoDiagnosticModel | None:
        return await self._first(
            select(VideoDiagnosticModel)
            .where(VideoDiagnosticModel.car_id == car_id)
            .order_by(col(VideoDiagnosticModel.created_at).desc())
        )

    async def average_score_for_car(self, car_id: str) -> float | None:
        return await self._scalar(
            select(func.avg(VideoDiagnosticModel.final_score)).where(
                VideoDiagnosticModel.car_id == car_id
            )
        )

    async def count_smoke_detections(self, car_id: str) -> int:
        return (
            await self._scalar(
                select(func.count())
                .select_from(VideoDiagnosticModel)
                .where(
                    VideoDiagnosticModel.car_id == car_id,
                    col(VideoDiagnosticModel.smoke_detected).is_(True),
                )
            )
            or 0
        )

    async def get_unsynced(self) -> list[VideoDiagnosticModel]:
        return await self._all(
            select(VideoDiagnosticModel)
            .where(col(VideoDiagnosticModel.is_synced).is_(False))
            .order_by(col(VideoDiagnosticModel.created_at).asc())
        )

    async def mark_as_synced(self, diagnostic_id: str, timestamp: int | None = None) -> None:
        await self._execute_update(
            VideoDiagnosticModel.id == diagnostic_id,
            is_synced=True,
            updated_at=timestamp if timestamp is not None else now_millis(),
        )

    async def increment_sync_attempts(
        self, diagnostic_id: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            VideoDiagnosticModel.id == diagnostic_id,
            sync_attempts=VideoDiagnosticModel.sync_attempts + 1,
            last_sync_attempt=timestamp if timestamp is not None else now_millis(),
        )

    async def record_sync_error(
        self, diagnostic_id: str, error: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            VideoDiagnosticModel.id == diagnostic_id,
            sync_error=error,
            sync_attempts=VideoDiagnosticModel.sync_attempts + 1,
            last_sync_attempt=timestamp if timestamp is not None else now_millis(),
        )

    async def clear_sync_error(self, diagnostic_id: str) -> None:
        await self._execute_update(
            VideoDiagnosticModel.id == diagnostic_id, sync_error=None
        )

    async def mark_locally_modified(
        self, diagnostic_id: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            VideoDiagnosticModel.id == diagnostic_id,
            local_modified_at=timestamp if timestamp is not None else now_millis(),
            is_synced=False,
        )

    async def update_video_url(
        self, diagnostic_id: str, url: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            VideoDiagnosticModel.id == diagnostic_id,
            video_url=url,
            updated_at=timestamp if timestamp is not None else now_millis(),
        )

    def _expired_criteria(self, current_time: int | None) -> tuple:
        now = current_time if current_time is not None else now_millis()
        return (
            col(VideoDiagnosticModel.auto_delete_at) > 0,
            col(VideoDiagnosticModel.auto_delete_at) < now,
        )

    async def get_expired(
        self, current_time: int | None = None
    ) -> list[VideoDiagnosticModel]:
        return await self._all(
            select(VideoDiagnosticModel).where(*self._expired_criteria(current_time))
        )

    async def delete_expired(self, current_time: int | None = None) -> int:
        """Delete recordings past their auto-delete deadline (privacy retention)."""
        deleted = await self._delete_where(*self._expired_criteria(current_time))
        BusinessEvents.local_records_pruned(
            table=VideoDiagnosticModel.__tablename__, deleted=deleted
        )
        return deleted

    async def delete_user_diagnostics(self, user_id: str) -> int:
        return await self._delete_where(VideoDiagnosticModel.user_id == user_id)


class CarImageDao(SQLModelDao[CarImageModel]):
    """Per-user car image cache."""

    model = CarImageModel

    @staticmethod
    def generate_car_key(user_id: str, make: str, model: str, year: int) -> str:
        """Build the per-user cache key, e.g. ``user123_audi_rs6_2024``."""
        key = f"{user_id[:10]}_{make.lower()}_{model.lower()}_{year}"
        return key.replace(" ", "_").replace("-", "_")

    async def get_car_image(self, car_key: str) -> CarImageModel | None:
        return await self.get_by_id(car_key)

    async def list_user_images(self, user_id: str) -> list[CarImageModel]:
        return await self._all(
            select(CarImageModel).where(CarImageModel.user_id == user_id)
        )

    async def update_last_accessed(
        self, car_key: str, timestamp: int | None = None
    ) -> None:
        await self._execute_update(
            CarImageModel.car_key == car_key,
            last_accessed_at=timestamp if timestamp is not None else now_millis(),
        )

    async def delete_expired(self, expiry_time: int) -> int:
        deleted = await self._delete_where(col(CarImageModel.cached_at) < expiry_time)
        BusinessEvents.local_records_pruned(
            table=CarImageModel.__tablename__, deleted=deleted
        )
        return deleted

    async def delete_user_images(self, user_id: str) -> int:
        return await self._delete_where(CarImageModel.user_id == user_id)
