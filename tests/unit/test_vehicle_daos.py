"""本地车辆记录 DAO 单元测试（内存 SQLite）。"""

import pytest
from sqlalchemy import text

from src.core.domain.exceptions import EntityNotFoundError
from src.modules.vehicles.infrastructure.daos import DAY_MILLIS, CarImageDao
from src.modules.vehicles.infrastructure.database import AutoBrainDatabase
from src.modules.vehicles.infrastructure.models import (
    AIScoreModel,
    AudioDiagnosticModel,
    CarImageModel,
    CarLogModel,
    MaintenanceRecordModel,
    ReminderModel,
    VideoDiagnosticModel,
)

pytestmark = pytest.mark.anyio

NOW = 1_700_000_000_000


def _reminder(reminder_id: str, **overrides) -> ReminderModel:
    data = {
        "id": reminder_id,
        "user_id": "user-1",
        "car_id": "car-1",
        "type": "OIL_CHANGE",
        "title": "Vidange",
        "due_date": NOW + 30 * DAY_MILLIS,
    }
    data.update(overrides)
    return ReminderModel(**data)


def _audio(diagnostic_id: str, **overrides) -> AudioDiagnosticModel:
    data = {
        "id": diagnostic_id,
        "user_id": "user-1",
        "car_id": "car-1",
        "audio_file_path": f"/data/audio/{diagnostic_id}.wav",
        "raw_score": 80,
        "created_at": NOW,
    }
    data.update(overrides)
    return AudioDiagnosticModel(**data)


def _video(diagnostic_id: str, **overrides) -> VideoDiagnosticModel:
    data = {
        "id": diagnostic_id,
        "user_id": "user-1",
        "car_id": "car-1",
        "video_file_path": f"/data/video/{diagnostic_id}.mp4",
        "created_at": NOW,
    }
    data.update(overrides)
    return VideoDiagnosticModel(**data)


# ============================================
# Schema
# ============================================


class TestSchema:
    def test_declares_seven_tables(self):
        assert AutoBrainDatabase.table_names() == [
            "maintenance_records",
            "car_logs",
            "ai_scores",
            "reminders",
            "audio_diagnostics",
            "video_diagnostics",
            "car_images",
        ]
        assert AutoBrainDatabase.VERSION == 10

    async def test_list_columns_are_stored_as_json_text(self, database, db_session):
        dao = database.maintenance_record_dao(db_session)
        await dao.insert(
            MaintenanceRecordModel(
                id="m1", user_id="user-1", type="OIL_CHANGE", date=NOW,
                images=["a.jpg", "b.jpg"],
            )
        )

        raw = await db_session.execute(
            text("SELECT images FROM maintenance_records WHERE id = 'm1'")
        )

        assert raw.scalar() == '["a.jpg","b.jpg"]'

    async def test_malformed_column_text_reads_as_empty(self, database, db_session):
        dao = database.maintenance_record_dao(db_session)
        await dao.insert(
            MaintenanceRecordModel(id="m1", user_id="user-1", type="TIRES", date=NOW)
        )
        await db_session.execute(
            text("UPDATE maintenance_records SET images = '{broken' WHERE id = 'm1'")
        )

        record = await dao.get_by_id("m1")

        assert record is not None
        assert record.images == []

    async def test_map_column_round_trips(self, database, db_session):
        dao = database.video_diagnostic_dao(db_session)
        metadata = {"fps": 30, "frames": [1, 2], "device": {"model": "Pixel"}}
        await dao.insert(_video("v1", analysis_metadata=metadata))

        stored = await dao.get_by_id("v1")

        assert stored.analysis_metadata == metadata


# ============================================
# Sessions
# ============================================


class TestDatabaseSession:
    async def test_session_commits_on_exit(self, database):
        async with database.session() as session:
            await database.reminder_dao(session).insert(_reminder("r1"))

        async with database.session() as session:
            stored = await database.reminder_dao(session).get_by_id("r1")

        assert stored is not None
        assert stored.title == "Vidange"

    async def test_session_rolls_back_on_error(self, database):
        with pytest.raises(RuntimeError):
            async with database.session() as session:
                await database.reminder_dao(session).insert(_reminder("r1"))
                raise RuntimeError("abort")

        async with database.session() as session:
            assert await database.reminder_dao(session).count() == 0

    async def test_drop_all_removes_tables(self, database):
        await database.drop_all()

        async with database.engine.connect() as conn:
            result = await conn.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table'")
            )
            assert result.scalars().all() == []


# ============================================
# Base DAO behaviour
# ============================================


class TestBaseDao:
    async def test_insert_replaces_existing_row(self, database, db_session):
        dao = database.car_log_dao(db_session)
        await dao.insert(CarLogModel(id="c1", user_id="user-1", make="Renault"))
        await dao.insert(CarLogModel(id="c1", user_id="user-1", make="Peugeot"))

        assert await dao.count() == 1
        assert (await dao.get_by_user("user-1")).make == "Peugeot"

    async def test_update_missing_row_raises(self, database, db_session):
        dao = database.car_log_dao(db_session)

        with pytest.raises(EntityNotFoundError):
            await dao.update(CarLogModel(id="missing", user_id="user-1"))

    async def test_delete_and_clear(self, database, db_session):
        dao = database.car_log_dao(db_session)
        await dao.insert_many(
            [
                CarLogModel(id="c1", user_id="user-1"),
                CarLogModel(id="c2", user_id="user-2"),
                CarLogModel(id="c3", user_id="user-3"),
            ]
        )

        assert await dao.delete_by_id("c1") is True
        assert await dao.delete_by_id("c1") is False
        assert await dao.delete_by_user("user-2") == 1
        assert await dao.clear_all() == 1
        assert await dao.count() == 0


# ============================================
# MaintenanceRecordDao
# ============================================


class TestMaintenanceRecordDao:
    async def test_list_newest_first_and_sync(self, database, db_session):
        dao = database.maintenance_record_dao(db_session)
        await dao.insert_many(
            [
                MaintenanceRecordModel(id="old", user_id="user-1", type="OIL_CHANGE", date=NOW - DAY_MILLIS),
                MaintenanceRecordModel(id="new", user_id="user-1", type="BRAKES", date=NOW),
                MaintenanceRecordModel(id="other", user_id="user-2", type="BRAKES", date=NOW),
            ]
        )

        records = await dao.list_by_user("user-1")
        assert [r.id for r in records] == ["new", "old"]

        await dao.mark_as_synced("new")
        unsynced = await dao.get_unsynced("user-1")
        assert [r.id for r in unsynced] == ["old"]

        assert await dao.delete_user_records("user-1") == 2


# ============================================
# AIScoreDao
# ============================================


class TestAIScoreDao:
    async def test_latest_average_and_sync(self, database, db_session):
        dao = database.ai_score_dao(db_session)
        await dao.insert_many(
            [
                AIScoreModel(id="s1", user_id="user-1", car_id="car-1", score=60,
                             condition="Fair", risk_level="Medium", created_at=NOW,
                             red_flags=["oil leak"]),
                AIScoreModel(id="s2", user_id="user-1", car_id="car-2", score=90,
                             condition="Excellent", risk_level="Low", created_at=NOW + 1),
            ]
        )

        latest = await dao.get_latest("user-1")
        assert latest.id == "s2"
        latest_car_1 = await dao.get_latest("user-1", car_id="car-1")
        assert latest_car_1.red_flags == ["oil leak"]
        assert [s.id for s in await dao.list_by_car("user-1", "car-1")] == ["s1"]
        assert await dao.count_by_user("user-1") == 2
        assert await dao.average_score("user-1") == pytest.approx(75.0)
        assert await dao.average_score("nobody") is None

        assert await dao.mark_as_synced(["s1", "s2"], timestamp=NOW + 5) == 2
        assert await dao.get_unsynced("user-1") == []
        assert (await dao.get_by_id("s1")).updated_at == NOW + 5

        assert await dao.mark_as_synced([]) == 0
        assert await dao.delete_car_scores("car-2") == 1
        assert await dao.delete_user_scores("user-1") == 1


# ============================================
# ReminderDao
# ============================================


class TestReminderDao:
    async def test_active_completed_and_overdue(self, database, db_session):
        dao = database.reminder_dao(db_session)
        await dao.insert_many(
            [
                _reminder("late", due_date=NOW - DAY_MILLIS),
                _reminder("soon", due_date=NOW + 2 * DAY_MILLIS, type="INSURANCE"),
                _reminder("far", due_date=NOW + 60 * DAY_MILLIS),
            ]
        )

        assert [r.id for r in await dao.list_by_user("user-1")] == ["late", "soon", "far"]
        assert [r.id for r in await dao.list_overdue("user-1", NOW)] == ["late"]
        assert await dao.count_overdue("user-1", NOW) == 1
        upcoming = await dao.list_upcoming("user-1", NOW, NOW + 7 * DAY_MILLIS)
        assert [r.id for r in upcoming] == ["soon"]
        assert [r.id for r in await dao.list_by_type("user-1", "INSURANCE")] == ["soon"]

        await dao.mark_completed("late", completed_at=NOW)

        assert [r.id for r in await dao.list_active("user-1")] == ["soon", "far"]
        assert [r.id for r in await dao.list_completed("user-1")] == ["late"]
        assert await dao.count_active("user-1") == 2
        assert (await dao.get_by_id("late")).completed_at == NOW

    async def test_notification_window_honours_days_before(self, database, db_session):
        dao = database.reminder_dao(db_session)
        await dao.insert_many(
            [
                # 3 days out, 7-day window: due for notification
                _reminder("inside", due_date=NOW + 3 * DAY_MILLIS),
                # 3 days out, 1-day window: not yet
                _reminder("outside", due_date=NOW + 3 * DAY_MILLIS, reminder_days_before=1),
                _reminder("muted", due_date=NOW, is_notification_enabled=False),
                _reminder("sent", due_date=NOW, notification_sent=True),
            ]
        )

        due = await dao.get_needing_notification("user-1", NOW)
        assert [r.id for r in due] == ["inside"]

        await dao.mark_notification_sent("inside", NOW)
        assert await dao.get_needing_notification("user-1", NOW) == []

        await dao.reset_notification_sent("inside", NOW)
        assert [r.id for r in await dao.get_needing_notification("user-1", NOW)] == ["inside"]

    async def test_sync_and_cleanup(self, database, db_session):
        dao = database.reminder_dao(db_session)
        await dao.insert_many(
            [
                _reminder("r1", is_completed=True, completed_at=NOW - 90 * DAY_MILLIS),
                _reminder("r2", is_completed=True, completed_at=NOW),
                _reminder("r3", car_id="car-2"),
            ]
        )

        await dao.mark_as_synced("r1")
        assert {r.id for r in await dao.get_unsynced("user-1")} == {"r2", "r3"}

        assert await dao.delete_old_completed("user-1", NOW - 30 * DAY_MILLIS) == 1
        assert await dao.delete_car_reminders("car-2") == 1
        assert await dao.delete_user_reminders("user-1") == 1


# ============================================
# AudioDiagnosticDao
# ============================================


class TestAudioDiagnosticDao:
    async def test_sync_tracking(self, database, db_session):
        dao = database.audio_diagnostic_dao(db_session)
        await dao.insert_many([_audio("a1"), _audio("a2", created_at=NOW + 1)])

        assert [d.id for d in await dao.get_unsynced()] == ["a1", "a2"]

        await dao.record_sync_error("a1", "timeout", timestamp=NOW + 10)
        failed = await dao.get_by_id("a1")
        assert failed.sync_error == "timeout"
        assert failed.sync_attempts == 1
        assert failed.last_sync_attempt == NOW + 10

        for _ in range(4):
            await dao.increment_sync_attempts("a1", timestamp=NOW + 20)
        assert [d.id for d in await dao.get_for_retry()] == ["a2"]

        await dao.clear_sync_error("a1")
        await dao.mark_as_synced("a2")
        assert (await dao.get_by_id("a1")).sync_error is None
        assert [d.id for d in await dao.get_unsynced()] == ["a1"]

        await dao.mark_locally_modified("a2", timestamp=NOW + 30)
        modified = await dao.get_by_id("a2")
        assert modified.is_synced is False
        assert modified.local_modified_at == NOW + 30

    async def test_queries_and_cleanup(self, database, db_session):
        dao = database.audio_diagnostic_dao(db_session)
        await dao.insert_many(
            [
                _audio("a1", raw_score=40, detected_issues=["knocking"]),
                _audio("a2", raw_score=90, created_at=NOW + 1),
                _audio("a3", car_id="car-2", created_at=NOW - 10 * DAY_MILLIS),
            ]
        )

        assert [d.id for d in await dao.list_critical("user-1")] == ["a1"]
        assert [d.id for d in await dao.get_recent("user-1", limit=2)] == ["a2", "a1"]
        assert [d.id for d in await dao.list_by_car("car-1")] == ["a2", "a1"]
        assert await dao.count_by_car("car-1") == 2
        assert await dao.average_score_for_car("car-1") == pytest.approx(65.0)
        assert (await dao.get_latest_for_car("car-1")).id == "a2"
        in_range = await dao.list_by_date_range("user-1", NOW, NOW + 1)
        assert [d.id for d in in_range] == ["a2", "a1"]
        assert (await dao.get_by_id("a1")).detected_issues == ["knocking"]

        await dao.update_audio_url("a1", "https://storage.example/a1.wav")
        assert (await dao.get_by_id("a1")).audio_url == "https://storage.example/a1.wav"

        assert await dao.delete_older_than(NOW) == 1
        assert await dao.delete_all_for_user("user-1") == 2


# ============================================
# VideoDiagnosticDao
# ============================================


class TestVideoDiagnosticDao:
    async def test_filters(self, database, db_session):
        dao = database.video_diagnostic_dao(db_session)
        await dao.insert_many(
            [
                _video("v1", urgency_level="HIGH", smoke_detected=True, final_score=45),
                _video("v2", urgency_level="LOW", created_at=NOW + 1, final_score=95),
                _video("v3", urgency_level="CRITICAL", vibration_detected=True,
                       created_at=NOW + 2, final_score=30),
            ]
        )

        assert [d.id for d in await dao.list_critical("user-1")] == ["v3", "v1"]
        assert [d.id for d in await dao.list_problematic("user-1")] == ["v3", "v1"]
        assert [d.id for d in await dao.list_low_score("user-1")] == ["v3", "v1"]
        assert [d.id for d in await dao.get_recent("user-1", 1)] == ["v3"]
        assert await dao.count_smoke_detections("car-1") == 1
        assert await dao.average_score_for_car("car-1") == pytest.approx(170 / 3)
        assert (await dao.get_latest_for_car("car-1")).id == "v3"

    async def test_auto_delete_and_sync(self, database, db_session):
        dao = database.video_diagnostic_dao(db_session)
        await dao.insert_many(
            [
                _video("keep", auto_delete_at=0),
                _video("expired", auto_delete_at=NOW - 1),
                _video("pending", auto_delete_at=NOW + DAY_MILLIS),
            ]
        )

        assert [d.id for d in await dao.get_expired(NOW)] == ["expired"]
        assert await dao.delete_expired(NOW) == 1
        assert await dao.get_by_id("expired") is None

        await dao.update_video_url("keep", "https://storage.example/keep.mp4")
        await dao.record_sync_error("pending", "quota")
        await dao.mark_as_synced("keep")
        assert [d.id for d in await dao.get_unsynced()] == ["pending"]
        assert (await dao.get_by_id("pending")).sync_attempts == 1
        assert (await dao.get_by_id("keep")).video_url.endswith("keep.mp4")

        assert await dao.delete_user_diagnostics("user-1") == 2


# ============================================
# CarImageDao
# ============================================


class TestCarImageDao:
    def test_generate_car_key(self):
        key = CarImageDao.generate_car_key("user123456789", "Audi", "RS 6", 2024)
        assert key == "user123456_audi_rs_6_2024"
        assert CarImageDao.generate_car_key("u1", "Mercedes-Benz", "C", 2020) == (
            "u1_mercedes_benz_c_2020"
        )

    async def test_cache_lifecycle(self, database, db_session):
        dao = database.car_image_dao(db_session)
        key = CarImageDao.generate_car_key("user-1", "Audi", "RS6", 2024)
        await dao.insert(
            CarImageModel(
                car_key=key, user_id="user-1", make="Audi", model="RS6", year=2024,
                image_url="https://img.example/rs6.png", source="gemini+stock",
                cached_at=NOW,
            )
        )

        await dao.update_last_accessed(key, NOW + 5)
        image = await dao.get_car_image(key)
        assert image.last_accessed_at == NOW + 5
        assert [i.car_key for i in await dao.list_user_images("user-1")] == [key]

        assert await dao.delete_expired(NOW + 1) == 1
        assert await dao.get_car_image(key) is None
        assert await dao.delete_user_images("user-1") == 0
