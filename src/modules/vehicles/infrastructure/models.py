"""Local vehicle record database models.

List and map columns are stored as JSON text through JsonStringList and
JsonStringMap. All timestamps are epoch milliseconds.
"""

from typing import Any

from sqlmodel import Field, SQLModel

from src.core.domain.clock import now_millis
from src.core.infrastructure.database.base_model import BaseModel, SyncTrackedModel
from src.core.infrastructure.database.converters import JsonStringList, JsonStringMap


class MaintenanceRecordModel(BaseModel, table=True):
    """Maintenance record database model."""

    __tablename__ = "maintenance_records"

    type: str = Field(nullable=False)
    description: str = Field(default="", nullable=False)
    date: int = Field(nullable=False, index=True)
    mileage: int = Field(default=0, nullable=False)
    cost: float = Field(default=0.0, nullable=False)
    service_provider: str = Field(default="", nullable=False)
    notes: str = Field(default="", nullable=False)
    images: list[str] = Field(default_factory=list, sa_type=JsonStringList)
    next_service_due: int = Field(default=0, nullable=False)
    is_synced: bool = Field(default=False, nullable=False)


class CarLogModel(BaseModel, table=True):
    """Car log database model. One row per user's registered car."""

    __tablename__ = "car_logs"

    make: str = Field(default="", nullable=False)
    model: str = Field(default="", nullable=False)
    year: int = Field(default=0, nullable=False)
    vin: str = Field(default="", nullable=False)
    color: str = Field(default="", nullable=False)
    license_plate: str = Field(default="", nullable=False)
    total_expenses: float = Field(default=0.0, nullable=False)
    created_at: int = Field(default_factory=now_millis, nullable=False)
    updated_at: int = Field(default_factory=now_millis, nullable=False)


class AIScoreModel(BaseModel, table=True):
    """AI score database model (car condition assessment, 0-100)."""

    __tablename__ = "ai_scores"

    car_id: str = Field(nullable=False, index=True)
    score: int = Field(nullable=False)
    condition: str = Field(nullable=False)
    risk_level: str = Field(nullable=False)

    engine_score: int = Field(default=0, nullable=False)
    transmission_score: int = Field(default=0, nullable=False)
    chassis_score: int = Field(default=0, nullable=False)
    electrical_score: int = Field(default=0, nullable=False)
    body_score: int = Field(default=0, nullable=False)

    observations: list[str] = Field(default_factory=list, sa_type=JsonStringList)
    recommendations: list[str] = Field(default_factory=list, sa_type=JsonStringList)
    red_flags: list[str] = Field(default_factory=list, sa_type=JsonStringList)

    confidence: float = Field(default=0.0, nullable=False)

    car_make: str = Field(default="", nullable=False)
    car_model: str = Field(default="", nullable=False)
    car_year: int = Field(default=0, nullable=False)
    mileage: int = Field(default=0, nullable=False)

    # FULL_SCAN, ENGINE_SOUND, VIDEO_ANALYSIS
    analysis_type: str = Field(default="FULL_SCAN", nullable=False)
    audio_url: str = Field(default="", nullable=False)
    video_url: str = Field(default="", nullable=False)
    image_urls: list[str] = Field(default_factory=list, sa_type=JsonStringList)

    is_synced: bool = Field(default=False, nullable=False)
    created_at: int = Field(default_factory=now_millis, nullable=False, index=True)
    updated_at: int = Field(default_factory=now_millis, nullable=False)


class ReminderModel(BaseModel, table=True):
    """Reminder database model (oil change, inspection, insurance, ...)."""

    __tablename__ = "reminders"

    car_id: str = Field(nullable=False, index=True)

    # OIL_CHANGE, TECHNICAL_INSPECTION, INSURANCE, MAINTENANCE, CUSTOM
    type: str = Field(nullable=False)
    title: str = Field(nullable=False)
    description: str = Field(default="", nullable=False)

    due_date: int = Field(nullable=False, index=True)
    due_mileage: int = Field(default=0, nullable=False)

    reminder_days_before: int = Field(default=7, nullable=False)
    is_notification_enabled: bool = Field(default=True, nullable=False)
    notification_sent: bool = Field(default=False, nullable=False)

    is_completed: bool = Field(default=False, nullable=False)
    completed_at: int = Field(default=0, nullable=False)
    priority: str = Field(default="MEDIUM", nullable=False)

    is_recurring: bool = Field(default=False, nullable=False)
    recurring_interval_days: int = Field(default=0, nullable=False)
    recurring_interval_mileage: int = Field(default=0, nullable=False)

    is_synced: bool = Field(default=False, nullable=False)
    created_at: int = Field(default_factory=now_millis, nullable=False)
    updated_at: int = Field(default_factory=now_millis, nullable=False)


class AudioDiagnosticModel(SyncTrackedModel, table=True):
    """Engine sound diagnostic database model."""

    __tablename__ = "audio_diagnostics"

    car_id: str = Field(nullable=False, index=True)

    audio_file_path: str = Field(nullable=False)
    audio_url: str = Field(default="", nullable=False)
    duration_ms: int = Field(default=0, nullable=False)

    top_sound_label: str = Field(default="", nullable=False)
    top_sound_confidence: float = Field(default=0.0, nullable=False)
    # ["knocking:0.8", "rattling:0.6"]
    all_detected_sounds: list[str] = Field(
        default_factory=list, sa_type=JsonStringList
    )

    raw_score: int = Field(default=0, nullable=False)
    normalized_score: float = Field(default=0.0, nullable=False)
    health_status: str = Field(default="", nullable=False)
    urgency_level: str = Field(default="", nullable=False)

    detected_issues: list[str] = Field(default_factory=list, sa_type=JsonStringList)
    recommendations: list[str] = Field(default_factory=list, sa_type=JsonStringList)
    critical_warning: str = Field(default="", nullable=False)

    min_repair_cost: float = Field(default=0.0, nullable=False)
    max_repair_cost: float = Field(default=0.0, nullable=False)

    maintenance_penalty: float = Field(default=0.0, nullable=False)
    overdue_services: list[str] = Field(default_factory=list, sa_type=JsonStringList)


class VideoDiagnosticModel(SyncTrackedModel, table=True):
    """Exhaust smoke / vibration video diagnostic database model."""

    __tablename__ = "video_diagnostics"

    car_id: str = Field(nullable=False, index=True)

    video_file_path: str = Field(nullable=False)
    video_url: str = Field(default="", nullable=False)
    duration_ms: int = Field(default=0, nullable=False)
    video_hash: str = Field(default="", nullable=False)

    smoke_detected: bool = Field(default=False, nullable=False)
    smoke_type: str = Field(default="", nullable=False)  # black, white, blue, none
    smoke_confidence: float = Field(default=0.0, nullable=False)
    smoke_severity: int = Field(default=0, nullable=False)  # 0-5

    vibration_detected: bool = Field(default=False, nullable=False)
    vibration_level: str = Field(default="", nullable=False)
    vibration_confidence: float = Field(default=0.0, nullable=False)
    vibration_severity: int = Field(default=0, nullable=False)  # 0-5

    total_frames_analyzed: int = Field(default=0, nullable=False)
    smokey_frames_count: int = Field(default=0, nullable=False)
    vibration_frames_count: int = Field(default=0, nullable=False)
    average_brightness: float = Field(default=0.0, nullable=False)
    is_stable_video: bool = Field(default=True, nullable=False)

    raw_score: int = Field(default=100, nullable=False)
    final_score: int = Field(default=100, nullable=False)
    health_status: str = Field(default="", nullable=False)
    urgency_level: str = Field(default="", nullable=False)

    detected_issues: list[str] = Field(default_factory=list, sa_type=JsonStringList)
    recommendations: list[str] = Field(default_factory=list, sa_type=JsonStringList)
    critical_warning: str = Field(default="", nullable=False)

    estimated_min_cost: float = Field(default=0.0, nullable=False)
    estimated_max_cost: float = Field(default=0.0, nullable=False)

    carnet_impact_score: int = Field(default=0, nullable=False)
    overdue_maintenance_items: list[str] = Field(
        default_factory=list, sa_type=JsonStringList
    )

    video_quality: str = Field(default="", nullable=False)
    quality_issues: list[str] = Field(default_factory=list, sa_type=JsonStringList)
    analysis_metadata: dict[str, Any] = Field(
        default_factory=dict, sa_type=JsonStringMap
    )

    has_storage_consent: bool = Field(default=False, nullable=False)
    anonymized: bool = Field(default=False, nullable=False)
    auto_delete_at: int = Field(default=0, nullable=False)


class CarImageModel(SQLModel, table=True):
    """Cached car image, keyed per user and car."""

    __tablename__ = "car_images"

    # "userId_make_model_year", e.g. "user123_audi_rs6_2024"
    car_key: str = Field(primary_key=True)
    user_id: str = Field(nullable=False, index=True)
    make: str = Field(nullable=False)
    model: str = Field(nullable=False)
    year: int = Field(nullable=False)
    image_url: str = Field(nullable=False)
    is_transparent: bool = Field(default=False, nullable=False)
    source: str = Field(default="", nullable=False)
    cache_version: int = Field(default=1, nullable=False)
    cached_at: int = Field(default_factory=now_millis, nullable=False)
    last_accessed_at: int = Field(default_factory=now_millis, nullable=False)
