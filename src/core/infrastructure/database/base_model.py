"""Base SQLModel for local record tables."""

from sqlmodel import Field, SQLModel

from src.core.domain.clock import now_millis


class BaseModel(SQLModel):
    """Base model with the columns shared by per-user record tables.

    所有时间戳字段使用 epoch 毫秒整数存储。
    """

    id: str = Field(primary_key=True)
    user_id: str = Field(index=True, nullable=False)


class SyncTrackedModel(BaseModel):
    """Record whose upload to the remote store is retried until it succeeds."""

    is_synced: bool = Field(default=False, nullable=False)
    sync_attempts: int = Field(default=0, nullable=False)
    last_sync_attempt: int = Field(default=0, nullable=False)
    sync_error: str | None = Field(default=None, nullable=True)
    local_modified_at: int = Field(default_factory=now_millis, nullable=False)
    created_at: int = Field(default_factory=now_millis, nullable=False, index=True)
    updated_at: int = Field(default_factory=now_millis, nullable=False)
