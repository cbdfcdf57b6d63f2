"""Application configuration."""

from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "autobrain"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Local database（本地 SQLite，保存车辆相关记录）
    LOCAL_DATABASE_NAME: str = "autobrain_database"
    LOCAL_DATABASE_URL: str | None = None
    LOCAL_DATABASE_ECHO: bool = False

    @computed_field
    @property
    def local_database_url(self) -> str:
        """获取本地数据库 URL，默认使用 LOCAL_DATABASE_NAME 生成 SQLite 文件路径。"""
        return (
            self.LOCAL_DATABASE_URL
            or f"sqlite+aiosqlite:///./{self.LOCAL_DATABASE_NAME}.db"
        )

    # Firestore
    FIRESTORE_PROJECT_ID: str | None = None
    FIRESTORE_DATABASE: str = "(default)"
    FIRESTORE_USERS_COLLECTION: str = "users"


settings = Settings()
