"""
pytest 配置和共享 fixtures。

测试分层：
- unit/: 单元测试（不依赖外部服务；本地表使用内存 SQLite）

使用方法：
    # 运行所有测试
    uv run pytest

    # 运行带覆盖率
    uv run pytest --cov=src --cov-report=html
"""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.config import Settings
from src.modules.vehicles.infrastructure.database import AutoBrainDatabase

# ============================================
# 配置 Fixtures
# ============================================


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    """测试环境配置。"""
    return Settings(
        ENVIRONMENT="local",
        LOG_LEVEL="DEBUG",
        LOCAL_DATABASE_URL="sqlite+aiosqlite://",
        FIRESTORE_PROJECT_ID="autobrain-test",
    )


# ============================================
# 数据库 Fixtures
# ============================================


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """内存 SQLite 引擎，每个测试独立建表。"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await AutoBrainDatabase(engine).create_all()

    yield engine

    await engine.dispose()


@pytest.fixture
def database(test_engine: AsyncEngine) -> AutoBrainDatabase:
    return AutoBrainDatabase(test_engine)


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """提供事务回滚的数据库会话。"""
    async_session = sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        async with session.begin():
            yield session
            await session.rollback()


# ============================================
# 文档存储 Fixtures
# ============================================


class InMemoryDocumentStore:
    """In-memory DocumentStore for tests. Mirrors Firestore semantics."""

    def __init__(self, documents: dict[str, dict[str, dict[str, Any]]] | None = None):
        self.documents = documents or {}
        self.calls: list[tuple[str, str, str]] = []

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        self.calls.append(("get", collection, doc_id))
        doc = self.documents.get(collection, {}).get(doc_id)
        return dict(doc) if doc is not None else None

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.calls.append(("set", collection, doc_id))
        self.documents.setdefault(collection, {})[doc_id] = dict(data)

    async def update(
        self, collection: str, doc_id: str, fields: dict[str, Any]
    ) -> None:
        self.calls.append(("update", collection, doc_id))
        doc = self.documents.get(collection, {}).get(doc_id)
        if doc is None:
            raise LookupError(f"No document to update: {collection}/{doc_id}")
        doc.update(fields)


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def failing_document_store() -> AsyncMock:
    """每个调用都抛出传输错误的文档存储。"""
    store = AsyncMock()
    error = ConnectionError("firestore unavailable")
    store.get = AsyncMock(side_effect=error)
    store.set = AsyncMock(side_effect=error)
    store.update = AsyncMock(side_effect=error)
    return store


# ============================================
# 领域对象 Fixtures
# ============================================


@pytest.fixture
def sample_user_document() -> dict[str, Any]:
    """示例用户文档（Firestore 字段名）。"""
    return {
        "uid": "user-123",
        "email": "driver@example.com",
        "name": "Test Driver",
        "photoUrl": "",
        "phoneNumber": "+212600000000",
        "age": 34,
        "role": "REGULAR_USER",
        "isOnline": False,
        "lastSeen": 1_700_000_000_000,
        "carDetails": {
            "make": "Toyota",
            "model": "Corolla",
            "year": 2018,
            "vin": "JTDBR32E720123456",
            "color": "white",
            "licensePlate": "12345-A-6",
            "carImageUrl": "",
        },
        "providerDetails": None,
        "fcmToken": "token-old",
        "createdAt": 1_690_000_000_000,
    }
