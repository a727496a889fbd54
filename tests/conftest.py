"""测试夹具：为 pytest 提供数据库、会话与客户端的共享配置。"""

import os
import uuid
from typing import Callable, Generator

import pytest

TEST_DB_PATH = os.path.join(os.path.dirname(__file__), "test.db")
TEST_DATABASE_URL = f"sqlite:///{TEST_DB_PATH}"

# 必须在导入应用之前设置，保证缓存的配置指向测试库
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from app.main import app  # noqa: E402
from app.packages.drive.core.dependencies import get_db  # noqa: E402
from app.packages.drive.core.security import create_access_token  # noqa: E402
from app.packages.drive.db import session as db_session  # noqa: E402
from app.packages.drive.models.base import Base  # noqa: E402
from app.packages.drive.models.entry import FileSystemEntry  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_database() -> Generator[None, None, None]:
    """创建隔离的 SQLite 测试数据库，并在会话结束后清理。"""
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)

    engine = db_session.build_engine(TEST_DATABASE_URL)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db_session.engine = engine
    db_session.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)
    yield

    engine.dispose()
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture(autouse=True)
def clean_entries() -> Generator[None, None, None]:
    """每个用例结束后清空条目表。"""
    yield
    session = db_session.SessionLocal()
    try:
        session.query(FileSystemEntry).delete()
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """提供给测试用例使用的数据库会话。"""
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def owner() -> str:
    return f"user_{uuid.uuid4().hex[:8]}"


@pytest.fixture()
def other_owner() -> str:
    return f"user_{uuid.uuid4().hex[:8]}"


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """构建 FastAPI TestClient，并注入测试专用的数据库依赖。"""
    def override_get_db() -> Generator[Session, None, None]:
        session = db_session.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _headers(owner_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(owner_id)}"}

    return _headers
