"""
Photo Feed: Test Configuration (conftest.py)

Shared pytest fixtures for the test suite.

    clean_db        : drop and recreate every table (function scope)
    db_session      : AsyncSession on the temporary SQLite database
    client          : httpx AsyncClient bound to the app, lifespan running
    create_user     : signup helper through the API
    upload_photo    : photo upload helper through the API
"""
import os
import tempfile

# 앱 import 전에 환경 변수 설정 (settings는 lru_cache로 한 번만 로드됨)
_TEST_ROOT = tempfile.mkdtemp(prefix="photo_feed_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["LOG_DIR"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "true"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

import photo_feed.models  # noqa: E402,F401
from photo_feed.database import Base, async_session_maker, engine  # noqa: E402
from photo_feed.main import app  # noqa: E402
from photo_feed.middlewares.rate_limit_middleware import limiter  # noqa: E402


@pytest_asyncio.fixture
async def clean_db():
    """Fresh schema and fresh rate-limit counters for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    limiter.reset()
    yield


@pytest_asyncio.fixture
async def db_session(clean_db):
    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(clean_db):
    """
    HTTPX AsyncClient routed to the app through ASGITransport.

    ASGITransport does not send lifespan events, so the lifespan is entered
    here (tables, upload directories, ready gauge).
    """
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
def sample_image_bytes():
    """Smallest JPEG the store will accept (SOI + JFIF header + EOI)."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


@pytest.fixture
def create_user(client):
    async def _create(username="alice", password="pw", question="pet?", answer="dog"):
        response = await client.post(
            "/api/signup",
            json={
                "username": username,
                "password": password,
                "question": question,
                "answer": answer,
            },
        )
        assert response.status_code == 201, response.text
        return response

    return _create


@pytest.fixture
def upload_photo(client, sample_image_bytes):
    async def _upload(uploader="alice", title="Sunset", tags="sea, sunset", description="", filename="pic.jpg"):
        response = await client.post(
            "/api/photos/upload",
            files={"photo": (filename, sample_image_bytes, "image/jpeg")},
            data={
                "uploader": uploader,
                "title": title,
                "tags": tags,
                "description": description,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()["photoId"]

    return _upload
