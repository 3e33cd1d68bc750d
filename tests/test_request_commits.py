"""
Photo Feed: Commit Timing Tests

Writes must be committed before the response starts, so a client that has its
200/201 can rely on the next request seeing the change.
"""
import asyncio
import json

import pytest
from sqlalchemy import func, select

from photo_feed.database import async_session_maker
from photo_feed.main import app
from photo_feed.models.like import Like
from photo_feed.models.photo import Photo
from photo_feed.models.user import User


async def call_and_count(method, path, payload, count_stmt):
    """
    Drive the ASGI app directly and run ``count_stmt`` on a separate session
    at the moment ``http.response.start`` is sent.
    """
    body = json.dumps(payload).encode()
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [
            (b"host", b"test"),
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }
    request_sent = False
    response_done = asyncio.Event()
    seen = {}

    async def receive():
        nonlocal request_sent
        if not request_sent:
            request_sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        await response_done.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        if message["type"] == "http.response.start":
            seen["status"] = message["status"]
            async with async_session_maker() as session:
                seen["rows"] = await session.scalar(count_stmt)
        elif message["type"] == "http.response.body" and not message.get("more_body", False):
            response_done.set()

    await app(scope, receive, send)
    return seen


class TestCommitBeforeResponse:

    @pytest.mark.asyncio
    async def test_signup_is_committed_when_response_starts(self, client):
        seen = await call_and_count(
            "POST",
            "/api/signup",
            {"username": "alice", "password": "pw", "question": "pet?", "answer": "dog"},
            select(func.count()).select_from(User),
        )
        assert seen == {"status": 201, "rows": 1}

    @pytest.mark.asyncio
    async def test_like_is_committed_when_response_starts(self, client, create_user, upload_photo):
        await create_user("alice")
        photo_id = await upload_photo(uploader="alice")

        seen = await call_and_count(
            "POST",
            "/api/photos/like",
            {"photoId": photo_id, "username": "alice"},
            select(func.count()).select_from(Like),
        )
        assert seen == {"status": 200, "rows": 1}

    @pytest.mark.asyncio
    async def test_rename_is_committed_when_response_starts(self, client, create_user):
        await create_user("alice")

        seen = await call_and_count(
            "POST",
            "/api/users/update",
            {"oldUsername": "alice", "newUsername": "bob"},
            select(func.count()).select_from(User).where(User.username == "bob"),
        )
        assert seen == {"status": 200, "rows": 1}

    @pytest.mark.asyncio
    async def test_edit_is_committed_when_response_starts(self, client, upload_photo):
        photo_id = await upload_photo(title="old")

        seen = await call_and_count(
            "PUT",
            f"/api/photos/{photo_id}",
            {"title": "new", "tags": "a", "description": ""},
            select(func.count()).select_from(Photo).where(Photo.title == "new"),
        )
        assert seen == {"status": 200, "rows": 1}
