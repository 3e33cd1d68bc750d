"""
Photo Feed: Photos API Tests

Feed listing, uploads, edits, deletes and like toggling through the HTTP layer.
"""
import pytest
from sqlalchemy import func, select

from photo_feed.models.like import Like
from photo_feed.services.file_store import get_file_store


class TestUpload:
    """POST /api/photos/upload"""

    @pytest.mark.asyncio
    async def test_upload_normalizes_tags(self, client, create_user, upload_photo):
        await create_user("alice")
        photo_id = await upload_photo(uploader="alice", tags="a, b , c")

        photos = (await client.get("/api/photos")).json()
        assert len(photos) == 1
        assert photos[0]["id"] == photo_id
        assert photos[0]["tags"] == ["a", "b", "c"]
        assert photos[0]["likes"] == []
        assert photos[0]["uploader"] == "alice"

    @pytest.mark.asyncio
    async def test_upload_drops_empty_tags(self, client, upload_photo):
        await upload_photo(tags=" , x,, ")
        photos = (await client.get("/api/photos")).json()
        assert photos[0]["tags"] == ["x"]

    @pytest.mark.asyncio
    async def test_upload_without_tags(self, client, sample_image_bytes):
        response = await client.post(
            "/api/photos/upload",
            files={"photo": ("pic.jpg", sample_image_bytes, "image/jpeg")},
            data={"uploader": "alice"},
        )
        assert response.status_code == 201
        photos = (await client.get("/api/photos")).json()
        assert photos[0]["tags"] == []

    @pytest.mark.asyncio
    async def test_upload_response_shape(self, client, sample_image_bytes):
        response = await client.post(
            "/api/photos/upload",
            files={"photo": ("pic.jpg", sample_image_bytes, "image/jpeg")},
            data={"uploader": "alice"},
        )
        body = response.json()
        assert body["message"] == "Photo uploaded"
        assert isinstance(body["photoId"], int)

    @pytest.mark.asyncio
    async def test_upload_without_file_is_400(self, client):
        response = await client.post("/api/photos/upload", data={"uploader": "alice", "title": "t"})
        assert response.status_code == 400
        assert response.json() == {"message": "A photo file is required"}
        assert (await client.get("/api/photos")).json() == []

    @pytest.mark.asyncio
    async def test_uploaded_file_is_served(self, client, upload_photo, sample_image_bytes):
        await upload_photo(filename="Beach.JPG")
        photo = (await client.get("/api/photos")).json()[0]

        assert photo["url"].startswith("/uploads/photo/")
        assert photo["url"].endswith(".jpg")
        served = await client.get(photo["url"])
        assert served.status_code == 200
        assert served.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_feed_is_newest_first(self, client, upload_photo):
        first = await upload_photo(title="first")
        second = await upload_photo(title="second")

        photos = (await client.get("/api/photos")).json()
        assert [p["id"] for p in photos] == [second, first]


class TestEditAndDelete:
    """PUT / DELETE /api/photos/{id}"""

    @pytest.mark.asyncio
    async def test_edit_overwrites_metadata(self, client, upload_photo):
        photo_id = await upload_photo(title="old", tags="a", description="old")

        response = await client.put(
            f"/api/photos/{photo_id}",
            json={"title": "new", "tags": " x ,y", "description": "changed"},
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Photo updated"}

        photo = (await client.get("/api/photos")).json()[0]
        assert photo["title"] == "new"
        assert photo["tags"] == ["x", "y"]
        assert photo["description"] == "changed"

    @pytest.mark.asyncio
    async def test_edit_missing_photo_is_noop(self, client):
        response = await client.put("/api/photos/999", json={"title": "t", "tags": "", "description": ""})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_delete_removes_photo_likes_and_file(self, client, create_user, upload_photo, db_session):
        await create_user("alice")
        photo_id = await upload_photo(uploader="alice")
        await client.post("/api/photos/like", json={"photoId": photo_id, "username": "alice"})
        url = (await client.get("/api/photos")).json()[0]["url"]
        path = get_file_store().path_for_url(url)
        assert path.exists()

        response = await client.delete(f"/api/photos/{photo_id}")
        assert response.status_code == 200
        assert response.json() == {"message": "Photo deleted"}

        assert (await client.get("/api/photos")).json() == []
        remaining = await db_session.scalar(
            select(func.count()).select_from(Like).where(Like.photo_id == photo_id)
        )
        assert remaining == 0
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_delete_missing_photo_is_noop(self, client):
        response = await client.delete("/api/photos/999")
        assert response.status_code == 200


class TestLike:
    """POST /api/photos/like"""

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_state(self, client, create_user, upload_photo):
        await create_user("alice")
        await create_user("bob")
        photo_id = await upload_photo(uploader="alice")

        liked = await client.post("/api/photos/like", json={"photoId": photo_id, "username": "bob"})
        assert liked.status_code == 200
        assert liked.json() == {"message": "Liked", "liked": True}
        assert (await client.get("/api/photos")).json()[0]["likes"] == ["bob"]

        unliked = await client.post("/api/photos/like", json={"photoId": photo_id, "username": "bob"})
        assert unliked.json() == {"message": "Unliked", "liked": False}
        assert (await client.get("/api/photos")).json()[0]["likes"] == []

    @pytest.mark.asyncio
    async def test_likes_from_several_users(self, client, create_user, upload_photo):
        await create_user("alice")
        await create_user("bob")
        photo_id = await upload_photo(uploader="alice")

        await client.post("/api/photos/like", json={"photoId": photo_id, "username": "alice"})
        await client.post("/api/photos/like", json={"photoId": photo_id, "username": "bob"})

        likes = (await client.get("/api/photos")).json()[0]["likes"]
        assert sorted(likes) == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_like_unknown_user_is_404(self, client, upload_photo):
        photo_id = await upload_photo(uploader="alice")
        response = await client.post("/api/photos/like", json={"photoId": photo_id, "username": "ghost"})
        assert response.status_code == 404
        assert response.json() == {"message": "User not found"}

    @pytest.mark.asyncio
    async def test_like_unknown_photo_is_404(self, client, create_user):
        await create_user("alice")
        response = await client.post("/api/photos/like", json={"photoId": 999, "username": "alice"})
        assert response.status_code == 404
        assert response.json() == {"message": "Photo not found"}
