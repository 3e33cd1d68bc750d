"""
Photo Feed: Users API Tests

Profile lookup, profile picture upload and username changes.
"""
import pytest


class TestProfile:
    """GET /api/users/{username}, POST /api/profile/upload"""

    @pytest.mark.asyncio
    async def test_get_user(self, client, create_user):
        await create_user("alice")
        response = await client.get("/api/users/alice")
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"id", "username", "profilePic"}
        assert body["username"] == "alice"

    @pytest.mark.asyncio
    async def test_get_unknown_user_is_404(self, client):
        response = await client.get("/api/users/ghost")
        assert response.status_code == 404
        assert response.json() == {"message": "User not found"}

    @pytest.mark.asyncio
    async def test_profile_picture_upload(self, client, create_user, sample_image_bytes):
        await create_user("alice")

        response = await client.post(
            "/api/profile/upload",
            files={"profilePic": ("me.png", sample_image_bytes, "image/png")},
            data={"username": "alice"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile picture updated"
        assert body["profilePicUrl"].startswith("/uploads/profilePic/")
        assert body["profilePicUrl"].endswith(".png")

        user = (await client.get("/api/users/alice")).json()
        assert user["profilePic"] == body["profilePicUrl"]

    @pytest.mark.asyncio
    async def test_profile_picture_for_unknown_user_still_succeeds(self, client, sample_image_bytes):
        response = await client.post(
            "/api/profile/upload",
            files={"profilePic": ("me.png", sample_image_bytes, "image/png")},
            data={"username": "ghost"},
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_profile_picture_without_file_is_400(self, client, create_user):
        await create_user("alice")
        response = await client.post("/api/profile/upload", data={"username": "alice"})
        assert response.status_code == 400
        assert response.json() == {"message": "No file uploaded"}


class TestRename:
    """POST /api/users/update"""

    @pytest.mark.asyncio
    async def test_rename_cascades_to_photos(self, client, create_user, upload_photo):
        await create_user("alice")
        await create_user("carol")
        await upload_photo(uploader="alice", title="one")
        await upload_photo(uploader="alice", title="two")
        await upload_photo(uploader="carol", title="three")

        response = await client.post(
            "/api/users/update", json={"oldUsername": "alice", "newUsername": "bob"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Username changed"
        assert body["user"]["username"] == "bob"

        uploaders = {p["title"]: p["uploader"] for p in (await client.get("/api/photos")).json()}
        assert uploaders == {"one": "bob", "two": "bob", "three": "carol"}

        assert (await client.get("/api/users/alice")).status_code == 404
        login = await client.post("/api/login", json={"username": "bob", "password": "pw"})
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_rename_to_taken_name_is_rejected(self, client, create_user, upload_photo):
        await create_user("alice")
        await create_user("bob")
        await upload_photo(uploader="alice")

        response = await client.post(
            "/api/users/update", json={"oldUsername": "alice", "newUsername": "bob"}
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Username already in use"}

        photo = (await client.get("/api/photos")).json()[0]
        assert photo["uploader"] == "alice"
        assert (await client.get("/api/users/alice")).status_code == 200

    @pytest.mark.asyncio
    async def test_rename_to_same_name_is_noop(self, client, create_user):
        await create_user("alice")
        response = await client.post(
            "/api/users/update", json={"oldUsername": "alice", "newUsername": "alice"}
        )
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice"

    @pytest.mark.asyncio
    async def test_rename_unknown_user_is_404(self, client):
        response = await client.post(
            "/api/users/update", json={"oldUsername": "ghost", "newUsername": "bob"}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_likes_follow_renamed_user(self, client, create_user, upload_photo):
        await create_user("alice")
        photo_id = await upload_photo(uploader="alice")
        await client.post("/api/photos/like", json={"photoId": photo_id, "username": "alice"})

        await client.post("/api/users/update", json={"oldUsername": "alice", "newUsername": "bob"})

        assert (await client.get("/api/photos")).json()[0]["likes"] == ["bob"]
