"""
Photo Feed: File Store Unit Tests

LocalFileStore writes, URL mapping and deletes, plus upload filename generation.
"""
import re

import pytest

from photo_feed.exceptions import ValidationError
from photo_feed.services.file_store import PHOTO_FIELD, PROFILE_PIC_FIELD, LocalFileStore
from photo_feed.utils.security import generate_upload_filename


class TestGenerateUploadFilename:

    def test_keeps_lowercased_extension(self):
        name = generate_upload_filename("Holiday.JPEG")
        assert re.fullmatch(r"\d{13}-[0-9a-f]{8}\.jpeg", name)

    def test_no_extension(self):
        assert re.fullmatch(r"\d{13}-[0-9a-f]{8}", generate_upload_filename("noext"))

    def test_same_millisecond_does_not_collide(self):
        names = {generate_upload_filename("a.png") for _ in range(50)}
        assert len(names) == 50


class TestLocalFileStore:

    def setup_method(self):
        self.content = b"\xff\xd8\xff\xd9"

    @pytest.mark.asyncio
    async def test_save_and_delete(self, tmp_path):
        store = LocalFileStore(root=str(tmp_path))
        store.ensure_directories()
        assert (tmp_path / PHOTO_FIELD).is_dir()
        assert (tmp_path / PROFILE_PIC_FIELD).is_dir()

        url = await store.save(PHOTO_FIELD, "pic.jpg", self.content)
        assert url.startswith("/uploads/photo/")
        path = store.path_for_url(url)
        assert path.read_bytes() == self.content

        assert await store.delete(url) is True
        assert not path.exists()
        assert await store.delete(url) is False

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self, tmp_path):
        store = LocalFileStore(root=str(tmp_path), max_size_bytes=2)
        with pytest.raises(ValidationError, match="File too large"):
            await store.save(PHOTO_FIELD, "pic.jpg", self.content)
        assert not (tmp_path / PHOTO_FIELD).exists()

    @pytest.mark.asyncio
    async def test_save_upload_without_file(self, tmp_path):
        store = LocalFileStore(root=str(tmp_path))
        assert await store.save_upload(PHOTO_FIELD, None) is None

    def test_path_for_url_stays_inside_root(self, tmp_path):
        store = LocalFileStore(root=str(tmp_path))
        assert store.path_for_url("/uploads/../../etc/passwd") is None
        assert store.path_for_url("https://placehold.co/192x192") is None
        assert store.path_for_url("") is None
        assert store.path_for_url("/uploads/photo/x.jpg") == (tmp_path / "photo" / "x.jpg").resolve()
