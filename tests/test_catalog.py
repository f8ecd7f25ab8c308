# tests/test_catalog.py
"""Tests for the catalog view: autocorrect, search/sort state and the upload flow."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from vidshare.catalog import CatalogView, autocorrect, http_uploader, local_uploader
from vidshare.models import UploadSlot


class TestAutocorrect:
    def test_known_typos(self):
        assert autocorrect("teh recieved") == "the received"

    def test_no_match_unchanged(self):
        assert autocorrect("funny cats") == "funny cats"

    def test_whitespace_preserved(self):
        assert autocorrect("  funny\tcats  ") == "  funny\tcats  "

    def test_case_insensitive_match_drops_casing(self):
        assert autocorrect("TEH Wierd Cat") == "the weird Cat"

    def test_multi_word_correction(self):
        assert autocorrect("alot of videos") == "a lot of videos"

    def test_empty(self):
        assert autocorrect("") == ""

    def test_partial_words_untouched(self):
        assert autocorrect("tehran") == "tehran"


@pytest.fixture
def view(service, alice):
    return CatalogView(service=service, user_id=alice.user_id, uploader=local_uploader(service))


@pytest.fixture
def anonymous_view(service):
    return CatalogView(service=service, user_id=None, uploader=local_uploader(service))


class TestSearchAndSort:
    def test_submit_search_corrects_and_notifies(self, view, publish):
        publish("The received wisdom", "")
        publish("Other", "")
        corrected = view.submit_search("teh recieved")
        assert corrected == "the received"
        assert view.search_query == "the received"
        assert [v.title for v in view.videos] == ["The received wisdom"]
        assert [(n.level, n.message) for n in view.notices] == [
            ("info", "Search text was auto-corrected")
        ]

    def test_submit_search_without_correction_is_silent(self, view, publish):
        publish("Cats", "")
        view.submit_search("cats")
        assert view.notices == []
        assert len(view.videos) == 1

    def test_same_search_does_not_requery(self, view, service):
        with patch.object(service, "list_videos", wraps=service.list_videos) as spy:
            view.submit_search("cats")
            view.submit_search("cats")
            assert spy.call_count == 1

    def test_set_sort_requeries_on_change(self, view, service):
        with patch.object(service, "list_videos", wraps=service.list_videos) as spy:
            view.set_sort("views")
            view.set_sort("views")
            assert spy.call_count == 1
            spy.assert_called_with("views", None)
        assert view.sort_by == "views"

    def test_refresh_uses_current_state(self, view, service):
        view.search_query = "x"
        view.sort_by = "views"
        with patch.object(service, "list_videos", return_value=[]) as mock:
            view.refresh()
            mock.assert_called_once_with("views", "x")


class TestUpload:
    def test_upload_video_only(self, view, service, video_file):
        assert view.upload("Intro", "Hello world", video_file) is True
        assert view.notices[-1].message == "Video uploaded successfully!"
        [video] = service.list_videos()
        assert video.title == "Intro"
        assert video.thumbnail_url is None
        _, data = service.open_blob(video.storage_id)
        assert data == video_file.read_bytes()
        assert view.videos == [video]

    def test_upload_with_thumbnail(self, view, service, video_file, thumbnail_file):
        assert view.upload("Intro", "Hello world", video_file, thumbnail_file) is True
        [video] = service.list_videos()
        blob, data = service.open_blob(video.thumbnail_id)
        assert data == thumbnail_file.read_bytes()
        assert blob.content_type == "image/jpeg"
        video_blob, _ = service.open_blob(video.storage_id)
        assert video_blob.content_type == "video/mp4"

    def test_uploads_are_sequential_video_first(self, service, alice, video_file, thumbnail_file):
        calls = []

        def uploader(slot, data, content_type):
            calls.append(content_type)
            return service.store_upload(slot.token, data, content_type)

        view = CatalogView(service=service, user_id=alice.user_id, uploader=uploader)
        view.upload("Intro", "", video_file, thumbnail_file)
        assert calls == ["video/mp4", "image/jpeg"]

    def test_missing_video_file(self, view, service):
        with patch.object(service, "request_upload_slot") as slot:
            assert view.upload("Intro", "Hello", None) is False
            slot.assert_not_called()
        assert [(n.level, n.message) for n in view.notices] == [
            ("error", "Please select a video file")
        ]

    def test_unauthenticated_upload_fails(self, anonymous_view, service, video_file):
        assert anonymous_view.upload("Intro", "", video_file) is False
        assert anonymous_view.notices[-1].message == "Upload failed"
        assert service.list_videos() == []

    def test_thumbnail_failure_leaves_video_blob(self, service, alice, video_file, thumbnail_file):
        stored = []

        def uploader(slot, data, content_type):
            if content_type.startswith("image/"):
                raise httpx.ConnectError("storage unreachable")
            storage_id = service.store_upload(slot.token, data, content_type)
            stored.append(storage_id)
            return storage_id

        view = CatalogView(service=service, user_id=alice.user_id, uploader=uploader)
        assert view.upload("Intro", "", video_file, thumbnail_file) is False
        assert [n.message for n in view.notices] == ["Upload failed"]
        assert service.list_videos() == []
        # no cleanup of the file that did make it
        _, data = service.open_blob(stored[0])
        assert data == video_file.read_bytes()

    def test_create_failure_collapses_to_one_notice(self, view, service, video_file):
        with patch.object(service, "create_video", side_effect=RuntimeError("db down")):
            assert view.upload("Intro", "", video_file) is False
        assert [n.message for n in view.notices] == ["Upload failed"]


class TestHttpUploader:
    def test_posts_raw_bytes(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers["content-type"]
            seen["body"] = request.content
            return httpx.Response(200, json={"storageId": "abc123"})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        upload = http_uploader(client)
        slot = UploadSlot(token="t1", url="http://testserver/uploads/t1")
        assert upload(slot, b"bytes", "video/mp4") == "abc123"
        assert seen == {
            "method": "POST",
            "url": "http://testserver/uploads/t1",
            "content_type": "video/mp4",
            "body": b"bytes",
        }

    def test_error_status_raises(self):
        client = httpx.Client(
            transport=httpx.MockTransport(lambda r: httpx.Response(404, json={"error": "used"}))
        )
        slot = UploadSlot(token="t1", url="http://testserver/uploads/t1")
        with pytest.raises(httpx.HTTPStatusError):
            http_uploader(client)(slot, b"bytes", "video/mp4")

    def test_default_uses_module_post(self):
        response = MagicMock()
        response.json.return_value = {"storageId": "xyz"}
        with patch("vidshare.catalog.httpx.post", return_value=response) as post:
            slot = UploadSlot(token="t1", url="http://testserver/uploads/t1")
            assert http_uploader()(slot, b"b", "image/png") == "xyz"
            post.assert_called_once_with(
                slot.url, content=b"b", headers={"Content-Type": "image/png"}
            )
