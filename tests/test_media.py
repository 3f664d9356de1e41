import json

from conftest import API

from salon_booking import config
from salon_booking.models import Media
from salon_booking.rate_limiter import reset_rate_limits
from salon_booking.routes.media import parse_tags

JPEG = b"\xff\xd8\xff\xe0fake-jpeg"


def _upload(client, tag, content_type="image/jpeg", type="Image"):
    return client.post(
        f"{API}/media/create",
        data={"tag": tag, "type": type},
        files={"file": ("photo.jpg", JPEG, content_type)},
    )


class TestParseTags:
    def test_json_list(self):
        assert parse_tags('["braids", "color"]') == ["braids", "color"]

    def test_single_value(self):
        assert parse_tags("braids") == ["braids"]

    def test_drops_blank_entries(self):
        assert parse_tags('["braids", "  "]') == ["braids"]


class TestUploadMedia:
    def test_upload_image(self, client, storage, as_admin):
        response = _upload(client, json.dumps(["braids", "summer"]))

        assert response.status_code == 201
        content = response.json()["content"]
        assert content["tag"] == ["braids", "summer"]
        assert content["type"] == "Image"
        assert content["driveId"] == "image-1"
        assert content["link"] == "https://cdn.test/image-1"
        assert storage.files["image-1"] == (JPEG, "image/jpeg")

    def test_upload_video_goes_to_video_folder(self, client, storage, as_admin):
        response = _upload(client, "reel", content_type="video/mp4", type="Video")
        assert response.json()["content"]["driveId"] == "video-1"

    def test_requires_tag(self, client, as_admin):
        response = client.post(f"{API}/media/create", files={"file": ("photo.jpg", JPEG, "image/jpeg")})
        assert response.status_code == 400
        assert response.json()["content"] == "File tag required"

    def test_requires_file(self, client, as_admin):
        response = client.post(f"{API}/media/create", data={"tag": "braids"})
        assert response.json()["content"] == "File is required"

    def test_rejects_unknown_type(self, client, as_admin):
        response = _upload(client, "braids", type="Audio")
        assert response.json()["content"] == "Invalid media type: Audio"

    def test_rejects_wrong_content_type(self, client, as_admin):
        response = _upload(client, "braids", content_type="application/pdf")
        assert response.status_code == 400
        assert response.json()["content"].startswith("Invalid file type")

    def test_requires_admin(self, client):
        response = _upload(client, "braids")
        assert response.status_code == 401


class TestListAndDelete:
    def test_filters_by_tag_and_type(self, client, as_admin):
        _upload(client, '["braids"]')
        _upload(client, '["color", "summer"]')
        _upload(client, "braids", content_type="video/mp4", type="Video")

        everything = client.get(f"{API}/media").json()["content"]
        assert [m["driveId"] for m in everything] == ["video-3", "image-2", "image-1"]

        braids = client.get(f"{API}/media", params={"tag": "braids"}).json()["content"]
        assert {m["driveId"] for m in braids} == {"image-1", "video-3"}

        either = client.get(f"{API}/media", params=[("tag", "color"), ("tag", "braids")]).json()["content"]
        assert len(either) == 3

        images = client.get(f"{API}/media", params={"tag": "braids", "type": "Image"}).json()["content"]
        assert [m["driveId"] for m in images] == ["image-1"]

    def test_delete_removes_stored_file(self, client, db, storage, as_admin):
        media_id = _upload(client, "braids").json()["content"]["id"]

        response = client.post(f"{API}/media/delete", json={"id": media_id})
        assert response.json() == {"isSuccess": True, "content": "Media deleted"}
        assert storage.deleted == ["image-1"]
        db.expire_all()
        assert db.query(Media).count() == 0

    def test_delete_missing(self, client, as_admin):
        response = client.post(f"{API}/media/delete", json={"id": 12})
        assert response.status_code == 404
        assert response.json()["content"] == "Media not found"

    def test_delete_requires_id(self, client, as_admin):
        response = client.post(f"{API}/media/delete", json={})
        assert response.json()["content"] == "Invalid request argument"


class TestDriveProxy:
    def test_serves_stored_bytes(self, client, as_admin):
        _upload(client, "braids")

        response = client.get(f"{API}/media/drive/image-1")
        assert response.status_code == 200
        assert response.content == JPEG
        assert response.headers["content-type"] == "image/jpeg"
        assert "max-age" in response.headers["cache-control"]

    def test_missing_file(self, client):
        response = client.get(f"{API}/media/drive/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"isSuccess": False, "content": "File not found"}

    def test_rate_limited(self, client, storage, monkeypatch):
        storage.files["image-1"] = (JPEG, "image/jpeg")
        monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
        reset_rate_limits()

        statuses = [client.get(f"{API}/media/drive/image-1").status_code for _ in range(26)]

        assert statuses[:25] == [200] * 25
        last = client.get(f"{API}/media/drive/image-1")
        assert statuses[25] == 429
        assert last.json() == {"isSuccess": False, "content": "Too many requests, please try again later."}
        assert int(last.headers["retry-after"]) > 0
