from conftest import API

from salon_booking.models import BlogPost


def _post(**overrides):
    payload = {
        "title": "Caring for Box Braids",
        "slug": "caring-for-box-braids",
        "excerpt": "Keep them fresh for weeks",
        "content": "<p>Wash <strong>gently</strong>.</p><script>alert(1)</script>",
        "coverImageUrl": "https://cdn.test/cover.jpg",
        "isPublished": True,
    }
    payload.update(overrides)
    return payload


class TestCreatePost:
    def test_create_published(self, client, as_admin):
        response = client.post(f"{API}/blog", json=_post())

        assert response.status_code == 201
        content = response.json()["content"]
        assert content["slug"] == "caring-for-box-braids"
        assert content["isPublished"] is True
        assert content["publishedAt"] is not None
        assert "<strong>gently</strong>" in content["content"]
        assert "<script>" not in content["content"]

    def test_draft_has_no_publish_date(self, client, as_admin):
        content = client.post(f"{API}/blog", json=_post(isPublished=False)).json()["content"]
        assert content["publishedAt"] is None

    def test_slug_is_lowercased(self, client, as_admin):
        content = client.post(f"{API}/blog", json=_post(slug="Caring-For-Braids")).json()["content"]
        assert content["slug"] == "caring-for-braids"

    def test_missing_fields(self, client, as_admin):
        assert client.post(f"{API}/blog", json=_post(title="")).json()["content"] == "Blog title is required"
        assert client.post(f"{API}/blog", json=_post(slug="")).json()["content"] == "Blog slug is required"
        assert client.post(f"{API}/blog", json=_post(content="")).json()["content"] == "Blog content is required"

    def test_rejects_file_like_slug(self, client, as_admin):
        response = client.post(f"{API}/blog", json=_post(slug="sitemap.xml"))
        assert response.status_code == 400
        assert response.json()["content"] == "Blog slug cannot end with a file extension"

    def test_duplicate_slug(self, client, as_admin):
        client.post(f"{API}/blog", json=_post())
        response = client.post(f"{API}/blog", json=_post(title="Another"))
        assert response.json() == {"isSuccess": False, "content": "Blog slug must be unique"}

    def test_requires_admin(self, client):
        assert client.post(f"{API}/blog", json=_post()).status_code == 401


class TestReadPosts:
    def test_filter_by_published(self, client, as_admin):
        client.post(f"{API}/blog", json=_post())
        client.post(f"{API}/blog", json=_post(slug="draft-post", isPublished=False))

        assert len(client.get(f"{API}/blog").json()["content"]) == 2
        published = client.get(f"{API}/blog", params={"published": "true"}).json()["content"]
        assert [p["slug"] for p in published] == ["caring-for-box-braids"]
        drafts = client.get(f"{API}/blog", params={"published": "false"}).json()["content"]
        assert [p["slug"] for p in drafts] == ["draft-post"]

    def test_by_slug_only_when_published(self, client, as_admin):
        client.post(f"{API}/blog", json=_post())
        client.post(f"{API}/blog", json=_post(slug="draft-post", isPublished=False))

        assert client.get(f"{API}/blog/slug/caring-for-box-braids").json()["content"]["title"] == "Caring for Box Braids"
        hidden = client.get(f"{API}/blog/slug/draft-post")
        assert hidden.status_code == 404
        assert hidden.json()["content"] == "Blog post not found"

    def test_by_invalid_slug(self, client):
        assert client.get(f"{API}/blog/slug/robots.txt").status_code == 404

    def test_by_id(self, client, as_admin):
        post_id = client.post(f"{API}/blog", json=_post()).json()["content"]["id"]
        assert client.get(f"{API}/blog/{post_id}").json()["content"]["id"] == post_id
        assert client.get(f"{API}/blog/999").status_code == 404


class TestUpdateAndDelete:
    def test_partial_update(self, client, as_admin):
        post_id = client.post(f"{API}/blog", json=_post()).json()["content"]["id"]

        response = client.put(f"{API}/blog/{post_id}", json={"title": "Braid Care 101", "excerpt": None})
        content = response.json()["content"]
        assert content["title"] == "Braid Care 101"
        assert content["excerpt"] is None
        assert content["coverImageUrl"] == "https://cdn.test/cover.jpg"

    def test_first_publish_sets_date(self, client, as_admin):
        post_id = client.post(f"{API}/blog", json=_post(isPublished=False)).json()["content"]["id"]

        content = client.put(f"{API}/blog/{post_id}", json={"isPublished": True}).json()["content"]
        assert content["isPublished"] is True
        assert content["publishedAt"] is not None

    def test_slug_conflict(self, client, as_admin):
        client.post(f"{API}/blog", json=_post())
        other_id = client.post(f"{API}/blog", json=_post(slug="other-post")).json()["content"]["id"]

        response = client.put(f"{API}/blog/{other_id}", json={"slug": "caring-for-box-braids"})
        assert response.json()["content"] == "Blog slug must be unique"

    def test_delete(self, client, db, as_admin):
        post_id = client.post(f"{API}/blog", json=_post()).json()["content"]["id"]

        response = client.delete(f"{API}/blog/{post_id}")
        assert response.json() == {"isSuccess": True, "content": "Blog post deleted successfully"}
        db.expire_all()
        assert db.query(BlogPost).count() == 0
