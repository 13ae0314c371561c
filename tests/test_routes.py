from fastapi.testclient import TestClient

from ramblings.core.audit_log import AuditEventType, get_audit_logger
from ramblings.core.config import settings


class TestRoot:
    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root_lists_modules(self, client: TestClient):
        data = client.get("/").json()
        assert data["message"] == f"Welcome to {settings.SITE_NAME}"
        assert "posts" in data["modules"]


class TestAdminSession:
    def test_login_sets_cookie(self, client: TestClient):
        response = client.post(
            "/api/admin/login",
            json={"username": settings.ADMIN_USERNAME, "password": settings.ADMIN_PASSWORD},
        )

        assert response.status_code == 200
        assert response.json()["user"] == {"username": settings.ADMIN_USERNAME, "is_authenticated": True}
        cookie = response.headers["set-cookie"]
        assert f"{settings.SESSION_COOKIE_NAME}={settings.ADMIN_SESSION_TOKEN}" in cookie
        assert "HttpOnly" in cookie
        assert "samesite=lax" in cookie.lower()
        assert f"Max-Age={settings.SESSION_MAX_AGE_SECONDS}" in cookie

        me = client.get("/api/admin/me")
        assert me.status_code == 200
        assert me.json()["is_authenticated"] is True

    def test_login_with_wrong_password(self, client: TestClient):
        response = client.post("/api/admin/login", json={"username": "admin", "password": "wrong"})

        assert response.status_code == 401
        assert "set-cookie" not in response.headers
        events = get_audit_logger().get_events(event_type=AuditEventType.LOGIN_FAILED)
        assert len(events) == 1

    def test_login_requires_fields(self, client: TestClient):
        assert client.post("/api/admin/login", json={"username": "admin"}).status_code == 422

    def test_me_without_session(self, client: TestClient):
        assert client.get("/api/admin/me").status_code == 401
        events = get_audit_logger().get_events(event_type=AuditEventType.UNAUTHORIZED_ACCESS)
        assert events[-1].details == {"resource": "GET /api/admin/me"}

    def test_logout_clears_cookie(self, client: TestClient):
        client.post(
            "/api/admin/login",
            json={"username": settings.ADMIN_USERNAME, "password": settings.ADMIN_PASSWORD},
        )
        assert client.get("/api/admin/me").status_code == 200

        response = client.post("/api/admin/logout")

        assert response.status_code == 200
        assert client.get("/api/admin/me").status_code == 401

    def test_forged_cookie_is_rejected(self, client: TestClient):
        client.cookies.set(settings.SESSION_COOKIE_NAME, "let-me-in")
        assert client.get("/api/admin/me").status_code == 401


class TestPostRoutes:
    def test_visitors_see_published_only(self, client: TestClient):
        data = client.get("/api/posts").json()
        assert [p["slug"] for p in data["items"]] == ["intro-to-rust", "intro-to-go"]
        assert data["total"] == 2
        assert "content" not in data["items"][0]

    def test_admin_sees_drafts(self, admin_client: TestClient):
        data = admin_client.get("/api/posts").json()
        assert [p["slug"] for p in data["items"]] == ["secret-draft", "intro-to-rust", "intro-to-go"]

    def test_get_post(self, client: TestClient):
        response = client.get("/api/posts/intro-to-go")
        assert response.status_code == 200
        assert response.json()["content"] == "# Intro to Go"

    def test_draft_is_hidden_from_visitors(self, client: TestClient):
        assert client.get("/api/posts/secret-draft").status_code == 404
        assert client.get("/api/posts/missing").status_code == 404

    def test_create_requires_admin(self, client: TestClient):
        response = client.post("/api/posts", json={"title": "Nope", "content": "x", "author": "A"})
        assert response.status_code == 401

    def test_create_update_delete(self, admin_client: TestClient):
        payload = {
            "title": "Hello, World!  2024",
            "content": "Body",
            "author": "Admin",
            "tags": "news, misc",
            "status": "published",
            "date": "2024-06-01",
        }
        created = admin_client.post("/api/posts", json=payload)
        assert created.status_code == 201
        assert created.json()["slug"] == "hello-world-2024"
        assert created.json()["tags"] == ["news", "misc"]

        duplicate = admin_client.post("/api/posts", json=payload)
        assert duplicate.status_code == 409

        updated = admin_client.put("/api/posts/hello-world-2024", json={"title": "Changed"})
        assert updated.status_code == 200
        assert updated.json()["slug"] == "hello-world-2024"
        assert admin_client.get("/api/posts/hello-world-2024").json()["title"] == "Changed"

        deleted = admin_client.delete("/api/posts/hello-world-2024")
        assert deleted.status_code == 200
        assert admin_client.get("/api/posts/hello-world-2024").status_code == 404

    def test_update_and_delete_missing_post(self, admin_client: TestClient):
        assert admin_client.put("/api/posts/ghost", json={"title": "x"}).status_code == 404
        assert admin_client.delete("/api/posts/ghost").status_code == 404

    def test_create_validation(self, admin_client: TestClient):
        response = admin_client.post("/api/posts", json={"title": "???", "content": "x", "author": "A"})
        assert response.status_code == 422


class TestCommentRoutes:
    def test_submit_comment_is_pending(self, client: TestClient):
        response = client.post(
            "/api/comments",
            json={"post_slug": "intro-to-go", "author": "Ann", "email": "ann@example.com", "content": "Hi"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "tests"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert "email" not in data
        assert "ip_address" not in data

    def test_submitted_comment_records_client(self, admin_client: TestClient):
        created = admin_client.post(
            "/api/comments",
            json={"post_slug": "intro-to-go", "author": "Ann", "email": "ann@example.com", "content": "Hi"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "tests"},
        ).json()

        comment = admin_client.get(f"/api/comments/{created['id']}").json()
        assert comment["ip_address"] == "203.0.113.7"
        assert comment["user_agent"] == "tests"
        assert comment["email"] == "ann@example.com"

    def test_invalid_email(self, client: TestClient):
        response = client.post(
            "/api/comments",
            json={"post_slug": "intro-to-go", "author": "Ann", "email": "nope", "content": "Hi"},
        )
        assert response.status_code == 422

    def test_public_comments_for_post(self, client: TestClient):
        response = client.get("/api/comments", params={"post_slug": "intro-to-go"})
        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == ["comment_3", "comment_1"]
        assert "email" not in response.json()[0]

    def test_all_comments_require_admin(self, client: TestClient):
        assert client.get("/api/comments").status_code == 401

    def test_admin_lists_all_comments(self, admin_client: TestClient):
        data = admin_client.get("/api/comments").json()
        assert [c["id"] for c in data] == ["comment_2", "comment_1", "comment_3"]
        assert data[0]["email"] == "reader@example.com"

    def test_moderation(self, admin_client: TestClient):
        response = admin_client.put("/api/comments/comment_2", json={"status": "approved"})
        assert response.status_code == 200
        assert response.json()["success"] is True

        visible = admin_client.get("/api/comments", params={"post_slug": "intro-to-go"}).json()
        assert "comment_2" in [c["id"] for c in visible]

        assert admin_client.put("/api/comments/comment_2", json={"status": "bogus"}).status_code == 422
        assert admin_client.put("/api/comments/missing", json={"status": "approved"}).status_code == 404

    def test_delete_comment(self, admin_client: TestClient):
        assert admin_client.delete("/api/comments/comment_1").status_code == 200
        assert admin_client.delete("/api/comments/comment_1").status_code == 404

    def test_stats(self, admin_client: TestClient):
        assert admin_client.get("/api/comments/stats").json() == {
            "total": 3, "pending": 1, "approved": 2, "rejected": 0
        }


class TestImageRoutes:
    def upload(self, client, content, filename="photo.png", content_type="image/png", **form):
        return client.post(
            "/api/images",
            files={"file": (filename, content, content_type)},
            data=form,
        )

    def test_upload_requires_admin(self, client: TestClient, png_bytes):
        assert self.upload(client, png_bytes).status_code == 401

    def test_upload_and_serve(self, admin_client: TestClient, png_bytes):
        response = self.upload(admin_client, png_bytes, alt="Red square", description="")

        assert response.status_code == 201
        image = response.json()
        assert image["original_name"] == "photo.png"
        assert image["mime_type"] == "image/png"
        assert image["alt"] == "Red square"
        assert image["description"] is None

        served = admin_client.get(image["url"])
        assert served.status_code == 200
        assert served.content == png_bytes
        assert served.headers["content-type"] == "image/png"
        assert served.headers["cache-control"] == "public, max-age=31536000"

    def test_rejects_disallowed_type(self, admin_client: TestClient):
        response = self.upload(admin_client, b"%PDF-1.4", filename="doc.pdf", content_type="application/pdf")
        assert response.status_code == 415

    def test_rejects_bytes_that_are_not_an_image(self, admin_client: TestClient):
        assert self.upload(admin_client, b"definitely not a png").status_code == 400

    def test_rejects_oversized_file(self, admin_client: TestClient, png_bytes, monkeypatch):
        monkeypatch.setattr(settings, "MAX_IMAGE_SIZE", len(png_bytes) - 1)
        assert self.upload(admin_client, png_bytes).status_code == 413

    def test_serve_rejects_path_traversal(self, client: TestClient):
        assert client.get("/api/images/serve", params={"file": "../secrets.json"}).status_code == 400
        assert client.get("/api/images/serve", params={"file": "a/b.png"}).status_code == 400

    def test_serve_missing_file(self, client: TestClient):
        assert client.get("/api/images/serve", params={"file": "img_missing.png"}).status_code == 404

    def test_serve_unknown_extension(self, client: TestClient, image_storage):
        image_storage.get_file_path("blob.xyz").write_bytes(b"raw")
        response = client.get("/api/images/serve", params={"file": "blob.xyz"})
        assert response.headers["content-type"] == "application/octet-stream"

    def test_metadata_lifecycle(self, admin_client: TestClient, png_bytes):
        image = self.upload(admin_client, png_bytes).json()

        listed = admin_client.get("/api/images").json()
        assert [i["id"] for i in listed] == [image["id"]]

        assert admin_client.put(f"/api/images/{image['id']}", json={"alt": "New alt"}).status_code == 200
        assert admin_client.get(f"/api/images/{image['id']}").json()["alt"] == "New alt"

        stats = admin_client.get("/api/images/stats").json()
        assert stats["total_images"] == 1
        assert stats["by_type"] == {"image/png": 1}

        assert admin_client.delete(f"/api/images/{image['id']}").status_code == 200
        assert admin_client.get(f"/api/images/{image['id']}").status_code == 404
        assert admin_client.get(image["url"]).status_code == 404


class TestSearchRoutes:
    def test_search_posts(self, client: TestClient):
        response = client.get("/api/search/posts", params={"q": "intro", "sort_by": "date", "sort_order": "asc"})

        assert response.status_code == 200
        data = response.json()
        assert [p["slug"] for p in data["items"]] == ["intro-to-go", "intro-to-rust"]
        assert data["total"] == 2
        assert data["filters"]["query"] == "intro"
        assert data["suggestions"] == ["Intro"]

    def test_visitors_never_find_drafts(self, client: TestClient):
        assert client.get("/api/search/posts", params={"q": "secret"}).json()["total"] == 0

    def test_admin_finds_drafts(self, admin_client: TestClient):
        assert admin_client.get("/api/search/posts", params={"q": "secret"}).json()["total"] == 1

    def test_comma_separated_tags(self, client: TestClient):
        data = client.get("/api/search/posts", params={"tags": "rust,python"}).json()
        assert [p["slug"] for p in data["items"]] == ["intro-to-rust"]

    def test_invalid_date_bound(self, client: TestClient):
        assert client.get("/api/search/posts", params={"date_from": "soon"}).status_code == 422

    def test_invalid_sort_key(self, client: TestClient):
        assert client.get("/api/search/posts", params={"sort_by": "popularity"}).status_code == 422

    def test_search_comments_by_status(self, admin_client: TestClient):
        data = admin_client.get("/api/search/comments", params={"status": "pending"}).json()
        assert [c["id"] for c in data["items"]] == ["comment_2"]

    def test_search_comments_requires_admin(self, client: TestClient):
        assert client.get("/api/search/comments").status_code == 401

    def test_search_images(self, admin_client: TestClient, png_bytes):
        admin_client.post("/api/images", files={"file": ("beach_day.png", png_bytes, "image/png")})

        data = admin_client.get("/api/search/images", params={"q": "beach"}).json()
        assert data["total"] == 1
        assert data["suggestions"] == ["beach"]

    def test_facets(self, client: TestClient):
        public = client.get("/api/search/facets").json()
        assert public == {"tags": ["backend", "go", "rust"], "authors": ["Admin"], "statuses": []}

    def test_admin_facets(self, admin_client: TestClient):
        data = admin_client.get("/api/search/facets").json()
        assert data["authors"] == ["Admin", "Jane"]
        assert data["statuses"] == ["approved", "pending"]
