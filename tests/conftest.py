import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage

from ramblings.main import app
from ramblings.core.audit_log import get_audit_logger
from ramblings.core.config import settings
from ramblings.core.storage import ImageStorage, get_image_storage
from ramblings.database.engine import get_store
from ramblings.database.store import MemoryContentStore


def make_post(slug, title, date, status="published", author="Admin", tags=None, **extra):
    record = {
        "slug": slug,
        "title": title,
        "description": f"About {title}",
        "content": f"# {title}",
        "author": author,
        "date": date,
        "tags": tags or [],
        "status": status,
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-01T00:00:00+00:00",
    }
    record.update(extra)
    return record


def make_comment(comment_id, post_slug, created_at, status="approved", author="Reader", content="Nice post"):
    return {
        "id": comment_id,
        "post_slug": post_slug,
        "author": author,
        "email": "reader@example.com",
        "content": content,
        "status": status,
        "created_at": created_at,
    }


@pytest.fixture(name="sample_documents")
def sample_documents_fixture():
    return {
        "posts": {
            "intro-to-go": make_post("intro-to-go", "Intro to Go", "2024-01-01", tags=["go", "backend"]),
            "intro-to-rust": make_post("intro-to-rust", "Intro to Rust", "2024-02-01", tags=["rust"]),
            "secret-draft": make_post("secret-draft", "Secret Draft", "2024-03-01", status="draft", author="Jane"),
        },
        "comments": {
            "comment_1": make_comment("comment_1", "intro-to-go", "2024-01-02T10:00:00+00:00"),
            "comment_2": make_comment("comment_2", "intro-to-go", "2024-01-03T10:00:00+00:00", status="pending", author="Spammer"),
            "comment_3": make_comment("comment_3", "intro-to-go", "2024-01-01T10:00:00+00:00", author="Early Bird"),
        },
        "images": {},
    }


@pytest.fixture(name="store")
def store_fixture():
    return MemoryContentStore()


@pytest.fixture(name="seeded_store")
def seeded_store_fixture(sample_documents):
    return MemoryContentStore(documents=sample_documents)


@pytest.fixture(name="image_storage")
def image_storage_fixture(tmp_path):
    return ImageStorage(upload_dir=str(tmp_path / "images"))


@pytest.fixture(name="png_bytes")
def png_bytes_fixture():
    buffer = io.BytesIO()
    PILImage.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture(name="client")
def client_fixture(seeded_store, image_storage):
    app.dependency_overrides[get_store] = lambda: seeded_store
    app.dependency_overrides[get_image_storage] = lambda: image_storage
    get_audit_logger().clear()
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="admin_client")
def admin_client_fixture(client):
    client.cookies.set(settings.SESSION_COOKIE_NAME, settings.ADMIN_SESSION_TOKEN)
    return client
