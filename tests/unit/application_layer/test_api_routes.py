"""
API Route Tests

Drives the FastAPI application end to end with TestClient, using the
in-memory record stores and revalidation store. Records are seeded
through the write endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from biolink.application.app import create_app

API = "/api/v1"
ALICE = {"X-User-Id": "user-1", "X-User-Name": "Alice", "X-User-Email": "alice@example.com"}
BOB = {"X-User-Id": "user-2", "X-User-Name": "Bob"}

PROFILE_FORM = {
    "username": "alice",
    "display_name": "Alice",
    "bio": "Builder of things",
    "links": [{"title": "GitHub", "url": "https://github.com/alice", "icon": "Github"}],
}

PAGE_FORM = {
    "slug": "launch",
    "prompt": "A landing page for a product launch",
    "html": "<html><body>Launch</body></html>",
    "is_published": True,
}


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client


@pytest.fixture
def seeded(client):
    assert client.post(f"{API}/profiles", json=PROFILE_FORM, headers=ALICE).status_code == 201
    assert client.post(f"{API}/pages", json=PAGE_FORM, headers=ALICE).status_code == 201
    return client


@pytest.mark.unit
class TestHealthRoutes:
    def test_liveness(self, client):
        response = client.get(f"{API}/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_readiness_with_memory_backends(self, client):
        response = client.get(f"{API}/health/ready")

        assert response.status_code == 200
        assert response.json()["components"]["storage_backend"] == "memory"

    def test_root(self, client):
        assert client.get("/").json()["health"] == f"{API}/health"


@pytest.mark.unit
class TestRequestId:
    def test_generated_when_absent(self, client):
        response = client.get(f"{API}/health")

        assert response.headers["X-Request-ID"].startswith("req_")

    def test_echoed_when_sent(self, client):
        response = client.get(f"{API}/health", headers={"X-Request-ID": "req-from-client"})

        assert response.headers["X-Request-ID"] == "req-from-client"

    def test_included_in_error_body(self, client):
        response = client.get(f"{API}/profiles/nobody", headers={"X-Request-ID": "req-404"})

        assert response.json()["request_id"] == "req-404"


@pytest.mark.unit
class TestProfileRoutes:
    def test_create_requires_caller(self, client):
        response = client.post(f"{API}/profiles", json=PROFILE_FORM)

        assert response.status_code == 401
        assert response.json()["error_type"] == "AuthenticationRequiredError"

    def test_create_and_read(self, seeded):
        response = seeded.get(f"{API}/profiles/alice")

        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == "user-1"
        assert body["links"][0]["url"] == "https://github.com/alice"

    def test_unknown_profile(self, client):
        response = client.get(f"{API}/profiles/nobody")

        assert response.status_code == 404
        assert response.json()["error_type"] == "ResourceNotFoundError"

    def test_not_found_is_not_cached(self, client):
        assert client.get(f"{API}/profiles/alice").status_code == 404

        client.post(f"{API}/profiles", json=PROFILE_FORM, headers=ALICE)

        assert client.get(f"{API}/profiles/alice").status_code == 200

    def test_duplicate_username(self, seeded):
        response = seeded.post(f"{API}/profiles", json=PROFILE_FORM, headers=BOB)

        assert response.status_code == 409

    def test_username_taken_by_ai_page(self, seeded):
        form = {**PROFILE_FORM, "username": "launch"}

        assert seeded.post(f"{API}/profiles", json=form, headers=BOB).status_code == 409

    def test_invalid_username(self, client):
        form = {**PROFILE_FORM, "username": "a!"}

        assert client.post(f"{API}/profiles", json=form, headers=ALICE).status_code == 422

    def test_list(self, seeded):
        response = seeded.get(f"{API}/profiles")

        assert [profile["username"] for profile in response.json()] == ["alice"]

    def test_update_by_owner(self, seeded):
        response = seeded.patch(f"{API}/profiles/alice", json={"bio": "Updated"}, headers=ALICE)

        assert response.status_code == 200
        assert response.json()["bio"] == "Updated"

    def test_update_by_other_user(self, seeded):
        response = seeded.patch(f"{API}/profiles/alice", json={"bio": "Mine"}, headers=BOB)

        assert response.status_code == 403

    def test_update_visible_after_memory_flush(self, seeded):
        seeded.get(f"{API}/profiles/alice")
        seeded.patch(f"{API}/profiles/alice", json={"display_name": "Alice L."}, headers=ALICE)

        cached = seeded.get(f"{API}/profiles/alice").json()
        seeded.delete(f"{API}/admin/cache/memory", params={"namespace": "profile"})
        fresh = seeded.get(f"{API}/profiles/alice").json()

        assert cached["display_name"] == "Alice"
        assert fresh["display_name"] == "Alice L."


@pytest.mark.unit
class TestPageRoutes:
    def test_read_published_page(self, seeded):
        response = seeded.get(f"{API}/pages/launch")

        assert response.status_code == 200
        assert response.json()["owner"]["email"] == "alice@example.com"

    def test_unpublished_page_is_missing(self, client):
        client.post(f"{API}/pages", json={**PAGE_FORM, "slug": "draft", "is_published": False}, headers=ALICE)

        assert client.get(f"{API}/pages/draft").status_code == 404

    def test_save_existing_page_updates(self, seeded):
        response = seeded.post(f"{API}/pages", json={**PAGE_FORM, "prompt": "v2"}, headers=ALICE)

        assert response.status_code == 200
        assert response.json()["created"] is False
        assert response.json()["page"]["prompt"] == "v2"

    def test_slug_used_by_profile(self, seeded):
        response = seeded.post(f"{API}/pages", json={**PAGE_FORM, "slug": "alice"}, headers=ALICE)

        assert response.status_code == 409

    def test_other_users_slug(self, seeded):
        assert seeded.post(f"{API}/pages", json=PAGE_FORM, headers=BOB).status_code == 403

    def test_list_and_delete(self, seeded):
        pages = seeded.get(f"{API}/pages", headers=ALICE).json()
        assert [page["slug"] for page in pages] == ["launch"]
        assert "html" not in pages[0]

        response = seeded.delete(f"{API}/pages/{pages[0]['id']}", headers=ALICE)

        assert response.status_code == 204
        assert seeded.get(f"{API}/pages", headers=ALICE).json() == []

    def test_delete_requires_owner(self, seeded):
        page_id = seeded.get(f"{API}/pages", headers=ALICE).json()[0]["id"]

        assert seeded.delete(f"{API}/pages/{page_id}", headers=BOB).status_code == 403


@pytest.mark.unit
class TestPublicPageRoute:
    def test_profile_view(self, seeded):
        body = seeded.get(f"{API}/public/alice").json()

        assert body["kind"] == "profile"
        assert body["metadata"]["title"] == "Alice (@alice) | BioLink Pages"
        assert body["metadata"]["description"] == "Builder of things"
        assert body["html"] is None

    def test_ai_page_view(self, seeded):
        body = seeded.get(f"{API}/public/launch").json()

        assert body["kind"] == "ai-page"
        assert body["metadata"]["title"] == "launch | BioLink Pages"
        assert body["html"] == PAGE_FORM["html"]

    def test_unpublished_page_not_public(self, client):
        client.post(f"{API}/pages", json={**PAGE_FORM, "is_published": False}, headers=ALICE)

        assert client.get(f"{API}/public/launch").status_code == 404

    def test_unknown_slug(self, client):
        assert client.get(f"{API}/public/nothing-here").status_code == 404

    def test_titles_use_injected_app_name(self, test_settings):
        settings = test_settings.model_copy(update={"APP_NAME": "Staging Pages"})

        with TestClient(create_app(settings)) as staging:
            staging.post(f"{API}/profiles", json=PROFILE_FORM, headers=ALICE)
            body = staging.get(f"{API}/public/alice").json()

        assert body["metadata"]["title"] == "Alice (@alice) | Staging Pages"


@pytest.mark.unit
class TestSlugRoutes:
    @pytest.mark.parametrize("slug,available", [("alice", False), ("launch", False), ("new-page", True)])
    def test_availability(self, seeded, slug, available):
        body = seeded.get(f"{API}/slugs/{slug}/availability").json()

        assert body == {"slug": slug, "available": available}


@pytest.mark.unit
class TestAdminRoutes:
    def test_cache_stats(self, seeded):
        seeded.get(f"{API}/profiles/alice")

        body = seeded.get(f"{API}/admin/cache/stats").json()

        assert body["caching_enabled"] is True
        assert body["memory"]["namespaces"]["profile"]["keys"] == 1
        assert body["revalidating"]["profile"]["misses"] == 1
        assert body["store"]["backend"] == "memory"

    def test_revalidate_known_tag(self, seeded):
        response = seeded.post(f"{API}/admin/cache/revalidate", json={"tag": "profile"})

        assert response.status_code == 200
        body = response.json()
        assert body["tag"] == "profile"
        assert body["revalidated"] is True
        # the profile write in the seed already bumped the tag once
        assert body["version"] == 2

    def test_revalidate_unknown_tag(self, client):
        response = client.post(f"{API}/admin/cache/revalidate", json={"tag": "comments"})

        assert response.status_code == 422
        assert response.json()["details"]["known_tags"] == ["ai-page", "profile"]

    def test_revalidate_empty_tag(self, client):
        assert client.post(f"{API}/admin/cache/revalidate", json={"tag": ""}).status_code == 422

    def test_flush_memory(self, seeded):
        seeded.get(f"{API}/profiles/alice")
        seeded.get(f"{API}/pages/launch")

        body = seeded.delete(f"{API}/admin/cache/memory").json()

        assert body == {"namespace": None, "flushed": 2}

    def test_flush_unknown_namespace(self, client):
        response = client.delete(f"{API}/admin/cache/memory", params={"namespace": "comments"})

        assert response.status_code == 422

    def test_metrics(self, seeded):
        seeded.get(f"{API}/profiles/alice")

        response = seeded.get(f"{API}/admin/metrics")

        assert response.status_code == 200
        assert "biolink_cache_lookups_total" in response.text
