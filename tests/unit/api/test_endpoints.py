"""
Unit tests for API REST endpoints.

Runs the Flask app over in-memory adapters and validates request handling,
response formatting and status codes.
"""

from io import BytesIO
from unittest.mock import Mock, patch

import pytest

from tempshare.application.projections import UploadBatch, UploadFailure, UploadResult
from tempshare.application.share_service import ShareService
from tests.fixtures.in_memory import seed_object


def upload(client, headers, files, password=None):
    data = {"files": [(BytesIO(body), name, "text/plain") for name, body in files]}
    if password is not None:
        data["password"] = password
    return client.post(
        "/api/v1/files", data=data, headers=headers, content_type="multipart/form-data"
    )


# =============================================================================
# POST /api/v1/files
# =============================================================================

class TestUploadEndpoint:

    def test_requires_authentication(self, client):
        response = upload(client, {}, [("a.txt", b"a")])

        assert response.status_code == 401
        assert response.get_json()["error"] == "authentication_required"

    def test_rejects_bad_token(self, client):
        response = upload(client, {"Authorization": "Bearer not-a-jwt"}, [("a.txt", b"a")])
        assert response.status_code == 401

    def test_single_file_created(self, client, auth_headers, registry):
        response = upload(client, auth_headers("alice"), [("a.txt", b"hello")])

        assert response.status_code == 201
        body = response.get_json()
        assert body["errors"] == []
        assert len(body["files"]) == 1
        result = body["files"][0]
        assert result["display_name"] == "a.txt"
        assert result["byte_size"] == 5
        assert result["has_password"] is False
        assert result["share_url"] == f"/api/v1/share/{result['id']}"
        assert registry.get(result["id"]).owner_id == "alice"

    def test_multiple_files_with_password(self, client, auth_headers):
        response = upload(
            client, auth_headers(), [("a.txt", b"a"), ("b.txt", b"b")], password="pw"
        )

        assert response.status_code == 201
        files = response.get_json()["files"]
        assert len(files) == 2
        assert all(f["has_password"] for f in files)

    def test_no_files_is_bad_request(self, client, auth_headers):
        response = client.post(
            "/api/v1/files", data={}, headers=auth_headers(),
            content_type="multipart/form-data",
        )

        assert response.status_code == 400
        assert response.get_json()["error"] == "invalid_request"

    def test_all_failed_is_500(self, client, auth_headers, store):
        store.fail_puts = True

        response = upload(client, auth_headers(), [("a.txt", b"a")])

        assert response.status_code == 500
        assert response.get_json()["errors"][0]["error"] == "upload_failed"

    def test_partial_success_is_207(self, client, auth_headers, container, clock):
        service = Mock()
        service.upload_files.return_value = UploadBatch(
            results=[UploadResult("x" * 43, "a.txt", 1, clock(), False, "/s/x")],
            failures=[UploadFailure("b.txt", "upload_failed", "The file could not be stored.")],
        )
        container.override(ShareService, service)

        response = upload(client, auth_headers(), [("a.txt", b"a"), ("b.txt", b"b")])

        assert response.status_code == 207
        body = response.get_json()
        assert len(body["files"]) == 1
        assert body["errors"][0]["display_name"] == "b.txt"

    def test_too_large_is_rejected(self, app_config, container, auth_headers):
        from tempshare.app_factory import create_app

        app_config.share.max_upload_bytes = 16
        client = create_app(app_config, container=container).test_client()

        response = upload(client, auth_headers(), [("big.bin", b"x" * 1024)])

        assert response.status_code == 413


# =============================================================================
# GET /api/v1/files
# =============================================================================

class TestListEndpoint:

    def test_lists_only_own_files(self, client, auth_headers, registry, store, clock):
        mine = seed_object(registry, store, clock(), owner_id="alice")
        seed_object(registry, store, clock(), owner_id="bob")

        response = client.get("/api/v1/files", headers=auth_headers("alice"))

        assert response.status_code == 200
        files = response.get_json()["files"]
        assert [f["id"] for f in files] == [mine.object_id]
        assert "owner_id" not in files[0]

    def test_requires_authentication(self, client):
        assert client.get("/api/v1/files").status_code == 401


# =============================================================================
# DELETE /api/v1/files/<id>
# =============================================================================

class TestDeleteEndpoint:

    def test_owner_deletes(self, client, auth_headers, registry, store, clock):
        record = seed_object(registry, store, clock(), owner_id="alice")

        response = client.delete(f"/api/v1/files/{record.object_id}",
                                 headers=auth_headers("alice"))

        assert response.status_code == 200
        assert response.get_json() == {"message": "File deleted"}
        assert record.object_id not in registry

    def test_other_user_forbidden(self, client, auth_headers, registry, store, clock):
        record = seed_object(registry, store, clock(), owner_id="alice")

        response = client.delete(f"/api/v1/files/{record.object_id}",
                                 headers=auth_headers("bob"))

        assert response.status_code == 403
        assert response.get_json()["error"] == "forbidden"
        assert record.object_id in registry

    def test_admin_token_may_delete_foreign(self, client, auth_headers, registry, store, clock):
        record = seed_object(registry, store, clock(), owner_id="alice")

        response = client.delete(f"/api/v1/files/{record.object_id}",
                                 headers=auth_headers("root", is_admin=True))

        assert response.status_code == 200

    def test_missing_is_404(self, client, auth_headers):
        response = client.delete(f"/api/v1/files/{'a' * 43}", headers=auth_headers())
        assert response.status_code == 404

    def test_requires_authentication(self, client, registry, store, clock):
        record = seed_object(registry, store, clock())
        assert client.delete(f"/api/v1/files/{record.object_id}").status_code == 401


# =============================================================================
# GET /api/v1/share/<id>[/info]
# =============================================================================

class TestShareEndpoints:

    def test_download_public(self, client, registry, store, clock):
        record = seed_object(registry, store, clock(), data=b"payload")

        response = client.get(f"/api/v1/share/{record.object_id}")

        assert response.status_code == 200
        assert response.data == b"payload"
        assert response.mimetype == "text/plain"
        assert "attachment" in response.headers["Content-Disposition"]
        assert "notes.txt" in response.headers["Content-Disposition"]
        assert response.headers["Content-Length"] == str(len(b"payload"))
        assert registry.get(record.object_id).access_count == 1

    def test_download_needs_no_authentication(self, client, registry, store, clock):
        record = seed_object(registry, store, clock())
        assert client.get(f"/api/v1/share/{record.object_id}").status_code == 200

    def test_download_records_forwarded_origin(self, client, registry, store, clock):
        record = seed_object(registry, store, clock())

        client.get(
            f"/api/v1/share/{record.object_id}",
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1", "User-Agent": "curl/8"},
        )

        event = registry.events_for(record.object_id)[0]
        assert event.client_origin == "203.0.113.9"
        assert event.client_agent == "curl/8"

    def test_protected_without_password(self, client, registry, store, clock, password_hasher):
        record = seed_object(registry, store, clock(),
                             password_verifier=password_hasher.hash("pw"))

        response = client.get(f"/api/v1/share/{record.object_id}")

        assert response.status_code == 401
        body = response.get_json()
        assert body["error"] == "password_required"
        assert body["password_required"] is True

    def test_protected_wrong_password(self, client, registry, store, clock, password_hasher):
        record = seed_object(registry, store, clock(),
                             password_verifier=password_hasher.hash("pw"))

        response = client.get(f"/api/v1/share/{record.object_id}?password=nope")

        assert response.status_code == 401
        assert response.get_json()["error"] == "invalid_password"
        assert "password_required" not in response.get_json()

    @pytest.mark.parametrize("how", ["query", "header"])
    def test_protected_correct_password(self, client, registry, store, clock,
                                        password_hasher, how):
        record = seed_object(registry, store, clock(), data=b"secret",
                             password_verifier=password_hasher.hash("pw"))
        url = f"/api/v1/share/{record.object_id}"
        if how == "query":
            response = client.get(f"{url}?password=pw")
        else:
            response = client.get(url, headers={"X-Share-Password": "pw"})

        assert response.status_code == 200
        assert response.data == b"secret"

    def test_expired_is_410(self, client, registry, store, clock, password_hasher):
        record = seed_object(registry, store, clock(),
                             password_verifier=password_hasher.hash("pw"))
        clock.advance(hours=25)

        response = client.get(f"/api/v1/share/{record.object_id}?password=pw")

        assert response.status_code == 410
        assert response.get_json()["error"] == "object_expired"

    def test_unknown_is_404(self, client):
        assert client.get(f"/api/v1/share/{'b' * 43}").status_code == 404

    def test_missing_bytes_is_409(self, client, registry, store, clock):
        record = seed_object(registry, store, clock())
        store.delete(record.storage_locator)

        response = client.get(f"/api/v1/share/{record.object_id}")

        assert response.status_code == 409
        assert response.get_json()["error"] == "storage_conflict"

    def test_info_does_not_count(self, client, registry, store, clock):
        record = seed_object(registry, store, clock())

        response = client.get(f"/api/v1/share/{record.object_id}/info")

        assert response.status_code == 200
        body = response.get_json()
        assert body["display_name"] == "notes.txt"
        assert body["has_password"] is False
        assert body["is_expired"] is False
        assert registry.get(record.object_id).access_count == 0

    def test_info_protected_without_password(self, client, registry, store, clock,
                                             password_hasher):
        record = seed_object(registry, store, clock(),
                             password_verifier=password_hasher.hash("pw"))

        response = client.get(f"/api/v1/share/{record.object_id}/info")

        assert response.status_code == 401
        assert response.get_json()["password_required"] is True

    def test_unexpected_error_is_500(self, client, container):
        service = Mock()
        service.serve.side_effect = RuntimeError("boom")
        container.override(ShareService, service)

        response = client.get(f"/api/v1/share/{'c' * 43}")

        assert response.status_code == 500
        assert response.get_json()["error"] == "system_error"


# =============================================================================
# /api/v1/admin
# =============================================================================

class TestAdminEndpoints:

    def test_stats_requires_admin(self, client, auth_headers):
        assert client.get("/api/v1/admin/stats").status_code == 401
        assert client.get("/api/v1/admin/stats", headers=auth_headers()).status_code == 403

    def test_stats(self, client, auth_headers, registry, store, clock):
        seed_object(registry, store, clock(), data=b"1234")

        response = client.get("/api/v1/admin/stats", headers=auth_headers("root", True))

        assert response.status_code == 200
        assert response.get_json() == {
            "total_objects": 1,
            "active_objects": 1,
            "total_access_events": 0,
            "today_access_events": 0,
            "total_bytes_stored": 4,
        }

    def test_list_all_includes_owner(self, client, auth_headers, registry, store, clock):
        seed_object(registry, store, clock(), owner_id="bob")

        response = client.get("/api/v1/admin/files", headers=auth_headers("root", True))

        assert response.status_code == 200
        assert response.get_json()["files"][0]["owner_id"] == "bob"

    def test_admin_delete(self, client, auth_headers, registry, store, clock):
        record = seed_object(registry, store, clock(), owner_id="bob")

        response = client.delete(f"/api/v1/admin/files/{record.object_id}",
                                 headers=auth_headers("root", True))

        assert response.status_code == 200
        assert record.object_id not in registry

    def test_admin_delete_forbidden_for_users(self, client, auth_headers, registry,
                                              store, clock):
        record = seed_object(registry, store, clock(), owner_id="bob")

        response = client.delete(f"/api/v1/admin/files/{record.object_id}",
                                 headers=auth_headers("bob"))

        assert response.status_code == 403
        assert record.object_id in registry


# =============================================================================
# /health
# =============================================================================

class TestHealthEndpoint:

    def test_reports_storage_backend(self, client):
        with patch("tempshare.app_factory.redis_health_check", return_value=True):
            response = client.get("/health")

        body = response.get_json()
        assert body["redis"] == "connected"
        assert body["storage"] == "InMemoryObjectStore"
        # No Celery app when services are injected
        assert body["celery"] == "unavailable"
        assert response.status_code == 503
