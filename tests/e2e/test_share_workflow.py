"""
End-to-end tests for complete share workflows over HTTP.

The full Flask stack runs over in-memory adapters with a controllable
clock, so expiry and sweeping can be exercised without waiting.
"""

from io import BytesIO

import pytest


def upload(client, headers, name, body, password=None):
    data = {"files": [(BytesIO(body), name, "application/octet-stream")]}
    if password:
        data["password"] = password
    response = client.post(
        "/api/v1/files", data=data, headers=headers, content_type="multipart/form-data"
    )
    assert response.status_code == 201, response.get_json()
    return response.get_json()["files"][0]


class TestProtectedShareLifecycle:
    """Upload with a password, share, download, expire, sweep."""

    def test_full_lifecycle(self, client, auth_headers, clock, sweeper, registry, store):
        owner = auth_headers("alice")
        shared = upload(client, owner, "report.pdf", b"%PDF quarterly", password="s3cret")
        link = shared["share_url"]

        # Recipient checks the link and is told a password is needed
        info = client.get(f"{link}/info")
        assert info.status_code == 401
        assert info.get_json()["password_required"] is True

        # Wrong password is distinguishable from a missing one
        wrong = client.get(link, headers={"X-Share-Password": "guess"})
        assert wrong.status_code == 401
        assert wrong.get_json()["error"] == "invalid_password"

        # Correct password downloads the exact bytes
        ok = client.get(link, headers={"X-Share-Password": "s3cret"})
        assert ok.status_code == 200
        assert ok.data == b"%PDF quarterly"
        assert "report.pdf" in ok.headers["Content-Disposition"]

        # Owner sees one download in their listing
        listing = client.get("/api/v1/files", headers=owner).get_json()["files"]
        assert listing[0]["id"] == shared["id"]
        assert listing[0]["access_count"] == 1

        # A day later the link is gone, even with the right password
        clock.advance(hours=25)
        gone = client.get(link, headers={"X-Share-Password": "s3cret"})
        assert gone.status_code == 410

        # The sweeper reclaims it and the link becomes unknown
        assert sweeper.run().removed == 1
        assert len(registry) == 0
        assert len(store) == 0
        assert client.get(link).status_code == 404


class TestPublicShareLifecycle:

    def test_multi_file_upload_and_owner_delete(self, client, auth_headers, registry):
        owner = auth_headers("alice")
        response = client.post(
            "/api/v1/files",
            data={"files": [
                (BytesIO(b"one"), "one.txt", "text/plain"),
                (BytesIO(b"two"), "two.txt", "text/plain"),
            ]},
            headers=owner,
            content_type="multipart/form-data",
        )
        assert response.status_code == 201
        first, second = response.get_json()["files"]

        # Anyone can download, and each download counts
        for _ in range(3):
            assert client.get(first["share_url"]).data == b"one"
        assert registry.get(first["id"]).access_count == 3

        # Another user cannot delete it
        assert client.delete(f"/api/v1/files/{first['id']}",
                             headers=auth_headers("bob")).status_code == 403

        # The owner can, and the link stops working at once
        assert client.delete(f"/api/v1/files/{first['id']}",
                             headers=owner).status_code == 200
        assert client.get(first["share_url"]).status_code == 404
        assert client.get(second["share_url"]).data == b"two"

    def test_admin_overview_and_moderation(self, client, auth_headers):
        upload(client, auth_headers("alice"), "a.txt", b"aaaa")
        bob_file = upload(client, auth_headers("bob"), "b.txt", b"bb")
        client.get(bob_file["share_url"])
        admin = auth_headers("root", is_admin=True)

        stats = client.get("/api/v1/admin/stats", headers=admin).get_json()
        assert stats == {
            "total_objects": 2,
            "active_objects": 2,
            "total_access_events": 1,
            "today_access_events": 1,
            "total_bytes_stored": 6,
        }

        owners = {f["owner_id"] for f in
                  client.get("/api/v1/admin/files", headers=admin).get_json()["files"]}
        assert owners == {"alice", "bob"}

        assert client.delete(f"/api/v1/admin/files/{bob_file['id']}",
                             headers=admin).status_code == 200
        assert client.get(bob_file["share_url"]).status_code == 404


class TestSweeperSafety:

    @pytest.mark.parametrize("hours, removed", [(23, 0), (24, 0), (25, 1)])
    def test_sweep_boundary(self, client, auth_headers, clock, sweeper, hours, removed):
        shared = upload(client, auth_headers(), "a.txt", b"x")

        clock.advance(hours=hours)

        assert sweeper.run().removed == removed
        expected_status = 200 if removed == 0 else 404
        assert client.get(shared["share_url"]).status_code == expected_status

    def test_sweep_during_downloads_keeps_live_objects(self, client, auth_headers,
                                                       clock, sweeper):
        old = upload(client, auth_headers(), "old.txt", b"old")
        clock.advance(hours=20)
        fresh = upload(client, auth_headers(), "fresh.txt", b"fresh")
        clock.advance(hours=5)

        report = sweeper.run()

        assert report.removed == 1
        assert client.get(old["share_url"]).status_code == 404
        assert client.get(fresh["share_url"]).data == b"fresh"
