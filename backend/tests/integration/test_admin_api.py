"""Integration tests for the gated administrative endpoints."""
import csv
import io
from datetime import datetime, timezone

import pytest

from blitzweek.core.config import settings
from blitzweek.core.security import create_access_token

YEAR = datetime.now(timezone.utc).year


@pytest.fixture
def registered(client, make_candidate):
    client.post("/api/register", json=make_candidate())
    client.post("/api/register", json=make_candidate(
        ldapId="bob@iitb.ac.in", rollNumber="21B1235", branch="Physics",
        interestedEvents=["ScaleUp Ignite"],
    ))
    client.post("/api/register", json=make_candidate(
        ldapId="carol@iitb.ac.in", rollNumber="21B1236", year="PhD",
        interestedEvents=["Both"],
    ))
    return client


class TestAccessControl:
    """Admin routes need a bearer token with the admin role."""

    @pytest.mark.parametrize("method, path", [
        ("get", "/api/registrations"),
        ("get", "/api/registrations/export"),
        ("put", f"/api/registration/BW{YEAR}0001/status"),
        ("delete", f"/api/registration/BW{YEAR}0001"),
    ])
    def test_rejects_anonymous(self, registered, method, path):
        kwargs = {"json": {"status": "pending"}} if method == "put" else {}
        response = getattr(registered, method)(path, **kwargs)
        assert response.status_code == 401

    def test_rejects_non_admin_token(self, registered):
        token = create_access_token({"sub": "someone@iitb.ac.in", "role": "viewer"})
        response = registered.get("/api/registrations", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_rejects_garbage_token(self, registered):
        response = registered.get("/api/registrations", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_login_issues_working_token(self, registered):
        response = registered.post(
            "/api/auth/login",
            json={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD},
        )
        assert response.status_code == 200
        token = response.json()["access_token"]

        listing = registered.get("/api/registrations", headers={"Authorization": f"Bearer {token}"})
        assert listing.status_code == 200

    def test_login_wrong_password(self, client):
        response = client.post(
            "/api/auth/login", json={"email": settings.ADMIN_EMAIL, "password": "wrong"}
        )
        assert response.status_code == 401

    def test_gate_can_be_disabled(self, registered, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_AUTH_ENABLED", False)
        assert registered.get("/api/registrations").status_code == 200


class TestListRegistrations:
    """GET /api/registrations"""

    def test_paginated_listing(self, registered, admin_headers):
        response = registered.get(
            "/api/registrations?page=1&limit=2&sortBy=rollNumber&order=asc", headers=admin_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert [r["rollNumber"] for r in body["data"]] == ["21B1234", "21B1235"]
        assert body["pagination"] == {"currentPage": 1, "totalPages": 2, "totalCount": 3, "limit": 2}

    def test_filter_by_event(self, registered, admin_headers):
        response = registered.get(
            "/api/registrations", params={"event": "Both"}, headers=admin_headers
        )
        assert [r["ldapId"] for r in response.json()["data"]] == ["carol@iitb.ac.in"]

    def test_filter_by_branch_and_year(self, registered, admin_headers):
        response = registered.get(
            "/api/registrations",
            params={"branch": "Computer Science and Engineering", "year": "3rd Year"},
            headers=admin_headers,
        )
        assert [r["ldapId"] for r in response.json()["data"]] == ["alice@iitb.ac.in"]

    def test_page_zero_is_400(self, registered, admin_headers):
        response = registered.get("/api/registrations?page=0", headers=admin_headers)
        assert response.status_code == 400


class TestUpdateStatus:
    """PUT /api/registration/{registrationNumber}/status"""

    def test_updates_status_only(self, registered, admin_headers):
        response = registered.put(
            f"/api/registration/BW{YEAR}0002/status", json={"status": "cancelled"}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "cancelled"
        assert data["ldapId"] == "bob@iitb.ac.in"
        assert data["registrationNumber"] == f"BW{YEAR}0002"

    def test_bogus_status_leaves_store_unchanged(self, registered, admin_headers):
        response = registered.put(
            f"/api/registration/BW{YEAR}0001/status", json={"status": "bogus"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid status"}
        record = registered.get(f"/api/registration/BW{YEAR}0001").json()["data"]
        assert record["status"] == "confirmed"

    def test_unknown_number_is_404(self, registered, admin_headers):
        response = registered.put(
            "/api/registration/BW19990001/status", json={"status": "pending"}, headers=admin_headers
        )
        assert response.status_code == 404


class TestDeleteRegistration:
    """DELETE /api/registration/{registrationNumber}"""

    def test_delete_then_404(self, registered, admin_headers):
        response = registered.delete(f"/api/registration/BW{YEAR}0003", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert registered.get(f"/api/registration/BW{YEAR}0003").status_code == 404
        assert registered.delete(f"/api/registration/BW{YEAR}0003", headers=admin_headers).status_code == 404

    def test_deleted_identity_can_register_again(self, registered, admin_headers, make_candidate):
        registered.delete(f"/api/registration/BW{YEAR}0001", headers=admin_headers)

        response = registered.post("/api/register", json=make_candidate())

        assert response.status_code == 201
        assert response.json()["data"]["registrationNumber"] == f"BW{YEAR}0004"


class TestExport:
    """GET /api/registrations/export"""

    def test_json_rows(self, registered, admin_headers):
        response = registered.get("/api/registrations/export", headers=admin_headers)

        body = response.json()
        assert response.status_code == 200
        assert body["count"] == 3
        assert body["data"][0]["LDAP ID"] == "carol@iitb.ac.in"
        assert body["data"][0]["Phone"] == "N/A"

    def test_csv_download(self, registered, admin_headers):
        response = registered.get("/api/registrations/export?format=csv", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert len(rows) == 3
        assert rows[-1]["Roll Number"] == "21B1234"

    def test_unknown_format_is_400(self, registered, admin_headers):
        response = registered.get("/api/registrations/export?format=xml", headers=admin_headers)
        assert response.status_code == 400
