"""HTTP surface: meeting rooms, auth flow, permission gates, error mapping."""

import base64
import json
from datetime import datetime

from meetroom.models.meeting_room import Meet, MeetingRoom
from meetroom.models.user import User
from meetroom.services.session_service import now_ms
from tests.conftest import login_headers, make_user, role_id


class TestMeetingRooms:
    def test_crud(self, client):
        assert client.get("/meeting-room").json() == []

        resp = client.post("/meeting-room", json={"name": "Orion", "location": "3F", "capacity": 8})
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        client.post("/meeting-room", json={"name": "Atlas", "location": "1F", "capacity": 4})

        rooms = client.get("/meeting-room").json()
        assert [r["name"] for r in rooms] == ["Atlas", "Orion"]

        orion_id = rooms[1]["id"]
        assert client.put(f"/meeting-room/{orion_id}", json={"capacity": 10}).json() == {"success": True}
        assert client.get(f"/meeting-room/{orion_id}").json() == {
            "id": orion_id, "name": "Orion", "location": "3F", "capacity": 10,
        }

        assert client.delete(f"/meeting-room/{orion_id}").json() == {"success": True}
        assert client.get(f"/meeting-room/{orion_id}").status_code == 404

    def test_unknown_room(self, client):
        assert client.get("/meeting-room/42").status_code == 404
        assert client.put("/meeting-room/42", json={"name": "X"}).status_code == 404
        assert client.delete("/meeting-room/42").status_code == 404

    def test_invalid_body(self, client):
        assert client.post("/meeting-room", json={"name": "Orion"}).status_code == 422

    def test_delete_removes_meetings(self, client, session):
        room = MeetingRoom(name="Orion", location="3F", capacity=8)
        room.meets.append(Meet(title="Standup", date=datetime(2026, 1, 5, 9, 0)))
        session.add(room)
        session.commit()

        client.delete(f"/meeting-room/{room.id}")
        session.expire_all()
        assert session.query(Meet).count() == 0


class TestAuth:
    def test_register_and_login(self, client):
        resp = client.post("/api/auth/register", json={
            "email": "alice@example.com",
            "username": "alice",
            "password": "secret123",
            "first_name": "Alice",
            "last_name": "Smith",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["role"]["name"] == "user"
        assert "password" not in body and "hashed_password" not in body

        headers = login_headers(client, "alice")
        me = client.get("/api/auth/me", headers=headers).json()
        assert me["username"] == "alice"
        assert me["email_verified"] is False

    def test_register_conflict(self, client, session):
        make_user(session, "alice")
        resp = client.post("/api/auth/register", json={
            "email": "alice@example.com",
            "username": "alice2",
            "password": "secret123",
            "first_name": "A",
            "last_name": "B",
        })
        assert resp.status_code == 409
        assert resp.json() == {"detail": "Email already exists"}

    def test_register_ignores_requested_role(self, client, session):
        resp = client.post("/api/auth/register", json={
            "email": "mallory@example.com",
            "username": "mallory",
            "password": "secret123",
            "first_name": "Mal",
            "last_name": "Lory",
            "role_id": role_id(session, "admin"),
        })
        assert resp.status_code == 201
        assert resp.json()["role"]["name"] == "user"

        victim = make_user(session, "alice")
        headers = login_headers(client, "mallory")
        assert client.delete(f"/api/users/{victim.id}/permanent", headers=headers).status_code == 403

    def test_bad_credentials(self, client, session):
        make_user(session, "alice")
        resp = client.post("/api/auth/login", json={"username": "alice", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials"

    def test_login_requires_identifier(self, client):
        resp = client.post("/api/auth/login", json={"password": "secret123"})
        assert resp.status_code == 400

    def test_me_requires_session(self, client):
        assert client.get("/api/auth/me").status_code == 401
        assert client.get("/api/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 401

    def test_out_of_range_user_id_is_unauthorized(self, client):
        token = base64.b64encode(json.dumps({"userId": 10 ** 20, "timestamp": now_ms()}).encode()).decode()
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_session_dies_with_account(self, client, session):
        alice = make_user(session, "alice")
        headers = login_headers(client, "alice")
        alice.is_active = False
        session.commit()
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_change_password(self, client, session):
        make_user(session, "alice")
        headers = login_headers(client, "alice")
        resp = client.post(
            "/api/auth/change-password",
            json={"current_password": "wrong", "new_password": "another1"},
            headers=headers,
        )
        assert resp.status_code == 401
        resp = client.post(
            "/api/auth/change-password",
            json={"current_password": "secret123", "new_password": "another1"},
            headers=headers,
        )
        assert resp.status_code == 200
        login_headers(client, "alice", "another1")

    def test_request_id_header(self, client):
        resp = client.get("/api/health", headers={"X-Request-Id": "abc123"})
        assert resp.headers["X-Request-Id"] == "abc123"
        assert "X-Response-Time-Ms" in resp.headers


class TestGates:
    def test_guest_cannot_list_roles(self, client, session):
        make_user(session, "gus", role="guest")
        resp = client.get("/api/roles/", headers=login_headers(client, "gus"))
        assert resp.status_code == 403

    def test_manager_reads_but_cannot_create_roles(self, client, session):
        make_user(session, "meg", role="manager")
        headers = login_headers(client, "meg")
        assert client.get("/api/roles/", headers=headers).status_code == 200
        resp = client.post("/api/roles/", headers=headers, json={
            "name": "x", "display_name": "X", "permissions": {},
        })
        assert resp.status_code == 403

    def test_inactive_role_grants_nothing(self, client, session, admin_headers):
        make_user(session, "meg", role="manager")
        headers = login_headers(client, "meg")
        client.post(f"/api/roles/{role_id(session, 'manager')}/toggle", headers=admin_headers)
        assert client.get("/api/roles/", headers=headers).status_code == 403

    def test_user_without_role_grants_nothing(self, client, session, admin_headers):
        alice = make_user(session, "alice")
        headers = login_headers(client, "alice")
        client.post("/api/roles/remove-users", json={"user_ids": [alice.id]}, headers=admin_headers)
        assert client.get("/api/users/", headers=headers).status_code == 403


class TestRolesApi:
    def test_create_validates_permissions(self, client, admin_headers):
        resp = client.post("/api/roles/", headers=admin_headers, json={
            "name": "auditor", "display_name": "Auditor", "permissions": {"users": {}},
        })
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid permissions structure"

    def test_create_merge_clone(self, client, admin_headers):
        permissions = {m: {} for m in ("users", "meetings", "roles", "reports", "settings")}
        resp = client.post("/api/roles/", headers=admin_headers, json={
            "name": "auditor", "display_name": "Auditor", "permissions": permissions,
        })
        assert resp.status_code == 201
        auditor = resp.json()
        assert auditor["is_active"] is True

        merged = client.patch(
            f"/api/roles/{auditor['id']}/permissions",
            headers=admin_headers,
            json={"permissions": {"reports": {"read": True}, "extra": {"x": True}}},
        ).json()
        assert merged["permissions"]["reports"] == {"read": True}
        assert "extra" not in merged["permissions"]

        check = client.get(
            f"/api/roles/{auditor['id']}/permissions/check",
            params={"module": "reports", "action": "read"},
            headers=admin_headers,
        ).json()
        assert check == {"allowed": True}

        clone = client.post(
            f"/api/roles/{auditor['id']}/clone",
            headers=admin_headers,
            json={"name": "auditor2", "display_name": "Auditor 2"},
        )
        assert clone.status_code == 201
        assert clone.json()["permissions"] == merged["permissions"]

    def test_delete_conflict_then_success(self, client, session, admin_headers):
        alice = make_user(session, "alice", role="guest")
        guest_id = role_id(session, "guest")

        resp = client.delete(f"/api/roles/{guest_id}", headers=admin_headers)
        assert resp.status_code == 409
        assert "1 users are assigned" in resp.json()["detail"]

        client.post(f"/api/roles/{role_id(session, 'user')}/users",
                    json={"user_ids": [alice.id]}, headers=admin_headers)
        assert client.delete(f"/api/roles/{guest_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/roles/{guest_id}", headers=admin_headers).status_code == 404

    def test_detail_and_stats(self, client, session, admin_headers):
        make_user(session, "alice", role="guest")
        detail = client.get(f"/api/roles/{role_id(session, 'guest')}", headers=admin_headers).json()
        assert [u["username"] for u in detail["users"]] == ["alice"]

        stats = client.get("/api/roles/stats", headers=admin_headers).json()
        assert stats["total"] == 4
        assert stats["with_users"] == 2  # admin + guest

    def test_by_permission_and_search(self, client, admin_headers):
        names = {r["name"] for r in client.get(
            "/api/roles/by-permission",
            params={"module": "settings", "action": "update"},
            headers=admin_headers,
        ).json()}
        assert names == {"admin"}

        found = client.get("/api/roles/search", params={"q": "GUEST"}, headers=admin_headers).json()
        assert [r["name"] for r in found] == ["guest"]

    def test_bulk_status(self, client, session, admin_headers):
        ids = [role_id(session, "user"), role_id(session, "guest")]
        resp = client.post("/api/roles/bulk-status", json={"role_ids": ids, "is_active": False},
                           headers=admin_headers)
        assert resp.json() == {"updated": 2}
        active = client.get("/api/roles/active", headers=admin_headers).json()
        assert [r["name"] for r in active] == ["admin", "manager"]

    def test_paginated(self, client, admin_headers):
        page = client.get("/api/roles/paginated", params={"page": 1, "limit": 3},
                          headers=admin_headers).json()
        assert page["total"] == 4
        assert page["total_pages"] == 2
        assert len(page["roles"]) == 3


class TestUsersApi:
    def test_pagination(self, client, session, admin_headers):
        for i in range(24):
            make_user(session, f"user{i:02d}")
        page = client.get("/api/users/", params={"page": 3, "limit": 10}, headers=admin_headers).json()
        assert page["total_count"] == 25
        assert page["total_pages"] == 3
        assert page["has_next_page"] is False
        assert page["has_previous_page"] is True
        assert len(page["users"]) == 5

    def test_search_too_short(self, client, admin_headers):
        resp = client.get("/api/users/search", params={"q": " a "}, headers=admin_headers)
        assert resp.status_code == 400

    def test_update_and_soft_delete(self, client, session, admin_headers):
        alice = make_user(session, "alice")
        resp = client.put(f"/api/users/{alice.id}", json={"first_name": "Alicia"}, headers=admin_headers)
        assert resp.json()["first_name"] == "Alicia"

        assert client.delete(f"/api/users/{alice.id}", headers=admin_headers).status_code == 200
        session.expire_all()
        assert session.get(User, alice.id).is_active is False

    def test_hard_delete(self, client, session, admin_headers):
        alice = make_user(session, "alice")
        assert client.delete(f"/api/users/{alice.id}/permanent", headers=admin_headers).status_code == 200
        assert client.get(f"/api/users/{alice.id}", headers=admin_headers).status_code == 404

    def test_manager_cannot_delete(self, client, session):
        make_user(session, "meg", role="manager")
        alice = make_user(session, "alice")
        headers = login_headers(client, "meg")
        assert client.delete(f"/api/users/{alice.id}", headers=headers).status_code == 403
        assert client.get(f"/api/users/{alice.id}", headers=headers).status_code == 200

    def test_verify_email(self, client, session, admin_headers):
        alice = make_user(session, "alice")
        resp = client.post(f"/api/users/{alice.id}/verify-email", headers=admin_headers)
        assert resp.json()["email_verified"] is True
