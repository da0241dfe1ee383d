from helpers import register


def test_health_and_root(client):
    assert client.get("/health").json()["status"] == "ok"
    assert "version" in client.get("/").json()


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-Id": "abc-123"})
    assert resp.headers["X-Request-Id"] == "abc-123"
    assert client.get("/health").headers["X-Request-Id"]


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    body = resp.json()
    assert body["error"] == "not_found"
    assert body["detail"] == "No route for GET /nope"


class TestUsers:
    def test_register_and_me(self, client):
        headers = register(client, "Ana@Example.com")
        resp = client.get("/users/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["email"] == "ana@example.com"

    def test_duplicate_email(self, client):
        register(client, "ana@example.com")
        resp = client.post("/users/", json={"email": "ana@example.com"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "conflict"

    def test_invalid_email(self, client):
        resp = client.post("/users/", json={"email": "not-an-email"})
        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"

    def test_missing_header(self, client):
        resp = client.get("/users/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthorized"

    def test_unknown_user(self, client):
        resp = client.get("/users/me", headers={"X-User-Id": "ghost"})
        assert resp.status_code == 401


class TestHouseholds:
    def test_create_and_list(self, client, owner_headers, household_id):
        resp = client.get("/households/", headers=owner_headers)
        assert resp.status_code == 200
        rows = resp.json()
        assert [r["id"] for r in rows] == [household_id]
        assert rows[0]["role"] == "owner"
        assert rows[0]["name"] == "Casa"

    def test_blank_name_rejected(self, client, owner_headers):
        resp = client.post("/households/", json={"name": "   "}, headers=owner_headers)
        assert resp.status_code == 422

    def test_create_requires_user(self, client):
        resp = client.post("/households/", json={"name": "Casa"})
        assert resp.status_code == 401

    def test_outsider_is_forbidden(self, client, household_id):
        outsider = register(client, "outsider@example.com")
        resp = client.get(f"/households/{household_id}/currencies", headers=outsider)
        assert resp.status_code == 403
        assert resp.json()["error"] == "forbidden"

    def test_unknown_household(self, client, owner_headers):
        resp = client.get("/households/missing/currencies", headers=owner_headers)
        assert resp.status_code == 404

    def test_invite_member(self, client, owner_headers, household_id):
        invitee = register(client, "bruno@example.com")
        resp = client.post(
            f"/households/{household_id}/members",
            json={"email": "bruno@example.com"},
            headers=owner_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["role"] == "member"

        listed = client.get("/households/", headers=invitee).json()
        assert [r["id"] for r in listed] == [household_id]
        assert listed[0]["role"] == "member"

        again = client.post(
            f"/households/{household_id}/members",
            json={"email": "bruno@example.com"},
            headers=owner_headers,
        )
        assert again.status_code == 409

    def test_invite_unregistered_email(self, client, owner_headers, household_id):
        resp = client.post(
            f"/households/{household_id}/members",
            json={"email": "nobody@example.com"},
            headers=owner_headers,
        )
        assert resp.status_code == 404

    def test_leave_household(self, client, owner_headers, household_id):
        resp = client.delete(f"/households/{household_id}/members/me", headers=owner_headers)
        assert resp.status_code == 204
        assert client.get("/households/", headers=owner_headers).json() == []
        again = client.get(f"/households/{household_id}/rates/", headers=owner_headers)
        assert again.status_code == 403
