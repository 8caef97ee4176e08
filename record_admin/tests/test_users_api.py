from __future__ import annotations

from record_admin.db import get_conn


def _user_by_email(client, email):
    items = client.get("/api/users/find", params={"column": "email", "value": email}).json()["items"]
    return items[0] if items else None


def test_health_and_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"

    v = client.get("/version")
    assert v.status_code == 200
    assert v.json().get("app") == "record-admin-api"


def test_startup_seeds_empty_table(client):
    res = client.get("/api/users/list").json()
    assert res["total"] == 3
    assert [u["name"] for u in res["items"]] == ["Alice Johnson", "Jane Smith", "John Doe"]
    ids = [u["id"] for u in res["items"]]
    assert ids == sorted(ids, reverse=True)


def test_create_user(client):
    res = client.post("/api/users/create", json={"name": "Bob", "email": "bob@example.com"})
    assert res.status_code == 201
    user = res.json()["user"]
    assert user["name"] == "Bob"

    got = client.get(f"/api/users/get/{user['id']}")
    assert got.status_code == 200
    assert got.json()["email"] == "bob@example.com"

    with get_conn() as conn:
        row = conn.execute(
            "SELECT action, entity_type, entity_id, result FROM operation_log ORDER BY id DESC LIMIT 1"
        ).fetchone()
        assert row["action"] == "CREATE_USER"
        assert row["entity_type"] == "USER"
        assert row["entity_id"] == str(user["id"])
        assert row["result"] == "OK"


def test_create_duplicate_email_is_conflict(client):
    res = client.post("/api/users/create", json={"name": "John Again", "email": "john@example.com"})
    assert res.status_code == 409

    logs = client.get("/api/logs/search", params={"action": "CREATE_USER"}).json()
    assert logs["total"] == 1
    assert logs["items"][0]["result"] == "ERROR"


def test_create_invalid_email_is_bad_request(client):
    res = client.post("/api/users/create", json={"name": "Bad", "email": "nope"})
    assert res.status_code == 400
    assert res.json()["detail"] == "invalid_email"


def test_get_missing_user_is_404(client):
    assert client.get("/api/users/get/999999").status_code == 404


def test_update_user(client):
    jane = _user_by_email(client, "jane@example.com")
    res = client.post("/api/users/update", json={"id": jane["id"], "name": "Jane X", "email": "jane@example.com"})
    assert res.status_code == 200
    user = res.json()["user"]
    assert user == {**jane, "name": "Jane X"}


def test_update_missing_user_is_404(client):
    res = client.post("/api/users/update", json={"id": 999999, "name": "Ghost"})
    assert res.status_code == 404


def test_update_without_fields_is_bad_request(client):
    jane = _user_by_email(client, "jane@example.com")
    res = client.post("/api/users/update", json={"id": jane["id"]})
    assert res.status_code == 400


def test_delete_user(client):
    john = _user_by_email(client, "john@example.com")
    res = client.post("/api/users/delete", json={"id": john["id"]})
    assert res.status_code == 200
    assert res.json() == {"message": "ok", "deleted": True}

    again = client.post("/api/users/delete", json={"id": john["id"]})
    assert again.json()["deleted"] is False

    assert client.get(f"/api/users/get/{john['id']}").status_code == 404
    assert client.get("/api/users/list").json()["total"] == 2


def test_find_rejects_unsearchable_column(client):
    res = client.get("/api/users/find", params={"column": "id OR 1=1 --", "value": "x"})
    assert res.status_code == 400


def test_action_dispatch(client):
    created = client.post("/api/users/action", json={"intent": "create", "name": "Eve", "email": "eve@example.com"})
    assert created.status_code == 200
    eve = created.json()["user"]

    updated = client.post("/api/users/action", json={"intent": "update", "id": eve["id"], "name": "Eve L."})
    assert updated.json()["user"]["name"] == "Eve L."

    deleted = client.post("/api/users/action", json={"intent": "delete", "id": eve["id"]})
    assert deleted.json()["deleted"] is True

    assert client.post("/api/users/action", json={"intent": "delete"}).status_code == 400
    assert client.post("/api/users/action", json={"intent": "archive", "id": 1}).status_code == 400


def test_logs_search_paging(client):
    for i in range(3):
        client.post("/api/users/create", json={"name": f"P{i}", "email": f"p{i}@example.com"})
    page1 = client.get("/api/logs/search", params={"action": "CREATE_USER", "page": 1, "size": 2}).json()
    page2 = client.get("/api/logs/search", params={"action": "CREATE_USER", "page": 2, "size": 2}).json()
    assert page1["total"] == 3
    assert len(page1["items"]) == 2
    assert len(page2["items"]) == 1

    hits = client.get("/api/logs/search", params={"query": "p1@example.com"}).json()
    assert hits["total"] == 1


def test_not_found_suffix_alone_is_not_404(client, monkeypatch):
    from record_admin.routes import users as users_routes

    def fail(*args, **kwargs):
        raise ValueError("manager_not_found")

    monkeypatch.setattr(users_routes, "create_user", fail)
    res = client.post("/api/users/create", json={"name": "Bob", "email": "bob@example.com"})
    assert res.status_code == 400
    assert res.json()["detail"] == "manager_not_found"


def test_unexpected_error_is_500_with_message(client, monkeypatch):
    from record_admin.routes import users as users_routes

    def fail(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(users_routes, "delete_user", fail)
    res = client.post("/api/users/delete", json={"id": 1})
    assert res.status_code == 500
    assert res.json()["detail"] == "disk on fire"

    logs = client.get("/api/logs/search", params={"action": "DELETE_USER"}).json()
    assert logs["items"][0]["result"] == "ERROR"
    assert logs["items"][0]["err_msg"] == "disk on fire"
