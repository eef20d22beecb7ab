from fastapi.testclient import TestClient

from task_manager.main import create_app


def _create(client: TestClient, title: str, description: str, **extra) -> int:
    r = client.post("/tasks", json={"title": title, "description": description, **extra})
    assert r.status_code == 200, r.text
    return r.json()["id"]


def test_end_to_end_over_http(client: TestClient):
    assert _create(client, "Buy milk", "2%") == 0
    assert _create(client, "Pay rent", "rent", is_important=True) == 1

    assert client.post("/tasks/0/done").json() == {"ok": True}
    assert [t["id"] for t in client.get("/tasks/completed").json()] == [0]
    assert [t["id"] for t in client.get("/tasks/important").json()] == [1]

    assert client.delete("/tasks/0").json() == {"ok": True}
    r = client.get("/tasks/0")
    assert r.status_code == 404
    assert r.json() == {"detail": "Task not found", "kind": "NotFound"}
    assert client.get("/tasks/count").json() == {"count": 1}


def test_create_empty_title_is_invalid_input(client: TestClient):
    r = client.post("/tasks", json={"title": "", "description": "x"})

    assert r.status_code == 422
    assert r.json() == {"detail": "Invalid input", "kind": "InvalidInput"}
    assert client.get("/tasks/count").json() == {"count": 0}


def test_get_task_shape(client: TestClient):
    task_id = _create(client, "t", "d")
    body = client.get(f"/tasks/{task_id}").json()

    assert set(body) == {"id", "title", "description", "done", "is_important", "created_at", "updated_at"}
    assert body["done"] is False
    assert body["created_at"] == body["updated_at"]


def test_patch_updates_fields(client: TestClient):
    task_id = _create(client, "t", "d")

    r = client.patch(f"/tasks/{task_id}", json={"title": "new", "is_important": True})
    assert r.json() == {"ok": True}

    body = client.get(f"/tasks/{task_id}").json()
    assert body["title"] == "new"
    assert body["description"] == "d"
    assert body["is_important"] is True

    assert client.patch(f"/tasks/{task_id}", json={}).status_code == 200
    assert client.patch(f"/tasks/{task_id}", json={"description": ""}).status_code == 422
    assert client.patch("/tasks/99", json={}).status_code == 404


def test_status_routes(client: TestClient):
    task_id = _create(client, "t", "d")

    client.post(f"/tasks/{task_id}/done")
    assert [t["id"] for t in client.get("/tasks/search/status", params={"done": "true"}).json()] == [task_id]

    client.post(f"/tasks/{task_id}/reset")
    assert [t["id"] for t in client.get("/tasks/incomplete").json()] == [task_id]

    client.post(f"/tasks/{task_id}/important")
    client.post(f"/tasks/{task_id}/toggle-importance")
    assert client.get("/tasks/search/importance", params={"is_important": "true"}).json() == []

    for suffix in ("done", "reset", "important", "toggle-importance"):
        assert client.post(f"/tasks/99/{suffix}").status_code == 404


def test_text_and_time_searches(client: TestClient):
    a = _create(client, "same", "alpha")
    b = _create(client, "same", "beta")

    assert [t["id"] for t in client.get("/tasks/search/title", params={"title": "same"}).json()] == [a, b]
    assert [t["id"] for t in client.get("/tasks/search/description", params={"description": "beta"}).json()] == [b]

    created_a = client.get(f"/tasks/{a}").json()["created_at"]
    r = client.get("/tasks/search/created-after", params={"timestamp": created_a})
    assert [t["id"] for t in r.json()] == [b]

    client.post(f"/tasks/{a}/done")
    updated_b = client.get(f"/tasks/{b}").json()["updated_at"]
    r = client.get("/tasks/search/updated-after", params={"timestamp": updated_b})
    assert [t["id"] for t in r.json()] == [a]


def test_clear_completed_route(client: TestClient):
    a = _create(client, "a", "d")
    b = _create(client, "b", "d")
    client.post(f"/tasks/{a}/done")

    assert client.post("/tasks/clear-completed").json() == {"ok": True}
    assert [t["id"] for t in client.get("/tasks").json()] == [b]


def test_negative_id_rejected(client: TestClient):
    assert client.get("/tasks/-1").status_code == 422
    assert client.get("/tasks/search/created-after", params={"timestamp": -5}).status_code == 422


def test_store_calls_run_under_app_lock(store):
    app = create_app(store)
    seen = []
    original = store.count

    def count():
        seen.append(app.state.lock.locked())
        return original()

    store.count = count
    assert TestClient(app).get("/tasks/count").json() == {"count": 0}
    assert seen == [True]
    assert app.state.lock.locked() is False
