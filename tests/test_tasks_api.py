from __future__ import annotations

from fastapi.testclient import TestClient


def create(client: TestClient, headers: dict[str, str], **fields) -> dict:
    response = client.post("/api/tasks", json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_task_lifecycle(client: TestClient, alice: dict[str, str]) -> None:
    task = create(client, alice, title="Write report", description="Quarterly numbers")
    assert task["status"] == "pending"
    assert isinstance(task["id"], int)

    fetched = client.get(f"/api/tasks/{task['id']}", headers=alice)
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Write report"

    updated = client.put(f"/api/tasks/{task['id']}", json={"status": "in_progress"}, headers=alice)
    assert updated.status_code == 200
    assert updated.json()["status"] == "in_progress"
    # Partial update leaves other fields alone.
    assert updated.json()["description"] == "Quarterly numbers"

    patched = client.patch(f"/api/tasks/{task['id']}", json={"title": "Write final report"}, headers=alice)
    assert patched.json()["title"] == "Write final report"
    assert patched.json()["status"] == "in_progress"

    deleted = client.delete(f"/api/tasks/{task['id']}", headers=alice)
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Task deleted successfully"}

    assert client.get(f"/api/tasks/{task['id']}", headers=alice).status_code == 404


def test_create_validation(client: TestClient, alice: dict[str, str]) -> None:
    assert client.post("/api/tasks", json={}, headers=alice).status_code == 422
    assert client.post("/api/tasks", json={"title": "   "}, headers=alice).status_code == 422
    bad_status = client.post("/api/tasks", json={"title": "x", "status": "archived"}, headers=alice)
    assert bad_status.status_code == 422


def test_update_rejects_invalid_status_and_null_title(client: TestClient, alice: dict[str, str]) -> None:
    task = create(client, alice, title="Keep me")
    assert client.put(f"/api/tasks/{task['id']}", json={"status": "done"}, headers=alice).status_code == 422
    assert client.put(f"/api/tasks/{task['id']}", json={"title": None}, headers=alice).status_code == 422
    assert client.get(f"/api/tasks/{task['id']}", headers=alice).json()["title"] == "Keep me"


def test_pagination_25_tasks_in_pages_of_10(client: TestClient, alice: dict[str, str]) -> None:
    for i in range(25):
        create(client, alice, title=f"Task {i}")

    sizes = []
    has_next = []
    for page in (1, 2, 3):
        body = client.get("/api/tasks", params={"page": page}, headers=alice).json()
        sizes.append(len(body["data"]))
        has_next.append(body["meta"]["current_page"] < body["meta"]["last_page"])
        assert body["meta"]["total"] == 25

    assert sizes == [10, 10, 5]
    assert has_next == [True, True, False]

    beyond = client.get("/api/tasks", params={"page": 4}, headers=alice).json()
    assert beyond["data"] == []
    assert beyond["meta"]["last_page"] == 3


def test_list_is_newest_first(client: TestClient, alice: dict[str, str]) -> None:
    ids = [create(client, alice, title=f"Task {i}")["id"] for i in range(3)]
    body = client.get("/api/tasks", headers=alice).json()
    assert [t["id"] for t in body["data"]] == list(reversed(ids))


def test_empty_list_has_one_page(client: TestClient, alice: dict[str, str]) -> None:
    body = client.get("/api/tasks", headers=alice).json()
    assert body["data"] == []
    assert body["meta"] == {"current_page": 1, "last_page": 1, "per_page": 10, "total": 0}


def test_search_and_status_filters(client: TestClient, alice: dict[str, str]) -> None:
    create(client, alice, title="Buy MILK", status="pending")
    create(client, alice, title="Call mom", description="about the milk order", status="completed")
    create(client, alice, title="Fix bike", status="completed")
    create(client, alice, title="100% done", status="in_progress")

    def titles(**params) -> set[str]:
        body = client.get("/api/tasks", params=params, headers=alice).json()
        return {t["title"] for t in body["data"]}

    assert titles(search="milk") == {"Buy MILK", "Call mom"}
    assert titles(search="milk", status="completed") == {"Call mom"}
    assert titles(status="completed") == {"Call mom", "Fix bike"}
    assert titles(search="   ") == {"Buy MILK", "Call mom", "Fix bike", "100% done"}
    # LIKE wildcards in the search term are matched literally.
    assert titles(search="%") == {"100% done"}
    assert client.get("/api/tasks", params={"status": "archived"}, headers=alice).status_code == 422


def test_per_page_bounds(client: TestClient, alice: dict[str, str]) -> None:
    assert client.get("/api/tasks", params={"per_page": 0}, headers=alice).status_code == 422
    assert client.get("/api/tasks", params={"per_page": 101}, headers=alice).status_code == 422
    assert client.get("/api/tasks", params={"per_page": 5}, headers=alice).json()["meta"]["per_page"] == 5


def test_tasks_are_scoped_to_owner(client: TestClient, alice: dict[str, str], bob: dict[str, str]) -> None:
    create(client, alice, title="Alice's task")
    create(client, bob, title="Bob's task")

    body = client.get("/api/tasks", headers=alice).json()
    assert [t["title"] for t in body["data"]] == ["Alice's task"]
    assert body["meta"]["total"] == 1


def test_foreign_task_access_is_forbidden(client: TestClient, alice: dict[str, str], bob: dict[str, str]) -> None:
    task = create(client, alice, title="Private", description="secret")

    update = client.put(f"/api/tasks/{task['id']}", json={"title": "Hijacked"}, headers=bob)
    assert update.status_code == 403
    assert update.json()["detail"] == "Unauthorized"

    assert client.get(f"/api/tasks/{task['id']}", headers=bob).status_code == 403
    assert client.delete(f"/api/tasks/{task['id']}", headers=bob).status_code == 403

    unchanged = client.get(f"/api/tasks/{task['id']}", headers=alice).json()
    assert unchanged["title"] == "Private"
    assert unchanged["description"] == "secret"
    assert unchanged["updated_at"] == task["updated_at"]


def test_missing_task_is_not_found(client: TestClient, alice: dict[str, str]) -> None:
    assert client.put("/api/tasks/9999", json={"title": "x"}, headers=alice).status_code == 404
    assert client.delete("/api/tasks/9999", headers=alice).status_code == 404
