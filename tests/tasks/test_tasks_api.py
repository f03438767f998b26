from __future__ import annotations


def test_task_crud_over_http(client, staff, login):
    login(staff)

    created = client.post("/api/tasks", json={"title": "Ship it", "priority": "HIGH", "assigneeId": staff.id})
    assert created.status_code == 201
    task = created.get_json()
    assert task["assignee"]["id"] == staff.id
    assert task["commentCount"] == 0

    listed = client.get("/api/tasks").get_json()
    assert [t["id"] for t in listed] == [task["id"]]

    updated = client.put(f"/api/tasks/{task['id']}", json={"status": "COMPLETED"})
    assert updated.get_json()["status"] == "COMPLETED"

    comment = client.post(f"/api/tasks/{task['id']}/comments", json={"content": "done"})
    assert comment.status_code == 201
    assert client.get(f"/api/tasks/{task['id']}").get_json()["commentCount"] == 1

    assert client.delete(f"/api/tasks/{task['id']}").get_json() == {"success": True}
    assert client.get(f"/api/tasks/{task['id']}").status_code == 404


def test_invalid_body_is_400(client, staff, login):
    login(staff)
    resp = client.post("/api/tasks", json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Request body must be a JSON object"}


def test_invalid_query_int_is_400(client, staff, login):
    login(staff)
    resp = client.get("/api/tasks?assigneeId=abc")
    assert resp.status_code == 400
