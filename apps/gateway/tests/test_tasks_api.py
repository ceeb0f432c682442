"""任务 API 测试 -- 状态码映射与响应结构

测试内容：
1. 201 创建 / 200 查询、更新、删除
2. 400 校验失败（含请求体校验，不返回 422）
3. 401 缺少或无效 token
4. 404 任务不存在
"""

from httpx import AsyncClient

TASK_BODY = {
    "title": "Draft order",
    "description": "first draft",
    "dueDate": "2024-06-01",
    "dueTime": "10:30",
    "assignedUsers": ["u1", "u2", "u1"],
}

MISSING_ID = "01JMISSING0000000000000000"


async def _create(client: AsyncClient, auth, **overrides) -> dict:
    resp = await client.post("/api/tasks", json={**TASK_BODY, **overrides}, headers=auth())
    assert resp.status_code == 201
    return resp.json()


class TestCreateTaskApi:
    """POST /api/tasks"""

    async def test_create_returns_task(self, client: AsyncClient, auth):
        data = await _create(client, auth)

        assert len(data["id"]) == 26
        assert data["status"] == "Pending"
        assert data["hasTime"] is True
        assert data["dueDate"].startswith("2024-06-01T10:30:00")
        assert data["assignedUsers"] == ["u1", "u2"]
        assert data["createdBy"] == {"uid": "u0", "name": "Alice", "email": "u0@example.com"}
        assert data["lastUpdatedBy"] is None
        assert [e["action"] for e in data["activityLog"]] == ["created"]

    async def test_missing_title(self, client: AsyncClient, auth):
        resp = await client.post(
            "/api/tasks", json={"dueDate": "2024-06-01"}, headers=auth()
        )
        assert resp.status_code == 400
        assert resp.json() == {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Title and due date are required",
            }
        }

    async def test_invalid_date(self, client: AsyncClient, auth):
        resp = await client.post(
            "/api/tasks", json={**TASK_BODY, "dueDate": "someday"}, headers=auth()
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Invalid date or time format"

    async def test_invalid_status_is_400(self, client: AsyncClient, auth):
        resp = await client.post(
            "/api/tasks", json={**TASK_BODY, "status": "Archived"}, headers=auth()
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_no_token(self, client: AsyncClient):
        resp = await client.post("/api/tasks", json=TASK_BODY)
        assert resp.status_code == 401
        assert resp.json() == {
            "error": {"code": "UNAUTHORIZED", "message": "No token provided"}
        }

    async def test_invalid_token(self, client: AsyncClient):
        resp = await client.post(
            "/api/tasks", json=TASK_BODY, headers={"Authorization": "Bearer forged"}
        )
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Invalid token"


class TestTaskQueriesApi:
    """GET /api/tasks, /api/tasks/{id}, /api/tasks/{id}/activity"""

    async def test_list_and_get(self, client: AsyncClient, auth):
        created = await _create(client, auth)

        listed = await client.get("/api/tasks", headers=auth("u1"))
        assert listed.status_code == 200
        assert [t["id"] for t in listed.json()] == [created["id"]]

        detail = await client.get(f"/api/tasks/{created['id']}", headers=auth())
        assert detail.status_code == 200
        assert detail.json()["title"] == "Draft order"

    async def test_list_filters(self, client: AsyncClient, auth):
        await _create(client, auth, title="Alpha")
        await _create(client, auth, title="Beta", status="Completed")

        resp = await client.get(
            "/api/tasks", params={"status": "Completed", "search": "bet"}, headers=auth()
        )
        assert [t["title"] for t in resp.json()] == ["Beta"]

    async def test_bad_sort(self, client: AsyncClient, auth):
        resp = await client.get("/api/tasks", params={"sort": "random"}, headers=auth())
        assert resp.status_code == 400

    async def test_get_missing(self, client: AsyncClient, auth):
        resp = await client.get(f"/api/tasks/{MISSING_ID}", headers=auth())
        assert resp.status_code == 404
        assert resp.json() == {
            "error": {
                "code": "TASK_NOT_FOUND",
                "message": f"Task with id {MISSING_ID} does not exist",
            }
        }

    async def test_activity(self, client: AsyncClient, auth):
        created = await _create(client, auth)
        resp = await client.get(f"/api/tasks/{created['id']}/activity", headers=auth())
        assert resp.status_code == 200
        entries = resp.json()
        assert entries[0]["action"] == "created"
        assert entries[0]["summary"].startswith("Alice created the task")

    async def test_activity_missing(self, client: AsyncClient, auth):
        resp = await client.get(f"/api/tasks/{MISSING_ID}/activity", headers=auth())
        assert resp.status_code == 404


class TestTaskMutationsApi:
    """PATCH /status, PUT, DELETE"""

    async def test_patch_status(self, client: AsyncClient, auth):
        created = await _create(client, auth)

        resp = await client.patch(
            f"/api/tasks/{created['id']}/status",
            json={"status": "In Progress"},
            headers=auth("u1"),
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "In Progress"
        assert data["lastUpdatedBy"]["uid"] == "u1"
        assert data["activityLog"][-1]["details"] == {
            "previousStatus": "Pending",
            "newStatus": "In Progress",
        }

    async def test_patch_invalid_status(self, client: AsyncClient, auth):
        created = await _create(client, auth)
        resp = await client.patch(
            f"/api/tasks/{created['id']}/status", json={"status": "Done"}, headers=auth()
        )
        assert resp.status_code == 400

    async def test_patch_missing_task(self, client: AsyncClient, auth):
        resp = await client.patch(
            f"/api/tasks/{MISSING_ID}/status", json={"status": "Completed"}, headers=auth()
        )
        assert resp.status_code == 404

    async def test_put(self, client: AsyncClient, auth):
        created = await _create(client, auth)

        resp = await client.put(
            f"/api/tasks/{created['id']}",
            json={**TASK_BODY, "description": "", "dueTime": None},
            headers=auth(),
        )

        assert resp.status_code == 200
        details = resp.json()["activityLog"][-1]["details"]
        assert set(details) == {"description", "dueDate", "hasTime"}
        assert details["hasTime"] == {"from": True, "to": False}

    async def test_put_validation(self, client: AsyncClient, auth):
        created = await _create(client, auth)
        resp = await client.put(
            f"/api/tasks/{created['id']}", json={"title": "x"}, headers=auth()
        )
        assert resp.status_code == 400

    async def test_delete(self, client: AsyncClient, auth):
        created = await _create(client, auth)

        resp = await client.delete(f"/api/tasks/{created['id']}", headers=auth())
        assert resp.status_code == 200
        assert resp.json() == {"message": "Task deleted successfully"}

        again = await client.delete(f"/api/tasks/{created['id']}", headers=auth())
        assert again.status_code == 404
