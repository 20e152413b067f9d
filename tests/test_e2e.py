from fastapi.testclient import TestClient

from conftest import signup


class TestE2E:
    def test_complete_user_journey(self, client: TestClient):
        # 1. Two users sign up
        owner_id, owner = signup(client, "owner@example.com")
        other_id, other = signup(client, "other@example.com")

        # 2. Create a task without a title fails, with one succeeds
        r = client.post("/tasks/", json={}, headers=owner)
        assert r.status_code == 422

        r = client.post("/tasks/", json={"title": "Write report", "description": "Quarterly numbers"}, headers=owner)
        assert r.status_code == 201
        task = r.json()
        task_id = task["id"]
        assert task["owner_id"] == owner_id
        assert task["status"] == "pending"
        assert task["priority"] == "medium"
        assert task["due_date"] is None

        # 3. The task shows up in the owner's listing only
        r = client.get("/tasks/", headers=owner)
        assert r.status_code == 200
        assert [t["id"] for t in r.json()["items"]] == [task_id]

        r = client.get("/tasks/", headers=other)
        assert r.status_code == 200
        assert r.json()["items"] == []
        assert r.json()["message"] == "No tasks found."

        # 4. The other user can see it exists but cannot touch it
        assert client.get(f"/tasks/{task_id}", headers=other).status_code == 403
        assert client.put(f"/tasks/{task_id}", json={"title": "mine now"}, headers=other).status_code == 403
        assert client.delete(f"/tasks/{task_id}", headers=other).status_code == 403

        # ids that don't exist are 404 for everyone
        assert client.get("/tasks/9999", headers=other).status_code == 404
        assert client.put("/tasks/9999", json={"title": "x"}, headers=other).status_code == 404
        assert client.delete("/tasks/9999", headers=other).status_code == 404

        # 5. Owner completes and then deletes the task
        r = client.put(f"/tasks/{task_id}", json={"status": "completed"}, headers=owner)
        assert r.status_code == 200
        assert r.json()["status"] == "completed"
        assert r.json()["title"] == "Write report"

        r = client.delete(f"/tasks/{task_id}", headers=owner)
        assert r.status_code == 200

        r = client.get(f"/tasks/{task_id}", headers=owner)
        assert r.status_code == 404
        assert r.json()["detail"] == "Task not found"

    def test_concurrent_operations(self, client: TestClient):
        """Tasks created from several threads all land with the right owner"""
        import concurrent.futures

        user_id, headers = signup(client)

        def create_task(i):
            return client.post("/tasks/", json={"title": f"Concurrent Task {i}"}, headers=headers)

        with concurrent.futures.ThreadPoolExecutor(max_workers=3) as executor:
            futures = [executor.submit(create_task, i) for i in range(5)]
            responses = [f.result() for f in futures]

        assert all(r.status_code == 201 for r in responses)

        r = client.get("/tasks/", headers=headers)
        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 5
        assert len({t["title"] for t in body["items"]}) == 5
        assert all(t["owner_id"] == user_id for t in body["items"])
