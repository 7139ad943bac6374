from eztodo import codec
from eztodo.errors import PersistenceError


def create_plan(client, **overrides):
    payload = {"title": "Stretch", "schedule": {"kind": "daily"}, "start_at": "2025-03-01"}
    payload.update(overrides)
    res = client.post("/api/v1/plans/", json=payload)
    assert res.status_code == 201
    return res.json()


class TestPlansCRUD:
    def test_create_get_update_delete(self, client):
        plan = create_plan(client, schedule={"kind": "weekly", "weekdays": [0, 3], "at": "08:00"})
        assert plan["schedule"] == {"kind": "weekly", "weekdays": [0, 3], "at": "08:00:00"}
        assert plan["last_refreshed_at"] is None

        assert client.get(f"/api/v1/plans/{plan['id']}").json()["title"] == "Stretch"
        assert [p["id"] for p in client.get("/api/v1/plans/").json()] == [plan["id"]]

        res_patch = client.patch(f"/api/v1/plans/{plan['id']}", json={"active": False})
        assert res_patch.status_code == 200
        assert res_patch.json()["active"] is False

        assert client.delete(f"/api/v1/plans/{plan['id']}").status_code == 204
        res_404 = client.get(f"/api/v1/plans/{plan['id']}")
        assert res_404.status_code == 404
        assert res_404.json()["detail"] == "Plan not found"

    def test_invalid_schedule_is_422(self, client):
        res = client.post("/api/v1/plans/", json={"title": "Never", "schedule": {"kind": "weekly", "weekdays": []}})
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"

    def test_moving_last_refreshed_at_backwards_is_422(self, client):
        plan = create_plan(client, last_refreshed_at="2025-03-08")
        res = client.patch(f"/api/v1/plans/{plan['id']}", json={"last_refreshed_at": "2025-03-01"})
        assert res.status_code == 422
        body = res.json()
        assert body["error"] == "ValidationError"
        assert body["detail"][0]["loc"] == ["last_refreshed_at"]


class TestRefreshAndHistory:
    def test_refresh_generates_todos_and_history(self, client):
        # the test clock reads 2025-03-10 09:00
        plan = create_plan(client, last_refreshed_at="2025-03-08T00:00:00")

        res = client.post("/api/v1/plans/refresh")
        assert res.status_code == 200
        body = res.json()
        assert body["generated"] == 2
        assert body["errors"] == {}
        assert [t["due_date"] for t in body["todos"]] == ["2025-03-09T00:00:00", "2025-03-10T00:00:00"]

        again = client.post("/api/v1/plans/refresh").json()
        assert again["generated"] == 0

        todos = client.get(f"/api/v1/todos/?plan_id={plan['id']}").json()
        assert todos["total"] == 2

        history = client.get("/api/v1/history/").json()
        assert [h["event"] for h in history] == ["generated", "generated"]
        assert {h["subject_id"] for h in history} == {plan["id"]}

    def test_completion_shows_in_history(self, client):
        tid = client.post("/api/v1/todos/", json={"title": "Finish"}).json()["id"]
        client.patch(f"/api/v1/todos/{tid}", json={"completed": True})

        history = client.get("/api/v1/history/").json()
        assert len(history) == 1
        assert history[0]["event"] == "completed"
        assert history[0]["subject_kind"] == "todo"
        assert history[0]["subject_id"] == tid
        assert history[0]["title"] == "Finish"

    def test_persistence_failure_is_500_and_not_applied(self, client, monkeypatch):
        def broken_save(path, records, model):
            raise PersistenceError(path, OSError("read-only file system"))

        monkeypatch.setattr(codec, "save", broken_save)
        res = client.post("/api/v1/todos/", json={"title": "Unsaved"})
        assert res.status_code == 500
        assert res.json()["error"] == "PersistenceError"

        monkeypatch.undo()
        assert client.get("/api/v1/todos/").json()["total"] == 0
