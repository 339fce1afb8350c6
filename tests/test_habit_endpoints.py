import asyncio
import datetime
import importlib
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

from habit_tracker.core.context import UserContext
from habit_tracker.services.habit_engine import HabitEngine
from habit_tracker.web import dependencies


@pytest.fixture()
def application(monkeypatch):
    monkeypatch.setenv("SESSION_SECRET", "test-secret")
    db_module = importlib.import_module("habit_tracker.core.db")
    monkeypatch.setattr(db_module, "_ensure_db_initialized", lambda: None)
    application_module = importlib.import_module("habit_tracker.application")
    return application_module.create_app()


@contextmanager
def _client(application, store, today=None, user_id="user-1"):
    async def _engine_override():
        engine = HabitEngine(store, UserContext(user_id), today_fn=lambda: today)
        return await engine.load()

    application.dependency_overrides[dependencies.get_store] = lambda: store
    if today is not None:
        application.dependency_overrides[dependencies.get_engine] = _engine_override
    with TestClient(application) as client:
        yield client
    application.dependency_overrides.clear()


def test_requests_without_session_are_rejected(application, store):
    with _client(application, store) as client:
        response = client.get("/api/habits")

    assert response.status_code == 401


def test_session_login_scopes_habits(application, store, monkeypatch):
    monkeypatch.setenv("HABIT_DEV_LOGIN", "1")
    with _client(application, store) as client:
        assert client.post("/api/session", json={"user_id": "alice"}).status_code == 200
        created = client.post("/api/habits", json={"name": "Walk", "frequency": "daily"})
        assert created.status_code == 201
        assert created.json()["name"] == "Walk"

        client.post("/api/session", json={"user_id": "bob"})
        assert client.get("/api/habits").json() == {"habits": [], "completed_today": 0, "total": 0}

        assert client.delete("/api/session").json() == {"status": "cleared"}
        assert client.get("/api/habits").status_code == 401

    assert [h.owner_id for h in store.habits.values()] == ["alice"]


def test_create_and_list_payload_shape(application, store, today):
    with _client(application, store, today) as client:
        response = client.post(
            "/api/habits",
            json={"name": "Gym", "description": "", "frequency": "custom", "days": ["thu", "mon"]},
        )
        listing = client.get("/api/habits").json()

    assert response.status_code == 201
    body = response.json()
    assert body["days"] == ["mon", "thu"]
    assert body["description"] is None
    assert body["streak"] == 0
    assert body["due_today"] is True
    assert body["completed_today"] is False
    assert [h["id"] for h in listing["habits"]] == [body["id"]]


def test_create_validation_errors_are_per_field(application, store, today):
    with _client(application, store, today) as client:
        response = client.post(
            "/api/habits",
            json={"name": "  ", "description": "x" * 501, "frequency": "daily"},
        )

    assert response.status_code == 422
    errors = response.json()["errors"]
    assert errors["name"] == "Name is required"
    assert errors["description"] == "Description must be less than 500 characters"
    assert store.habits == {}


def test_toggle_updates_streak_and_detail_history(application, store, today):
    with _client(application, store, today) as client:
        habit_id = client.post("/api/habits", json={"name": "Read"}).json()["id"]
        yesterday = (today - datetime.timedelta(days=1)).isoformat()

        first = client.post(f"/api/habits/{habit_id}/entries/{today.isoformat()}/toggle")
        client.post(f"/api/habits/{habit_id}/entries/{yesterday}/toggle")
        detail = client.get(f"/api/habits/{habit_id}").json()
        undone = client.post(f"/api/habits/{habit_id}/entries/{today.isoformat()}/toggle")

    assert first.status_code == 200
    assert first.json()["entry"]["completed"] is True
    assert first.json()["streak"] == 1
    assert detail["streak"] == 2
    assert len(detail["history"]) == 14
    assert detail["history"][-1] == {"date": today.isoformat(), "completed": True, "due": True}
    assert detail["history"][-2]["completed"] is True
    assert undone.json()["entry"]["completed"] is False
    assert undone.json()["streak"] == 0


def test_toggle_rejects_invalid_date(application, store, today):
    with _client(application, store, today) as client:
        habit_id = client.post("/api/habits", json={"name": "Read"}).json()["id"]
        response = client.post(f"/api/habits/{habit_id}/entries/not-a-date/toggle")

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid date format"


def test_missing_habit_returns_not_found(application, store, today):
    with _client(application, store, today) as client:
        detail = client.get("/api/habits/77")
        update = client.put("/api/habits/77", json={"name": "Ghost"})
        toggle = client.post(f"/api/habits/77/entries/{today.isoformat()}/toggle")

    for response in (detail, update, toggle):
        assert response.status_code == 404
        assert response.json()["detail"] == "This habit may have been deleted."


def test_update_archive_and_delete(application, store, today):
    with _client(application, store, today) as client:
        keep_id = client.post("/api/habits", json={"name": "Keep"}).json()["id"]
        archive_id = client.post("/api/habits", json={"name": "Archive"}).json()["id"]

        updated = client.put(
            f"/api/habits/{keep_id}", json={"name": "Kept", "frequency": "weekends"}
        ).json()
        archived = client.post(f"/api/habits/{archive_id}/archive")
        after_archive = client.get("/api/habits").json()["habits"]
        deleted = client.delete(f"/api/habits/{keep_id}")
        deleted_again = client.delete(f"/api/habits/{keep_id}")
        after_delete = client.get("/api/habits").json()["habits"]

    assert updated["name"] == "Kept"
    assert updated["days"] == ["sat", "sun"]
    assert updated["due_today"] is False
    assert archived.json() == {"status": "archived", "id": archive_id}
    assert [h["id"] for h in after_archive] == [keep_id]
    assert deleted.json() == {"status": "deleted", "id": keep_id}
    assert deleted_again.status_code == 200
    assert after_delete == []
    assert store.habits[archive_id].is_archived is True


def test_legacy_weekly_habit_reports_undefined_due(application, store, today):
    with _client(application, store, today) as client:
        habit_id = client.post("/api/habits", json={"name": "Legacy"}).json()["id"]
        store.habits[habit_id] = store.habits[habit_id].model_copy(
            update={"frequency": "weekly", "days": None}
        )
        listing = client.get("/api/habits").json()["habits"]

    assert listing[0]["frequency"] == "weekly"
    assert listing[0]["days"] == []
    assert listing[0]["due_today"] is None


def test_store_failure_maps_to_bad_gateway(application, store, today):
    store.fail_on.add("insert_habit")
    with _client(application, store, today) as client:
        response = client.post("/api/habits", json={"name": "Read"})

    assert response.status_code == 502
    assert response.json()["detail"] == "insert_habit failed"


def test_session_login_is_disabled_by_default(application, store, monkeypatch):
    monkeypatch.delenv("HABIT_DEV_LOGIN", raising=False)
    with _client(application, store) as client:
        response = client.post("/api/session", json={"user_id": "alice"})
        listing = client.get("/api/habits")

    assert response.status_code == 404
    assert listing.status_code == 401


def test_listing_reports_completed_and_total_counts(application, store, today):
    with _client(application, store, today) as client:
        done_id = client.post("/api/habits", json={"name": "Done"}).json()["id"]
        client.post("/api/habits", json={"name": "Pending"})
        client.post(f"/api/habits/{done_id}/entries/{today.isoformat()}/toggle")
        listing = client.get("/api/habits").json()

    assert listing["total"] == 2
    assert listing["completed_today"] == 1
    assert [h["completed_today"] for h in listing["habits"]] == [False, True]


def test_history_grid_is_loaded_beyond_short_entry_window(application, store, monkeypatch):
    monkeypatch.setenv("HABIT_ENTRY_WINDOW_DAYS", "5")
    monkeypatch.setenv("HABIT_HISTORY_DAYS", "14")
    today = datetime.date.today()
    values = {"name": "Read", "description": None, "frequency": "daily", "days": "0,1,2,3,4,5,6"}
    habit = asyncio.run(store.insert_habit("user-1", values))
    for offset in range(10):
        store.seed_entry(habit.id, today - datetime.timedelta(days=offset))

    application.dependency_overrides[dependencies.get_user_context] = lambda: UserContext("user-1")
    with _client(application, store) as client:
        detail = client.get(f"/api/habits/{habit.id}").json()

    assert [day["completed"] for day in detail["history"]] == [False] * 4 + [True] * 10
    assert detail["streak"] == 10
