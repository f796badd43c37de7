"""Tests for the HTTP API."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from food_bricks import web
from food_bricks.services import ReminderService
from food_bricks.utils.config import get_settings
from food_bricks.web.app import app
from food_bricks.web.deps import get_storage


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def baby_id(client):
    response = client.post("/babies/", json={
        "user_id": "u1", "name": "Ada", "date_of_birth": "2025-11-01T00:00:00",
    })
    assert response.status_code == 200
    return response.json()["id"]


def start(client, baby_id, food_id, **extra):
    return client.post("/trials", json={"baby_id": baby_id, "food_id": food_id, "user_id": "u1", **extra})


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestBabies:
    def test_creator_caregiver(self, client, baby_id):
        caregivers = client.get(f"/babies/{baby_id}/caregivers").json()
        assert len(caregivers) == 1
        assert caregivers[0]["is_creator"] is True

    def test_unknown_baby(self, client):
        response = client.get("/babies/missing")
        assert response.status_code == 404
        assert "not found" in response.json()["message"]

    def test_steroid_cream(self, client, baby_id):
        cream = client.post(f"/babies/{baby_id}/steroid-cream", json={"duration_days": 5}).json()
        assert client.get(f"/babies/{baby_id}/steroid-cream/active").json()["id"] == cream["id"]

        ended = client.patch(f"/steroid-cream/{cream['id']}/end").json()
        assert ended["status"] == "ended"
        assert client.get(f"/babies/{baby_id}/steroid-cream/active").json() is None


class TestTrials:
    """Tests for the trial lifecycle over HTTP."""

    def test_admission_limit(self, client, baby_id, foods):
        """Test a fourth concurrent observation is refused."""
        for name in ("egg", "peanut", "milk"):
            assert start(client, baby_id, foods[name].id).status_code == 200

        response = start(client, baby_id, foods["oats"].id)

        assert response.status_code == 409
        assert response.json()["message"] == "Maximum 3 active observations allowed"
        assert "which food caused a reaction" in response.json()["details"]

    def test_bad_observation_period(self, client, baby_id, foods):
        response = start(client, baby_id, foods["egg"].id, observation_period_days=30)
        assert response.status_code == 422

    def test_complete_once(self, client, baby_id, foods):
        trial = start(client, baby_id, foods["egg"].id).json()

        response = client.patch(f"/trials/{trial['id']}/complete")
        assert response.status_code == 200
        assert response.json()["brick"]["type"] == "safe"

        assert client.patch(f"/trials/{trial['id']}/complete").status_code == 409
        bricks = client.get(f"/babies/{baby_id}/foods/{foods['egg'].id}/bricks").json()
        assert len(bricks["bricks"]) == 1

    def test_reaction_requires_symptom(self, client, baby_id, foods):
        trial = start(client, baby_id, foods["egg"].id).json()
        response = client.post(f"/trials/{trial['id']}/reactions", json={"types": [], "severity": "mild"})
        assert response.status_code == 422
        assert client.get(f"/babies/{baby_id}/trials").json()[0]["status"] == "observing"

    def test_reaction(self, client, baby_id, foods):
        trial = start(client, baby_id, foods["milk"].id).json()
        response = client.post(
            f"/trials/{trial['id']}/reactions",
            json={"types": ["hives", "rash"], "severity": "moderate", "user_id": "u1"},
        )
        assert response.status_code == 200
        assert response.json()["trial_id"] == trial["id"]

        bricks = client.get(f"/babies/{baby_id}/foods/{foods['milk'].id}/bricks").json()
        assert [b["type"] for b in bricks["bricks"]] == ["reaction"]
        assert bricks["label"] == "Possible sensitivity"

    def test_unknown_trial(self, client):
        assert client.patch("/trials/missing/complete").status_code == 404
        assert client.delete("/trials/missing").status_code == 404

    def test_observing_food_detail_label(self, client, baby_id, foods):
        start(client, baby_id, foods["egg"].id)
        bricks = client.get(f"/babies/{baby_id}/foods/{foods['egg'].id}/bricks").json()
        assert bricks["status"] == "not_tried"
        assert bricks["label"] == "Under observation"

    def test_undo_and_reset(self, client, baby_id, foods):
        first = start(client, baby_id, foods["egg"].id).json()
        client.patch(f"/trials/{first['id']}/complete")
        second = start(client, baby_id, foods["egg"].id, trial_date="2030-01-01T09:00:00").json()

        response = client.delete(f"/babies/{baby_id}/foods/{foods['egg'].id}/latest-trial")
        assert response.json()["trial_id"] == second["id"]

        response = client.delete(f"/babies/{baby_id}/foods/{foods['egg'].id}")
        assert response.json()["deleted"] == 1
        assert client.get(f"/babies/{baby_id}/trials").json() == []

        response = client.delete(f"/babies/{baby_id}/foods/{foods['egg'].id}/latest-trial")
        assert response.status_code == 404


class TestFoodsAndDashboard:
    def test_food_delete_conflict(self, client, baby_id, foods):
        start(client, baby_id, foods["egg"].id)
        assert client.delete(f"/foods/{foods['egg'].id}").status_code == 409
        assert client.delete(f"/foods/{foods['oats'].id}").status_code == 200

    def test_create_food_reuses_name(self, client, foods):
        response = client.post("/foods/", json={"name": "Egg"})
        assert response.json()["id"] == foods["egg"].id

    def test_dashboard(self, client, baby_id, foods):
        trial = start(client, baby_id, foods["egg"].id).json()
        client.patch(f"/trials/{trial['id']}/complete")
        start(client, baby_id, foods["milk"].id)

        data = client.get(f"/dashboard/{baby_id}").json()

        assert data["stats"] == {"total_foods": 2, "safe_foods": 0, "food_allergies": 0}
        assert [t["food"]["name"] for t in data["active_trials"]] == ["Milk"]
        labels = {p["food"]["name"]: p["status_label"] for p in data["food_progress"]}
        assert labels == {"Egg": "Passed once", "Milk": "Not tried"}

    def test_notifications(self, client, baby_id, foods):
        start(client, baby_id, foods["egg"].id)
        notifications = client.get("/notifications", params={"user_id": "u1"}).json()
        assert len(notifications) == 1

        read = client.patch(f"/notifications/{notifications[0]['id']}/read").json()
        assert read["is_read"] is True


class TestTimezones:
    def test_aware_trial_date_accepted(self, client, baby_id, foods, storage):
        """Test a UTC trial date mixes with server-side dates without errors."""
        aware = start(client, baby_id, foods["egg"].id, trial_date="2026-05-01T09:00:00Z")
        assert aware.status_code == 200
        assert not aware.json()["trial_date"].endswith("Z")
        assert start(client, baby_id, foods["milk"].id).status_code == 200

        assert client.get(f"/dashboard/{baby_id}").status_code == 200
        assert client.get(f"/babies/{baby_id}/trials").status_code == 200

        sent = ReminderService(storage).process_due(datetime(2100, 1, 1, tzinfo=timezone.utc))
        assert len(sent) == 2


class TestNotFound:
    """Tests for ids that do not exist."""

    def test_dashboard_unknown_baby(self, client):
        assert client.get("/dashboard/no-such-baby").status_code == 404

    def test_trials_unknown_baby(self, client):
        assert client.get("/babies/no-such-baby/trials").status_code == 404

    def test_bricks_unknown_ids(self, client, baby_id, foods):
        assert client.get(f"/babies/no-such-baby/foods/{foods['egg'].id}/bricks").status_code == 404
        assert client.get(f"/babies/{baby_id}/foods/no-such-food/bricks").status_code == 404


class TestBabyProfiles:
    def test_list_for_user(self, client, baby_id):
        other = client.post("/babies/", json={
            "user_id": "u2", "name": "Bo", "date_of_birth": "2025-06-01T00:00:00",
        }).json()
        client.post(f"/babies/{other['id']}/caregivers", json={"user_id": "u1"})

        names = sorted(b["name"] for b in client.get("/babies/", params={"user_id": "u1"}).json())
        assert names == ["Ada", "Bo"]
        assert [b["name"] for b in client.get("/babies/", params={"user_id": "u2"}).json()] == ["Bo"]

    def test_update(self, client, baby_id):
        response = client.patch(f"/babies/{baby_id}", json={"name": "Ada Rose"})
        assert response.status_code == 200
        assert response.json()["name"] == "Ada Rose"
        assert client.get(f"/babies/{baby_id}").json()["name"] == "Ada Rose"

    def test_update_unknown(self, client):
        assert client.patch("/babies/missing", json={"name": "X"}).status_code == 404


class TestUserSettings:
    def test_get_creates_defaults(self, client):
        data = client.get("/settings", params={"user_id": "u1"}).json()
        assert data["default_observation_period_days"] == 3
        assert data["timezone"] == "Australia/Sydney"

    def test_update_and_default_period(self, client, baby_id, foods):
        response = client.patch("/settings", json={"user_id": "u1", "default_observation_period_days": 5})
        assert response.status_code == 200
        assert client.get("/settings", params={"user_id": "u1"}).json()["default_observation_period_days"] == 5

        trial = start(client, baby_id, foods["egg"].id).json()
        assert trial["observation_period_days"] == 5

    def test_update_out_of_range(self, client):
        response = client.patch("/settings", json={"user_id": "u1", "default_observation_period_days": 20})
        assert response.status_code == 422


class TestRun:
    def test_run_uses_configured_bind(self, monkeypatch):
        """Test run falls back to the configured host and port."""
        calls = []
        monkeypatch.setattr(web.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

        web.run()
        web.run(host="0.0.0.0", port=9000, reload=True)

        settings = get_settings()
        assert calls[0] == ("food_bricks.web.app:app", {
            "host": settings.web_host, "port": settings.web_port, "reload": False,
        })
        assert calls[1][1] == {"host": "0.0.0.0", "port": 9000, "reload": True}
