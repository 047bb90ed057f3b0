import pytest

import app as app_module
from app import app, sessions
from tests.helpers import FakeClock


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
    sessions.clear()


def head_payload(nose_x):
    return {"landmarks": {
        "nose": {"x": nose_x, "y": 50, "confidence": 0.9},
        "left_eye": [95, 40, 0.9], "right_eye": [105, 40, 0.9],
        "left_ear": [80, 45, 0.9], "right_ear": [120, 45, 0.9],
        "left_shoulder": [70, 120, 0.9], "right_shoulder": [130, 120, 0.9],
    }}


def start(client, **body):
    response = client.post("/sessions", json=body)
    assert response.status_code == 201
    return response.get_json()


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_head_turn_session_flow(client):
    created = start(client, exercise="head_turns", target=2)
    session_id = created["session_id"]
    assert created["progress"] == 0
    assert created["target"] == 2

    for nose_x in (100, 90, 100):
        status = client.post(f"/sessions/{session_id}/frames", json=head_payload(nose_x)).get_json()
    assert status["progress"] == 1
    assert status["form_valid"]
    assert not status["completed"]

    status = client.post(f"/sessions/{session_id}/frames", json=head_payload(110)).get_json()
    assert status["completed"]
    assert status["phase"] == "RIGHT"

    assert client.get(f"/sessions/{session_id}").get_json()["frames_processed"] == 4

    final = client.delete(f"/sessions/{session_id}").get_json()
    assert final["progress"] == 2
    assert client.get(f"/sessions/{session_id}").status_code == 404


def test_not_visible_frame(client):
    session_id = start(client, exercise="squats")["session_id"]
    status = client.post(f"/sessions/{session_id}/frames",
                         json={"landmarks": {"nose": [1, 2, 0.9]}}).get_json()
    assert not status["user_visible"]
    assert status["frames_dropped"] == 1


def test_plank_defaults(client):
    created = start(client, exercise="plank")
    assert created["target"] == 60
    assert created["remaining_seconds"] == 60


def test_reset(client):
    session_id = start(client, exercise="head_turns", target=5)["session_id"]
    client.post(f"/sessions/{session_id}/frames", json=head_payload(90))
    status = client.post(f"/sessions/{session_id}/reset").get_json()
    assert status["progress"] == 0
    assert status["frames_processed"] == 0


@pytest.mark.parametrize("body", [
    {},
    {"exercise": "burpees"},
    {"exercise": "squats", "target": "ten"},
    {"exercise": "squats", "squat_strategy": "magic"},
    {"exercise": "squats", "target": -3},
])
def test_bad_session_requests(client, body):
    response = client.post("/sessions", json=body)
    assert response.status_code == 400
    assert response.get_json()["status"] == "error"


def test_bad_frame_payload(client):
    session_id = start(client, exercise="squats")["session_id"]
    response = client.post(f"/sessions/{session_id}/frames", json={"landmarks": {"nose": {"x": "a", "y": 1}}})
    assert response.status_code == 400


def test_unknown_session(client):
    response = client.post("/sessions/nope/frames", json=head_payload(100))
    assert response.status_code == 404
    assert response.get_json()["status"] == "error"


def test_out_of_range_confidence_is_rejected(client):
    session_id = start(client, exercise="head_turns")["session_id"]
    response = client.post(f"/sessions/{session_id}/frames", json={"landmarks": {"nose": [1, 2, 7.5]}})
    assert response.status_code == 400
    assert client.get(f"/sessions/{session_id}").get_json()["frames_processed"] == 0


@pytest.fixture
def fake_clock(monkeypatch):
    clock = FakeClock(start=1000.0)
    monkeypatch.setattr(app_module, "clock", clock)
    monkeypatch.setattr(app_module, "SESSION_TTL_SECONDS", 60.0)
    return clock


def test_idle_session_expires(client, fake_clock):
    session_id = start(client, exercise="head_turns")["session_id"]

    fake_clock.advance(50)
    client.post(f"/sessions/{session_id}/frames", json=head_payload(100))
    fake_clock.advance(50)
    assert client.get(f"/sessions/{session_id}").status_code == 200

    fake_clock.advance(61)
    assert client.get(f"/sessions/{session_id}").status_code == 404


def test_abandoned_sessions_are_evicted_on_create(client, fake_clock):
    for _ in range(20):
        start(client, exercise="squats")
    assert len(sessions) == 20

    fake_clock.advance(61)
    latest = start(client, exercise="squats")["session_id"]
    assert list(sessions) == [latest]
