"""Tests for the session HTTP API."""

from fastapi.testclient import TestClient

from calorie_flash.api.app import create_app
from calorie_flash.containers import AppContainer
from tests.conftest import JPEG_FRAME, FakeDictationBackend, FakeVisionClient


def _client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def test_health(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_capture_analyze_and_edit_flow(container) -> None:
    client = _client(container)

    assert client.put("/camera/frame", content=JPEG_FRAME).json() == {
        "accepted": True
    }
    captured = client.post("/session/capture").json()
    assert captured["status"] == "capturing"
    assert captured["image_count"] == 1

    client.put("/session/notes", json={"notes": "варен ориз"})
    analyzed = client.post("/session/analyze").json()
    assert analyzed["status"] == "reviewing"
    assert analyzed["ingredients"][0]["name"] == "Ориз"
    assert analyzed["totals"]["calories"] == 195

    edited = client.patch("/session/ingredients/0", json={"weight": 300}).json()
    assert edited["ingredients"][0]["calories"] == 390
    assert edited["ingredients"][0]["protein_g"] == 8
    assert edited["display"]["calories"] == 390
    assert edited["display"]["weight_g"] == 300


def test_edit_with_non_numeric_weight_zeroes_item(container) -> None:
    client = _client(container)
    client.put("/camera/frame", content=JPEG_FRAME)
    client.post("/session/analyze")

    response = client.patch("/session/ingredients/0", json={"weight": "abc"})

    assert response.status_code == 200
    assert response.json()["ingredients"][0]["weight_g"] == 0
    assert response.json()["totals"]["calories"] == 0


def test_edit_before_analysis_conflicts(container) -> None:
    response = _client(container).patch("/session/ingredients/0", json={"weight": 1})

    assert response.status_code == 409


def test_edit_unknown_index_is_not_found(container) -> None:
    client = _client(container)
    client.put("/camera/frame", content=JPEG_FRAME)
    client.post("/session/analyze")

    assert client.patch("/session/ingredients/3", json={"weight": 1}).status_code == 404


def test_discard_image(container) -> None:
    client = _client(container)
    client.put("/camera/frame", content=JPEG_FRAME)
    client.post("/session/capture")
    client.post("/session/capture")

    response = client.delete("/session/images/1")

    assert response.json()["image_count"] == 1
    assert client.delete("/session/images/5").status_code == 404


def test_analysis_failure_shows_generic_message(
    container, vision_client: FakeVisionClient
) -> None:
    vision_client.error = TimeoutError("model timed out")
    client = _client(container)
    client.put("/camera/frame", content=JPEG_FRAME)

    data = client.post("/session/analyze").json()

    assert data["status"] == "failed"
    assert data["error"] == container.settings.analysis_error_message
    assert data["ingredients"] == []


def test_analyze_without_frame_stays_idle(
    container, vision_client: FakeVisionClient
) -> None:
    data = _client(container).post("/session/analyze").json()

    assert data["status"] == "idle"
    assert vision_client.calls == []


def test_reset_returns_to_idle_and_reopens_camera(container) -> None:
    client = _client(container)
    client.put("/camera/frame", content=JPEG_FRAME)
    client.post("/session/analyze")
    assert client.put("/camera/frame", content=JPEG_FRAME).json()["accepted"] is False

    data = client.post("/session/reset").json()

    assert data["status"] == "idle"
    assert data["explanation"] is None
    assert client.put("/camera/frame", content=JPEG_FRAME).json()["accepted"] is True


def test_dictation_toggle_and_notes(
    container, dictation_backend: FakeDictationBackend
) -> None:
    client = _client(container)

    assert client.post("/dictation/toggle").json() == {"listening": True}
    dictation_backend.emit("с шопска салата")

    data = client.get("/session").json()
    assert data["notes"] == "с шопска салата"
    assert data["listening"] is False


def test_dictation_audio_requires_transcription_backend(container) -> None:
    response = _client(container).post("/dictation/audio", content=b"audio")

    assert response.status_code == 409
