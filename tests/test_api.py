"""HTTP tests for the screening router with a fake keypoint provider."""

import cv2
import pytest
from fastapi.testclient import TestClient

from scodia.main import app
from scodia.routers.screening import get_detector

from conftest import FakeProvider, SlowProvider, marked_image


def png(marker: int) -> bytes:
    ok, buf = cv2.imencode(".png", marked_image(marker))
    assert ok
    return buf.tobytes()


@pytest.fixture
def client(tilted_back_pose, upright_side_pose):
    provider = FakeProvider({1: upright_side_pose, 2: tilted_back_pose})
    app.dependency_overrides[get_detector] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestScreeningApi:
    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "ok"}

    def test_info(self, client) -> None:
        data = client.get("/screening/").json()
        assert data["views"] == ["side", "back"]

    def test_analyze_both_photos(self, client) -> None:
        resp = client.post(
            "/screening/analyze",
            files={
                "side": ("side.png", png(1), "image/png"),
                "back": ("back.png", png(2), "image/png"),
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["risk_score"] == 34
        assert data["verdict"] == "medium"
        assert data["verdict_color"] == "orange"
        assert data["shoulder_tilt_text"] == "45.0°"
        assert data["side_lean_text"] == "0.0°"
        assert data["axis_shift_text"] == "0%"
        assert len(data["recommendations"]) == 4

    def test_analyze_undecodable_photo(self, client) -> None:
        resp = client.post(
            "/screening/analyze",
            files={"back": ("back.jpg", b"not a jpeg", "image/jpeg")},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["risk_score"] == 0
        assert data["shoulder_tilt_deg"] is None
        assert len(data["recommendations"]) == 3

    def test_analyze_without_photos(self, client) -> None:
        resp = client.post("/screening/analyze")
        assert resp.status_code == 400

    def test_keypoints(self, client) -> None:
        resp = client.post(
            "/screening/keypoints",
            files={"file": ("back.png", png(2), "image/png")},
        )
        data = resp.json()
        assert data["pose_detected"] is True
        assert data["count"] == 4
        joints = {kp["joint"] for kp in data["keypoints"]}
        assert joints == {"left_shoulder", "right_shoulder", "left_hip", "right_hip"}

    def test_keypoints_no_person(self, client) -> None:
        resp = client.post(
            "/screening/keypoints",
            files={"file": ("empty.png", png(9), "image/png")},
        )
        assert resp.json() == {"pose_detected": False, "keypoints": [], "count": 0}

    def test_keypoints_invalid_image(self, client) -> None:
        resp = client.post(
            "/screening/keypoints",
            files={"file": ("bad.png", b"garbage", "image/png")},
        )
        assert resp.status_code == 400

    def test_thresholds(self, client) -> None:
        data = client.get("/screening/thresholds").json()
        assert data["joint_confidence_threshold"] == 0.2
        assert data["full_scale"]["shoulder_tilt_deg"] == 12.0
        assert data["tiers"]["medium"] == [25, 59]
        assert data["weights"]["shoulder"] == 0.34

    def test_keypoints_slow_detector_times_out(self, monkeypatch) -> None:
        import scodia.routers.screening as screening
        from scodia.config import Settings

        monkeypatch.setattr(screening, "get_settings", lambda: Settings(DETECTION_TIMEOUT_S=0.05))
        app.dependency_overrides[get_detector] = lambda: SlowProvider(0.5)
        try:
            resp = TestClient(app).post(
                "/screening/keypoints",
                files={"file": ("back.png", png(2), "image/png")},
            )
        finally:
            app.dependency_overrides.clear()
        assert resp.status_code == 200
        assert resp.json()["pose_detected"] is False
