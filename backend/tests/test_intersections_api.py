"""
Tests for the intersection API endpoints.

These tests use FastAPI's TestClient to simulate requests against the
application without running a real server.  The JSON endpoint runs the
pure-Python pipeline; the STEP upload endpoint is only exercised for
input validation here (see test_occ_geometry.py for real STEP files).
"""

import io
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add the backend directory to sys.path so we can import the app
sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.main import app  # type: ignore


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def profile(x0: float, y0: float, x1: float, y1: float, **extra) -> dict:
    body = {"outline": [[x0, y0], [x1, y0], [x1, y1], [x0, y1]]}
    body.update(extra)
    return body


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_intersect_overlapping_profiles(client: TestClient) -> None:
    response = client.post(
        "/api/intersections",
        json={"eave": profile(0, 0, 10, 10), "boundary": profile(5, 5, 15, 15, top=3.0)},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["metadata"]["loopCount"] == 1
    assert data["metadata"]["totalArea"] == pytest.approx(25.0, abs=0.01)
    assert data["metadata"]["scale"] == pytest.approx(304.8)
    loop = data["loops"][0]
    assert loop["index"] == 0
    assert len(loop["segments"]) == 4
    assert loop["segments"][-1]["end"] == loop["segments"][0]["start"]
    assert all(seg["start"]["z"] == 0.0 for seg in loop["segments"])


def test_intersect_with_hole(client: TestClient) -> None:
    eave = profile(0, 0, 10, 10, holes=[[[4, 4], [6, 4], [6, 6], [4, 6]]])
    response = client.post(
        "/api/intersections",
        json={"eave": eave, "boundary": profile(-1, -1, 11, 11)},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["metadata"]["loopCount"] == 2
    assert data["metadata"]["totalArea"] == pytest.approx(96.0, abs=0.01)


def test_disjoint_profiles_return_no_loops(client: TestClient) -> None:
    response = client.post(
        "/api/intersections",
        json={"eave": profile(0, 0, 1, 1), "boundary": profile(5, 5, 6, 6)},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["loops"] == []
    assert data["metadata"]["loopCount"] == 0
    assert data["metadata"]["totalArea"] == 0.0


def test_invalid_profile_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/intersections",
        json={"eave": {"outline": [[0, 0], [1, 0]]}, "boundary": profile(0, 0, 1, 1)},
    )
    assert response.status_code == 400
    response = client.post(
        "/api/intersections",
        json={"eave": profile(0, 0, 1, 1, bottom=2.0, top=1.0), "boundary": profile(0, 0, 1, 1)},
    )
    assert response.status_code == 400


def test_missing_operand_fails_validation(client: TestClient) -> None:
    response = client.post("/api/intersections", json={"eave": profile(0, 0, 1, 1)})
    assert response.status_code == 422


def test_step_upload_rejects_unsupported_extension(client: TestClient) -> None:
    response = client.post(
        "/api/intersections/step",
        files={
            "eave": ("eave.igs", io.BytesIO(b"not a step file"), "application/octet-stream"),
            "boundary": ("boundary.step", io.BytesIO(b"ISO-10303-21;"), "application/octet-stream"),
        },
    )
    assert response.status_code == 400
    assert "Unsupported file extension" in response.json()["detail"]
