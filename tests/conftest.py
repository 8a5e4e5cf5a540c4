"""
Pytest fixtures for line judge tests.
"""
import cv2
import numpy as np
import pytest
import tempfile
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from line_judge.court import CourtGeometryBuilder
from line_judge.errors import DetectorUnavailable
from line_judge.models import (
    BallCandidate, BallState, Frame, LineOrientation, LineSegment,
)

GRASS = (40, 140, 40)          # BGR
WHITE = (255, 255, 255)

# Outer court rectangle drawn into the synthetic frames
COURT_LEFT, COURT_RIGHT = 80, 560
COURT_TOP, COURT_BOTTOM = 60, 420


def hline(y, x1=COURT_LEFT, x2=COURT_RIGHT, strength=0.0):
    return LineSegment(x1, y, x2, y, strength=strength,
                       orientation=LineOrientation.HORIZONTAL)


def vline(x, y1=COURT_TOP, y2=COURT_BOTTOM, strength=0.0):
    return LineSegment(x, y1, x, y2, strength=strength,
                       orientation=LineOrientation.VERTICAL)


def ball_state(x, y, t_ms=1000.0, speed=60.0, confidence=0.9, detected=True):
    return BallState(timestamp_ms=t_ms, position=(x, y), speed=speed,
                     confidence=confidence, detected=detected)


class ScriptedDetector:
    """Plays back a fixed list of candidate lists, one per detect() call."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = 0

    def detect(self, frame):
        out = self.script[self.calls] if self.calls < len(self.script) else []
        self.calls += 1
        return list(out)


class AsyncScriptedDetector(ScriptedDetector):

    async def detect(self, frame):
        return ScriptedDetector.detect(self, frame)


class UnavailableDetector:

    def detect(self, frame):
        raise DetectorUnavailable("model not loaded")


@pytest.fixture
def court_pixels():
    """640x480 green court with a white outer rectangle, 3 px lines."""
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[:] = GRASS
    cv2.rectangle(frame, (COURT_LEFT, COURT_TOP), (COURT_RIGHT, COURT_BOTTOM), WHITE, 3)
    return frame


@pytest.fixture
def court_frame(court_pixels):
    return Frame(pixels=court_pixels, timestamp_ms=0.0, frame_number=0)


@pytest.fixture
def blank_frame():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[:] = GRASS
    return Frame(pixels=frame, timestamp_ms=0.0)


@pytest.fixture
def full_court_lines():
    """All eight court roles as strong lines on a 640x480 frame."""
    horizontals = [hline(y, strength=400.0) for y in (60, 150, 240, 330, 420)]
    verticals = [vline(x, strength=400.0) for x in (80, 320, 560)]
    return horizontals + verticals


@pytest.fixture
def full_geometry(full_court_lines):
    """Bounds (80, 60)-(560, 420), net at y=240, center line at x=320."""
    return CourtGeometryBuilder().build(full_court_lines, 640, 480)


@pytest.fixture
def candidate():
    return BallCandidate(x=320.0, y=200.0, confidence=0.95, radius=6.0)


@pytest.fixture
def temp_video_file():
    """Two-second 640x480 MJPG clip of the court with a ball crossing it."""
    with tempfile.NamedTemporaryFile(suffix='.avi', delete=False) as f:
        temp_path = Path(f.name)

    fourcc = cv2.VideoWriter_fourcc(*'MJPG')
    writer = cv2.VideoWriter(str(temp_path), fourcc, 30.0, (640, 480))
    for i in range(60):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        frame[:] = GRASS
        cv2.rectangle(frame, (COURT_LEFT, COURT_TOP), (COURT_RIGHT, COURT_BOTTOM), WHITE, 3)
        cv2.circle(frame, (150 + i * 5, 200), 6, (60, 230, 230), -1)
        writer.write(frame)
    writer.release()

    yield temp_path

    if temp_path.exists():
        temp_path.unlink()


@pytest.fixture
def temp_output_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
