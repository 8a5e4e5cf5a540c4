"""
Tests for ball physics helpers and the BallTracker.
"""
from dataclasses import replace
import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from line_judge.ball import BallTracker, TrackerContext
from line_judge.ball.physics import (
    classify_spin, curvature, detect_bounce, raw_velocity, smooth_velocity, speed_mph,
)
from line_judge.models import (
    BallCandidate, CourtRegion, Perspective, SpinType, TrajectoryPoint,
)
from line_judge.settings import AnalysisSettings


def pt(x, y, t=0.0, vx=0.0, vy=0.0):
    return TrajectoryPoint(x=x, y=y, timestamp_ms=t, vx=vx, vy=vy, confidence=0.9)


def cand(x, y, conf=0.9):
    return BallCandidate(x=float(x), y=float(y), confidence=conf)


def feed(tracker, positions, start_ms=0.0, step_ms=100.0, geometry=None):
    states = []
    for i, (x, y) in enumerate(positions):
        states.append(tracker.update([cand(x, y)], start_ms + i * step_ms, geometry))
    return states


# Falls 10 px per 100 ms, slows, then rises sharply
BOUNCE_PATH = [(300, 100), (300, 110), (300, 120), (300, 125), (300, 95)]


class TestPhysics:

    def test_raw_velocity(self):
        assert raw_velocity(pt(0, 0, t=0), 10, -5, 100) == pytest.approx((100.0, -50.0))

    def test_raw_velocity_no_time(self):
        assert raw_velocity(pt(0, 0, t=100), 10, 0, 100) is None
        assert raw_velocity(pt(0, 0, t=100), 10, 0, 50) is None

    def test_smooth_velocity(self):
        assert smooth_velocity((100.0, 0.0), (0.0, 100.0), 0.3) == pytest.approx((70.0, 30.0))

    def test_speed_pixel_scale(self):
        assert speed_mph((300.0, 400.0)) == pytest.approx(50.0)

    def test_speed_capped(self):
        assert speed_mph((100000.0, 0.0)) == 150.0
        assert speed_mph((0.0, 0.0)) == 0.0

    def test_speed_with_homography(self):
        p = Perspective(homography=np.diag([0.01, 0.01, 1.0]), real_world=True)
        mph = speed_mph((1000.0, 0.0), perspective=p, position=(100.0, 100.0))
        assert mph == pytest.approx(10.0 * 2.23694, rel=1e-4)

    def test_speed_ignores_uncalibrated_perspective(self):
        p = Perspective(homography=np.diag([0.01, 0.01, 1.0]), real_world=False)
        assert speed_mph((1000.0, 0.0), perspective=p, position=(0, 0)) == pytest.approx(100.0)

    def test_flat_spin(self):
        """Decreasing x, near-constant y."""
        points = [pt(300, 200), pt(280, 200.5), pt(260, 201)]
        assert abs(curvature(points)) < 0.001
        assert classify_spin(points) == SpinType.FLAT

    def test_topspin_and_backspin(self):
        # Moving right: dipping path bends clockwise in image coordinates
        assert classify_spin([pt(0, 0), pt(10, 0), pt(20, 5)]) == SpinType.TOPSPIN
        assert classify_spin([pt(0, 0), pt(10, 0), pt(20, -5)]) == SpinType.BACKSPIN

    def test_slice(self):
        # Moving left and dipping: curvature negative while dy grows
        assert classify_spin([pt(20, 0), pt(10, 0), pt(0, 5)]) == SpinType.SLICE

    def test_spin_needs_three_points(self):
        assert classify_spin([pt(0, 0), pt(10, 0)]) == SpinType.UNKNOWN
        assert classify_spin([pt(5, 5), pt(5, 5), pt(10, 0)]) == SpinType.UNKNOWN

    def test_bounce_on_vertical_reversal(self):
        points = [pt(0, 0, vy=5), pt(0, 0, vy=3), pt(0, 0, vy=-2)]
        assert detect_bounce(points)

    def test_no_bounce(self):
        assert not detect_bounce([pt(0, 0, vy=5), pt(0, 0, vy=3), pt(0, 0, vy=2)])
        assert not detect_bounce([pt(0, 0, vy=-5), pt(0, 0, vy=-3), pt(0, 0, vy=2)])
        assert not detect_bounce([pt(0, 0, vy=3), pt(0, 0, vy=-2)])


class TestBallTracker:

    def test_first_detection(self):
        state = BallTracker().update([cand(100, 100)], 0)
        assert state.detected
        assert state.position == (100.0, 100.0)
        assert state.velocity == (0.0, 0.0)
        assert state.speed == 0.0
        assert state.spin == SpinType.UNKNOWN
        assert state.court_region == CourtRegion.UNKNOWN
        assert state.in_bounds

    def test_second_point_takes_raw_velocity(self):
        states = feed(BallTracker(), [(100, 100), (110, 100)])
        assert states[1].velocity == pytest.approx((100.0, 0.0))

    def test_velocity_smoothing(self):
        states = feed(BallTracker(), [(100, 100), (110, 100), (130, 100)])
        # prev 100 px/s, raw 200 px/s
        assert states[2].velocity[0] == pytest.approx(100 * 0.7 + 200 * 0.3)

    def test_same_timestamp_keeps_velocity(self):
        tracker = BallTracker()
        feed(tracker, [(100, 100), (110, 100)])
        state = tracker.update([cand(112, 100)], 100)
        assert state.velocity == pytest.approx((100.0, 0.0))

    def test_flat_spin_scenario(self):
        states = feed(BallTracker(), [(300, 200), (280, 200.5), (260, 201)])
        assert states[2].spin == SpinType.FLAT

    def test_bounce_scenario(self):
        states = feed(BallTracker(), BOUNCE_PATH)
        assert states[3].velocity[1] > 0
        assert states[4].velocity[1] < 0
        assert states[4].bounce_detected
        assert not any(s.bounce_detected for s in states[:4])

    def test_missing_detections_reuse_last_state(self):
        tracker = BallTracker()
        last = feed(tracker, BOUNCE_PATH)[-1]
        assert last.bounce_detected

        for i in range(5):
            state = tracker.update([], 500 + i * 100)
            assert state.position == last.position
            assert state.speed == last.speed
            assert state.spin == last.spin
            assert not state.bounce_detected
            assert not state.detected
            assert state.confidence == 0.0

    def test_no_detection_ever(self):
        state = BallTracker().update([], 0)
        assert state.position is None
        assert not state.detected

    def test_low_confidence_dropped(self):
        state = BallTracker().update([cand(100, 100, conf=0.6)], 0)
        assert not state.detected

    def test_gating(self):
        tracker = BallTracker()
        tracker.update([cand(100, 100)], 0)
        state = tracker.update([cand(400, 400, conf=0.99)], 100)
        assert not state.detected
        assert state.position == (100.0, 100.0)

    def test_gate_keeps_close_candidates(self):
        tracker = BallTracker()
        tracker.update([cand(100, 100)], 0)
        kept = tracker.gate([cand(200, 100), cand(300, 100), cand(120, 100, conf=0.5)])
        assert kept == [cand(200, 100)]

    def test_prefers_trajectory_consistent_candidate(self):
        tracker = BallTracker()
        feed(tracker, [(100, 100), (110, 100)])
        state = tracker.update([cand(200, 100, conf=0.99), cand(121, 100, conf=0.75)], 200)
        assert state.position == (121.0, 100.0)

    def test_ties_keep_first(self):
        state = BallTracker().update([cand(100, 100), cand(110, 100)], 0)
        assert state.position == (100.0, 100.0)

    def test_implausible_candidate_scores_lower(self):
        tracker = BallTracker()
        tracker.update([cand(100, 100)], 0)
        # 140 px in 10 ms is far over the speed cap
        fast, slow = cand(240, 100), cand(105, 100)
        assert tracker.score(slow, 10) > tracker.score(fast, 10)

    def test_speed_bounded(self):
        tracker = BallTracker()
        states = feed(tracker, [(100 + 140 * i, 100) for i in range(4)], step_ms=10)
        assert all(0.0 <= s.speed <= 150.0 for s in states)
        assert states[-1].speed == 150.0

    def test_trajectory_window(self):
        tracker = BallTracker()
        positions = [(100 + i * 5, 200) for i in range(40)]
        states = feed(tracker, positions)
        latest = states[-1].timestamp_ms
        assert all(latest - p.timestamp_ms <= 2000 for p in tracker.trajectory)
        assert len(tracker.trajectory) == 21
        assert len(states[-1].trajectory) == 5

    def test_window_applies_without_detections(self):
        tracker = BallTracker()
        feed(tracker, [(100, 100), (110, 100)])
        tracker.update([], 2500)
        assert tracker.trajectory == []

    def test_backwards_timestamp_resets_trajectory(self):
        tracker = BallTracker()
        feed(tracker, [(100, 100), (110, 100), (120, 100)], start_ms=1000)
        state = tracker.update([cand(115, 100)], 500)
        assert state.detected
        assert len(tracker.trajectory) == 1
        assert state.velocity == (0.0, 0.0)

    def test_reacquire_after_lost_track(self):
        tracker = BallTracker()
        tracker.update([cand(100, 100)], 0)
        state = tracker.update([cand(500, 400)], 3000)
        assert state.detected
        assert state.position == (500.0, 400.0)
        assert state.velocity == (0.0, 0.0)

    def test_region_needs_three_points(self, full_geometry):
        tracker = BallTracker()
        states = feed(tracker, [(590, 240), (595, 240), (600, 240)], geometry=full_geometry)
        assert states[0].court_region == CourtRegion.UNKNOWN
        assert not states[0].in_bounds
        assert states[2].court_region == CourtRegion.OUT
        assert not states[2].in_bounds

    def test_service_box_region(self, full_geometry):
        states = feed(BallTracker(), [(200, 250), (202, 250), (204, 250)],
                      geometry=full_geometry)
        assert states[2].court_region == CourtRegion.SERVICE_BOX_DEUCE
        assert states[2].in_bounds
        states = feed(BallTracker(), [(400, 250), (402, 250), (404, 250)],
                      geometry=full_geometry)
        assert states[2].court_region == CourtRegion.SERVICE_BOX_AD

    def test_baseline_region(self, full_geometry):
        states = feed(BallTracker(), [(300, 80), (302, 80), (304, 80)], geometry=full_geometry)
        assert states[2].court_region == CourtRegion.BASELINE

    def test_homography_speed(self, full_geometry):
        p = Perspective(homography=np.diag([0.01, 0.01, 1.0]), real_world=True)
        geometry = replace(full_geometry, perspective=p)
        states = feed(BallTracker(), [(200, 250), (300, 250)], geometry=geometry)
        assert states[1].speed == pytest.approx(10.0 * 2.23694, rel=1e-4)

        pixel_only = AnalysisSettings(use_homography_speed=False)
        states = feed(BallTracker(pixel_only), [(200, 250), (300, 250)], geometry=geometry)
        assert states[1].speed == pytest.approx(100.0)

    def test_analysis_and_reset(self):
        tracker = BallTracker()
        feed(tracker, BOUNCE_PATH)
        summary = tracker.analysis()
        assert summary.total_points == 5
        assert summary.bounces == 1
        assert summary.max_speed >= summary.average_speed > 0
        assert sum(summary.spin_counts.values()) == 5

        tracker.reset()
        assert tracker.trajectory == []
        assert tracker.analysis().total_points == 0

    def test_contexts_are_independent(self):
        a, b = TrackerContext(), TrackerContext()
        feed(BallTracker(context=a), [(100, 100), (110, 100)])
        feed(BallTracker(context=b), [(400, 300)])
        assert len(a.trajectory) == 2
        assert len(b.trajectory) == 1
        assert a.last_known.position == (110.0, 100.0)

    def test_deterministic(self):
        s1 = feed(BallTracker(), BOUNCE_PATH)
        s2 = feed(BallTracker(), BOUNCE_PATH)
        assert [s.to_dict() for s in s1] == [s.to_dict() for s in s2]
