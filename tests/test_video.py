"""
Tests for video loading, the offline analyser and JSON export.
"""
import json
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from line_judge import HoughBallDetector, MatchPipeline
from line_judge.exporter import Exporter
from line_judge.models import (
    AnalysisResult, BallState, CallType, CourtRegion, FrameResult, UmpireCall,
    VideoMetadata,
)
from line_judge.video import VideoAnalyser, VideoLoader


class TestVideoLoader:

    def test_metadata(self, temp_video_file):
        with VideoLoader(str(temp_video_file)) as loader:
            meta = loader.metadata
            assert (meta.width, meta.height) == (640, 480)
            assert meta.fps == pytest.approx(30.0, abs=0.5)

    def test_every_frame(self, temp_video_file):
        with VideoLoader(str(temp_video_file)) as loader:
            frames = list(loader.frames())
        assert len(frames) == 60
        assert [f.frame_number for f in frames] == list(range(60))

    def test_interval(self, temp_video_file):
        with VideoLoader(str(temp_video_file)) as loader:
            frames = list(loader.frames(interval_ms=100))
        assert 18 <= len(frames) <= 21
        gaps = [b.timestamp_ms - a.timestamp_ms for a, b in zip(frames, frames[1:])]
        assert all(g >= 100 - 1e-6 for g in gaps)

    def test_max_frames(self, temp_video_file):
        with VideoLoader(str(temp_video_file)) as loader:
            assert len(list(loader.frames(max_frames=7))) == 7

    def test_missing_file(self):
        with pytest.raises(IOError):
            with VideoLoader("/nonexistent/match.mp4"):
                pass

    def test_metadata_needs_open(self):
        with pytest.raises(RuntimeError):
            VideoLoader("unused.mp4").metadata


def sample_result():
    meta = VideoMetadata(width=640, height=480, fps=30.0, total_frames=2, duration_s=0.07)
    call = UmpireCall(id="call_0_600_100", timestamp_ms=0.0, call_type=CallType.OUT,
                      confidence=0.9, position=(600.0, 100.0), court_region=CourtRegion.OUT,
                      ball_speed=70.0, challengeable=True)
    frames = [
        FrameResult(frame_number=0, timestamp_ms=0.0, call=call, announce=True,
                    ball=BallState(timestamp_ms=0.0, position=(600.0, 100.0),
                                   detected=True, confidence=0.9)),
        FrameResult(frame_number=3, timestamp_ms=100.0, skipped=True,
                    ball=BallState(timestamp_ms=100.0)),
    ]
    return AnalysisResult(metadata=meta, frames=frames, calls=[call])


class TestExporter:

    def test_summary(self, temp_output_dir):
        summary = Exporter(str(temp_output_dir)).generate_summary(sample_result())
        assert summary["frames_analysed"] == 2
        assert summary["frames_skipped"] == 1
        assert summary["ball_detection_rate"] == 0.5
        assert summary["calls_by_type"]["out"] == 1
        assert summary["calls_by_type"]["in"] == 0
        assert summary["challengeable_calls"] == 1

    def test_empty_summary(self, temp_output_dir):
        meta = VideoMetadata(width=1, height=1, fps=30.0, total_frames=0, duration_s=0.0)
        summary = Exporter(str(temp_output_dir)).generate_summary(AnalysisResult(metadata=meta))
        assert "error" in summary

    def test_export_json(self, temp_output_dir):
        path = Exporter(str(temp_output_dir)).export_json(sample_result(), "report.json")
        assert path.exists()
        report = json.loads(path.read_text())
        assert report["calls"][0]["type"] == "out"
        assert len(report["frames"]) == 2
        assert report["summary"]["total_calls"] == 1


class TestVideoAnalyser:

    def test_process(self, temp_video_file, temp_output_dir):
        pipeline = MatchPipeline(HoughBallDetector())
        analyser = VideoAnalyser(pipeline, output_dir=str(temp_output_dir),
                                 show_progress=False)
        result = analyser.process(str(temp_video_file), output_name="clip")

        assert 18 <= len(result.frames) <= 21
        assert result.geometry is not None
        assert result.geometry["confidence"] > 0

        report_path = temp_output_dir / "clip_line_calls.json"
        assert report_path.exists()
        report = json.loads(report_path.read_text())
        assert report["summary"]["frames_analysed"] == len(result.frames)
        assert len(report["calls"]) == len(result.calls)

    def test_max_frames_no_json(self, temp_video_file, temp_output_dir):
        pipeline = MatchPipeline(HoughBallDetector())
        analyser = VideoAnalyser(pipeline, output_dir=str(temp_output_dir),
                                 save_json=False, show_progress=False)
        result = analyser.process(str(temp_video_file), max_frames=5)
        assert len(result.frames) == 5
        assert list(temp_output_dir.iterdir()) == []
