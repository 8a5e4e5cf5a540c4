"""
Offline driver: decode a match video, feed it through a MatchPipeline at the
analysis cadence and collect an AnalysisResult.

Calibration runs on the first frame and then every `recalibrate_every_s`
seconds of video, standing in for the operator's calibration trigger.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional
from tqdm import tqdm

from ..exporter import Exporter
from ..models.frame import AnalysisResult
from ..pipeline import MatchPipeline
from .loader import VideoLoader
import config


class VideoAnalyser:

    def __init__(
        self,
        pipeline:           MatchPipeline,
        output_dir:         str   = str(config.RESULTS_DIR),
        recalibrate_every_s: float = config.RECALIBRATE_EVERY_S,
        save_json:          bool  = True,
        show_progress:      bool  = True,
    ):
        self.pipeline            = pipeline
        self.output_dir          = output_dir
        self.recalibrate_every_s = recalibrate_every_s
        self.save_json           = save_json
        self.show_progress       = show_progress

    def process(
        self,
        video_path:  str,
        max_frames:  Optional[int] = None,
        output_name: Optional[str] = None,
    ) -> AnalysisResult:
        base = output_name or Path(video_path).stem
        interval_ms = self.pipeline.settings.analysis_interval_ms
        recal_ms = self.recalibrate_every_s * 1000.0

        with VideoLoader(video_path) as loader:
            meta = loader.metadata
            result = AnalysisResult(metadata=meta)

            frames_iter = loader.frames(interval_ms=interval_ms, max_frames=max_frames)
            if self.show_progress:
                total = loader.expected_yields(interval_ms)
                if max_frames:
                    total = min(total, max_frames)
                frames_iter = tqdm(frames_iter, total=total, desc="Analysing", unit="frames")

            last_cal_ms: Optional[float] = None
            for frame in frames_iter:
                due = last_cal_ms is None or (
                    recal_ms > 0 and frame.timestamp_ms - last_cal_ms >= recal_ms)
                if due:
                    self.pipeline.calibrate(frame)
                    last_cal_ms = frame.timestamp_ms

                fr = self.pipeline.analyse(frame)
                result.frames.append(fr)
                if fr.call is not None:
                    result.calls.append(fr.call)
                    if fr.announce:
                        print(f"\n[Umpire] {fr.timestamp_ms / 1000.0:7.2f}s  "
                              f"{fr.call.description}")

        result.trajectory = self.pipeline.analysis()
        if self.pipeline.geometry is not None:
            result.geometry = self.pipeline.geometry.to_dict()

        if self.save_json:
            path = Exporter(self.output_dir).export_json(
                result, filename=f"{base}_line_calls.json")
            print(f"[Export] Wrote {path}")
        return result
