"""
Export analysis results to JSON.
"""
import json
from pathlib import Path

from .models import AnalysisResult, CallType
import config


class Exporter:
    """Writes line-call reports and summaries."""

    def __init__(self, output_dir: str = str(config.RESULTS_DIR)):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export_json(
        self,
        result: AnalysisResult,
        filename: str = "line_calls.json",
    ) -> Path:
        """
        Write the full report (video info, court, calls, trajectory, frames).

        Returns:
            Path to saved file
        """
        output_path = self.output_dir / filename
        report = result.to_dict()
        report["summary"] = self.generate_summary(result)
        with open(output_path, "w") as f:
            json.dump(report, f, indent=2)
        return output_path

    def generate_summary(self, result: AnalysisResult) -> dict:
        if not result.frames:
            return {"error": "No frames processed"}

        counts = {ct.value: 0 for ct in CallType}
        for call in result.calls:
            counts[call.call_type.value] += 1

        detected = sum(1 for f in result.frames if f.ball.detected)
        skipped = sum(1 for f in result.frames if f.skipped)
        return {
            "frames_analysed": len(result.frames),
            "frames_skipped": skipped,
            "ball_detection_rate": round(detected / len(result.frames), 3),
            "total_calls": len(result.calls),
            "calls_by_type": counts,
            "challengeable_calls": sum(1 for c in result.calls if c.challengeable),
            "max_ball_speed": round(result.trajectory.max_speed, 2),
        }
