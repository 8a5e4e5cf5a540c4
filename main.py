"""
CLI entry point for the tennis line judge.
"""
import argparse
import sys
from pathlib import Path

from line_judge import AnalysisSettings, HoughBallDetector, MatchPipeline
from line_judge.errors import DetectorUnavailable
from line_judge.video import VideoAnalyser
import config


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Automated tennis line calls from match video",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Path to input video file"
    )

    parser.add_argument(
        "--output", "-o",
        default=str(config.RESULTS_DIR),
        help="Output directory for results"
    )

    parser.add_argument(
        "--name", "-n",
        default=None,
        help="Base name for output files (default: input filename)"
    )

    parser.add_argument(
        "--max-frames", "-m",
        type=int,
        default=None,
        help="Maximum frames to analyse (default: all)"
    )

    parser.add_argument(
        "--detector", "-d",
        choices=["hough", "yolo"],
        default="hough",
        help="Ball detector backend"
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=config.ANALYSIS_INTERVAL_MS,
        help="Milliseconds of video between analysed frames"
    )

    parser.add_argument(
        "--tolerance",
        type=float,
        default=config.LINE_CALL_TOLERANCE,
        help="Line-call tolerance in pixels"
    )

    parser.add_argument(
        "--recalibrate-every",
        type=float,
        default=config.RECALIBRATE_EVERY_S,
        help="Seconds of video between court recalibrations (0 = first frame only)"
    )

    parser.add_argument(
        "--doubles",
        action="store_true",
        help="Use doubles court width for the homography"
    )

    parser.add_argument(
        "--no-json",
        action="store_true",
        help="Don't save the JSON line-call report"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress progress bar and per-component logging"
    )

    return parser.parse_args()


def build_detector(name: str, verbose: bool):
    if name == "yolo":
        from line_judge.ball.yolo_detector import YoloBallDetector
        detector = YoloBallDetector(verbose=verbose)
        detector.load()
        return detector
    return HoughBallDetector()


def main():
    """Main entry point."""
    args = parse_args()

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {args.input}")
        sys.exit(1)

    try:
        settings = AnalysisSettings(
            analysis_interval_ms=args.interval,
            line_call_tolerance=args.tolerance,
            doubles=args.doubles,
        ).validate()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        detector = build_detector(args.detector, verbose=not args.quiet)
    except DetectorUnavailable as e:
        print(f"Error: {e}")
        sys.exit(1)

    pipeline = MatchPipeline(
        detector,
        settings=settings,
        match_id=args.name or input_path.stem,
        verbose=not args.quiet,
    )
    analyser = VideoAnalyser(
        pipeline,
        output_dir=args.output,
        recalibrate_every_s=args.recalibrate_every,
        save_json=not args.no_json,
        show_progress=not args.quiet,
    )

    print(f"Processing: {args.input}")
    print(f"Output directory: {args.output}")

    try:
        result = analyser.process(
            video_path=str(input_path),
            max_frames=args.max_frames,
            output_name=args.name
        )

        print("\n--- Analysis Complete ---")
        print(f"Frames analysed: {len(result.frames)}")
        if result.geometry:
            print(f"Court confidence: {result.geometry['confidence']:.2f}")
        print(f"Calls made: {len(result.calls)}")
        counts = {}
        for call in result.calls:
            counts[call.call_type.value] = counts.get(call.call_type.value, 0) + 1
        for call_type, n in sorted(counts.items()):
            print(f"  {call_type.upper()}: {n}")
        traj = result.trajectory
        print(f"Ball detections: {traj.total_points}  "
              f"max speed {traj.max_speed:.1f} mph  bounces {traj.bounces}")

    except KeyboardInterrupt:
        print("\nProcessing interrupted by user.")
        sys.exit(0)
    except Exception as e:
        print(f"Error during processing: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
