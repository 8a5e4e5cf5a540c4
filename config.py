"""
Configuration for the tennis line judge.

Every tuned constant lives here. Per-match overrides go through
`line_judge.settings.AnalysisSettings`, whose defaults are read from this module.
"""
from pathlib import Path


# ── GPU / Device ──────────────────────────────────────────────────────────────
# Only the YOLO ball detector needs a device; resolved lazily so importing the
# core never pulls in torch.
def resolve_device() -> str:
    try:
        import torch
        if torch.cuda.is_available():
            name = torch.cuda.get_device_name(0)
            vram = torch.cuda.get_device_properties(0).total_memory / 1e9
            print(f"[Config] GPU detected: {name}  ({vram:.1f} GB VRAM) → using CUDA")
            return "cuda"
    except ImportError:
        pass
    print("[Config] No GPU / torch not found → using CPU")
    return "cpu"


# ── Paths ─────────────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).parent
RESULTS_DIR  = PROJECT_ROOT / "results"

# ── Edge extraction ───────────────────────────────────────────────────────────
EDGE_BLUR_SIGMA      = 1.0
EDGE_LOW_THRESHOLD   = 50.0     # gradient magnitude: weak edge
EDGE_HIGH_THRESHOLD  = 150.0    # gradient magnitude: strong edge
WHITE_LINE_MIN       = 200      # every channel above this …
WHITE_LINE_BALANCE   = 30       # … and channels within this of each other
GREEN_COURT_MIN_G    = 80
GREEN_COURT_MAX_RB   = 150
GREEN_COURT_DARKEN   = 0.8

# ── Line detection (Hough) ────────────────────────────────────────────────────
HOUGH_RHO               = 1       # pixels
HOUGH_THETA             = 1       # degrees
HOUGH_THRESHOLD         = 100     # votes a cell must exceed
HOUGH_MIN_LENGTH        = 50      # pixels, after clipping to the frame
HOUGH_PEAK_WINDOW       = 5       # (rho, theta) cells for local-maximum thinning
LINE_ANGLE_TOLERANCE    = 5       # degrees for horizontal / vertical tagging
LINE_PARALLEL_THRESHOLD = 10      # degrees for merging near-duplicates
LINE_MERGE_DISTANCE     = 20      # pixels between midpoints for merging

# ── Court geometry ────────────────────────────────────────────────────────────
COURT_EXPECTED_LINES     = 7
COURT_STRENGTH_SCALE     = 1000.0  # votes → confidence bonus divisor
COURT_STRENGTH_BONUS_MAX = 0.3
SERVICE_BOX_HEIGHT_RATIO = 0.3     # of court height, centred on the net
SERVICE_LINE_NEAR_RATIO  = 2 / 3   # synthetic service lines (of court height)
SERVICE_LINE_FAR_RATIO   = 1 / 3
MAX_DISTORTION           = 0.3
DISTORTION_PENALTY       = 0.8
MAX_VIEW_ANGLE           = 45.0    # degrees
VIEW_ANGLE_PENALTY       = 0.9
REAL_WORLD_MIN_CONF      = 0.7

# Standard tennis court dimensions (metres)
COURT_LENGTH       = 23.77        # baseline to baseline
COURT_WIDTH_SINGLE = 8.23         # singles
COURT_WIDTH_DOUBLE = 10.97        # doubles
DOUBLES            = False

# ── Ball tracking ─────────────────────────────────────────────────────────────
BALL_CONFIDENCE_THRESHOLD = 0.7
MAX_TRACKING_DISTANCE     = 150.0  # pixels between frames
VELOCITY_SMOOTHING        = 0.3
TELEPORT_DISTANCE         = 200.0  # pixels; farther ⇒ physically implausible
PHYSICS_BONUS             = 0.2
PREDICTION_RADIUS         = 100.0  # pixels over which the consistency bonus decays
SPEED_SCALE               = 0.1    # px/s → mph without a calibrated homography
MAX_BALL_SPEED            = 150.0  # mph
MPS_TO_MPH                = 2.23694
TRAJECTORY_WINDOW_MS      = 2000.0
TRAJECTORY_SNAPSHOT       = 5      # points attached to each BallState
SPIN_FLAT_CURVATURE       = 0.001
REGION_BASELINE_RATIO     = 0.2
REGION_NET_RATIO          = 0.1

# ── Ball detection backends ───────────────────────────────────────────────────
BALL_MODEL         = "yolov8n.pt"
SPORTS_BALL_CLASS  = 32                 # COCO class for sports ball
DETECTION_IMG_SIZE = 960
BALL_MAX_RADIUS_PX = 18
BALL_MIN_RADIUS_PX = 3

# ── Line calls ────────────────────────────────────────────────────────────────
LINE_CALL_TOLERANCE       = 3.0    # pixels
CALL_CONFIDENCE_THRESHOLD = 0.8
NET_BAND_PX               = 10.0
NET_MAX_SPEED             = 20.0
CALL_COOLDOWN_MS          = 1000.0
CALL_HISTORY_SIZE         = 10

# ── Session ───────────────────────────────────────────────────────────────────
ANALYSIS_INTERVAL_MS = 100.0      # ~10 analyses per second
AUTO_CALL_ENABLED    = True
SOUND_ENABLED        = True       # passed through to the UI layer
VOICE_ENABLED        = False      # passed through to the UI layer
RECALIBRATE_EVERY_S  = 30.0       # CLI only
