"""
Per-match analysis settings.

Defaults come from `config`; a pipeline takes one AnalysisSettings so two
matches can run with different tolerances side by side.
"""
from __future__ import annotations
from dataclasses import dataclass, replace

import config


@dataclass(frozen=True)
class AnalysisSettings:
    # Detection / tracking
    ball_confidence_threshold: float = config.BALL_CONFIDENCE_THRESHOLD
    max_tracking_distance: float     = config.MAX_TRACKING_DISTANCE
    velocity_smoothing: float        = config.VELOCITY_SMOOTHING
    teleport_distance: float         = config.TELEPORT_DISTANCE
    speed_scale: float               = config.SPEED_SCALE
    max_ball_speed: float            = config.MAX_BALL_SPEED
    trajectory_window_ms: float      = config.TRAJECTORY_WINDOW_MS
    use_homography_speed: bool       = True

    # Line calls
    line_call_tolerance: float       = config.LINE_CALL_TOLERANCE
    call_confidence_threshold: float = config.CALL_CONFIDENCE_THRESHOLD
    call_cooldown_ms: float          = config.CALL_COOLDOWN_MS
    net_band_px: float               = config.NET_BAND_PX
    net_max_speed: float             = config.NET_MAX_SPEED

    # Session (sound / voice belong to the UI; carried so one object holds the lot)
    analysis_interval_ms: float      = config.ANALYSIS_INTERVAL_MS
    auto_call_enabled: bool          = config.AUTO_CALL_ENABLED
    sound_enabled: bool              = config.SOUND_ENABLED
    voice_enabled: bool              = config.VOICE_ENABLED
    doubles: bool                    = config.DOUBLES

    def validate(self) -> "AnalysisSettings":
        """Raise ValueError for settings the tracker cannot work with."""
        for name in ("ball_confidence_threshold", "call_confidence_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if not 0.0 < self.velocity_smoothing <= 1.0:
            raise ValueError(
                f"velocity_smoothing must be in (0, 1], got {self.velocity_smoothing}")
        for name in ("max_tracking_distance", "teleport_distance", "speed_scale",
                     "max_ball_speed", "trajectory_window_ms", "analysis_interval_ms"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        for name in ("line_call_tolerance", "call_cooldown_ms", "net_band_px", "net_max_speed"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")
        return self

    def with_overrides(self, **changes) -> "AnalysisSettings":
        return replace(self, **changes).validate()
