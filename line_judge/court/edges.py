"""
Court-line edge extraction.

1. Court-aware grayscale: white line paint is pushed to full brightness,
   green surface is darkened slightly, everything else is the plain mean.
2. Gaussian blur to suppress noise.
3. Sobel gradient magnitude.
4. Hysteresis: strong pixels are edges; weak pixels are edges only when
   8-connected (through other weak pixels) to a strong one.
"""
from __future__ import annotations
import math
import cv2
import numpy as np

from ..models.frame import EdgeMap, Frame
import config


class EdgeExtractor:
    """Turns a Frame into a binary EdgeMap tuned for court-line contrast."""

    def __init__(
        self,
        sigma: float = config.EDGE_BLUR_SIGMA,
        low_threshold: float = config.EDGE_LOW_THRESHOLD,
        high_threshold: float = config.EDGE_HIGH_THRESHOLD,
    ):
        if low_threshold > high_threshold:
            raise ValueError("low_threshold must not exceed high_threshold")
        self.sigma = sigma
        self.low_threshold = low_threshold
        self.high_threshold = high_threshold

    # ── Public API ─────────────────────────────────────────────────────────────

    def extract(self, frame: Frame) -> EdgeMap:
        """Raises InvalidFrame for empty or malformed frames."""
        frame.validate()
        gray = self.court_grayscale(frame.pixels)
        blurred = self._blur(gray)
        magnitude = self.gradient_magnitude(blurred)
        return EdgeMap(mask=self._hysteresis(magnitude))

    @staticmethod
    def court_grayscale(pixels: np.ndarray) -> np.ndarray:
        """BGR uint8 → float32 luminance with white lines and green surface emphasised."""
        b = pixels[..., 0].astype(np.float32)
        g = pixels[..., 1].astype(np.float32)
        r = pixels[..., 2].astype(np.float32)
        mean = (r + g + b) / 3.0

        white = ((r > config.WHITE_LINE_MIN) & (g > config.WHITE_LINE_MIN) &
                 (b > config.WHITE_LINE_MIN) &
                 (np.abs(r - g) < config.WHITE_LINE_BALANCE) &
                 (np.abs(g - b) < config.WHITE_LINE_BALANCE))
        green = ((g > r) & (g > b) & (g > config.GREEN_COURT_MIN_G) &
                 (r < config.GREEN_COURT_MAX_RB) & (b < config.GREEN_COURT_MAX_RB))

        gray = mean.copy()
        gray[green] = mean[green] * config.GREEN_COURT_DARKEN
        gray[white] = 255.0
        return gray

    @staticmethod
    def gradient_magnitude(gray: np.ndarray) -> np.ndarray:
        gx = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=3)
        gy = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=3)
        mag = cv2.magnitude(gx, gy)
        # Interior only: the border row/column has no full 3×3 neighbourhood
        mag[0, :] = mag[-1, :] = 0.0
        mag[:, 0] = mag[:, -1] = 0.0
        return mag

    # ── Internals ──────────────────────────────────────────────────────────────

    def _blur(self, gray: np.ndarray) -> np.ndarray:
        if self.sigma <= 0:
            return gray
        k = 2 * int(math.ceil(self.sigma * 3)) + 1
        return cv2.GaussianBlur(gray, (k, k), sigmaX=self.sigma, sigmaY=self.sigma,
                                borderType=cv2.BORDER_REPLICATE)

    def _hysteresis(self, magnitude: np.ndarray) -> np.ndarray:
        strong = magnitude > self.high_threshold
        weak_or_strong = magnitude > self.low_threshold
        edges = np.zeros(magnitude.shape, np.uint8)
        if not np.any(strong):
            return edges

        _, labels = cv2.connectedComponents(weak_or_strong.astype(np.uint8), connectivity=8)
        keep = np.unique(labels[strong])
        keep = keep[keep > 0]
        edges[np.isin(labels, keep)] = 255
        return edges
