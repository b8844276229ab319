"""
POS (plane-orthogonal-to-skin) pulse extraction.

The three normalised colour channels are fused into a single pulse signal
one short window at a time, so the projection weights track local
specular and motion conditions instead of one global normalisation.

References
----------
- Wang W. et al., "Algorithmic principles of remote PPG."
  IEEE Trans. Biomed. Eng., 2017.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from rppg_analyzer.config import POS_MIN_WINDOW, POS_OVERLAP, POS_WINDOW_SECONDS
from rppg_analyzer.preprocessing import detrend, safe_std

logger = logging.getLogger(__name__)


def window_length(fps: float) -> int:
    return max(int(math.floor(fps * POS_WINDOW_SECONDS)), POS_MIN_WINDOW)


def window_starts(n: int, size: int) -> range:
    """
    Start offsets of the sliding windows.

    Windows start strictly before ``n - size``; the tail of the series is
    reached only through the extent of the last window.
    """
    step = max(int(math.floor(size * POS_OVERLAP)), 1)
    return range(0, n - size, step)


def project_window(rgb: np.ndarray) -> np.ndarray:
    """
    POS contribution of one window.

    Parameters
    ----------
    rgb:
        ``(len, 3)`` slice of the normalised R, G, B channels.
    """
    r, g, b = (
        (rgb[:, c] - rgb[:, c].mean()) / safe_std(rgb[:, c]) for c in range(3)
    )

    # Fixed skin-tone chrominance axes
    x = 3.0 * r - 2.0 * g
    y = 1.5 * r + g - 1.5 * b

    alpha = safe_std(x) / safe_std(y)
    return x + alpha * y


def extract_pulse(rgb: np.ndarray, fps: float) -> np.ndarray:
    """
    Overlap-add the per-window POS projections into one pulse signal.

    Overlapping regions accumulate the contributions of both windows
    (they are summed, not averaged).  The accumulated buffer is detrended
    once more before it is returned.

    Parameters
    ----------
    rgb:
        ``(n, 3)`` array of preprocessed R, G, B channels.
    fps:
        Sampling rate in Hz; sets the window length.
    """
    n = len(rgb)
    size = window_length(fps)
    pulse = np.zeros(n, dtype=np.float64)

    starts = window_starts(n, size)
    for start in starts:
        end = min(start + size, n)
        pulse[start:end] += project_window(rgb[start:end])

    logger.debug("POS: window=%d samples, %d windows over %d samples", size, len(starts), n)
    return detrend(pulse)
