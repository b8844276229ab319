"""
Per-channel preprocessing: linear detrend followed by z-score normalisation.

Detrending removes slow illumination drift and sensor warm-up that would
otherwise dominate the spectrum near 0 Hz.
"""

from __future__ import annotations

import numpy as np

from rppg_analyzer.config import MIN_STD


def safe_std(signal: np.ndarray, min_std: float = MIN_STD) -> float:
    """Population standard deviation, with 1.0 substituted for (near) zero."""
    std = float(np.std(signal)) if len(signal) else 0.0
    return std if std > min_std else 1.0


def detrend(signal: np.ndarray) -> np.ndarray:
    """
    Subtract the ordinary least-squares line ``slope * i + intercept``.

    The fit uses the closed-form sums over the sample index ``i``.
    """
    y = np.asarray(signal, dtype=np.float64)
    n = len(y)
    if n == 0:
        return y.copy()

    i = np.arange(n, dtype=np.float64)
    sum_x = i.sum()
    sum_y = y.sum()
    sum_xy = (i * y).sum()
    sum_xx = (i * i).sum()

    denom = n * sum_xx - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denom if denom != 0 else 0.0
    intercept = (sum_y - slope * sum_x) / n
    return y - (slope * i + intercept)


def normalize(signal: np.ndarray) -> np.ndarray:
    """Zero mean, unit variance.  A flat signal comes back as all zeros."""
    x = np.asarray(signal, dtype=np.float64)
    if len(x) == 0:
        return x.copy()
    return (x - x.mean()) / safe_std(x)


def preprocess_channel(signal: np.ndarray) -> np.ndarray:
    return normalize(detrend(signal))
