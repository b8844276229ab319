"""
Temporal band-pass filter built from one-pole IIR stages.

Four first-order stages run causally in sequence: high-pass, low-pass,
low-pass, high-pass.  The cascade gives a steeper band edge than a single
stage without a full Butterworth design.  Each stage starts from
``y[0] = x[0]``; stage order and coefficients both shift the spectral peak,
so neither may change.

    RC      = 1 / (2π f)
    α_low   = RC_low  / (RC_low  + dt)     high-pass, from the low cutoff
    α_high  = dt      / (RC_high + dt)     low-pass, from the high cutoff
"""

from __future__ import annotations

import math

import numpy as np
from scipy.signal import lfilter

from rppg_analyzer.config import MAX_FREQ_HZ, MIN_FREQ_HZ


def highpass_alpha(cutoff_hz: float, fps: float) -> float:
    rc = 1.0 / (2.0 * math.pi * cutoff_hz)
    dt = 1.0 / fps
    return rc / (rc + dt)


def lowpass_alpha(cutoff_hz: float, fps: float) -> float:
    rc = 1.0 / (2.0 * math.pi * cutoff_hz)
    dt = 1.0 / fps
    return dt / (rc + dt)


def highpass_stage(signal: np.ndarray, alpha: float) -> np.ndarray:
    """``y[i] = α · (y[i-1] + x[i] - x[i-1])`` with ``y[0] = x[0]``."""
    x = np.asarray(signal, dtype=np.float64)
    if len(x) == 0:
        return x.copy()
    zi = np.array([(1.0 - alpha) * x[0]])
    y, _ = lfilter([alpha, -alpha], [1.0, -alpha], x, zi=zi)
    return y


def lowpass_stage(signal: np.ndarray, alpha: float) -> np.ndarray:
    """``y[i] = y[i-1] + α · (x[i] - y[i-1])`` with ``y[0] = x[0]``."""
    x = np.asarray(signal, dtype=np.float64)
    if len(x) == 0:
        return x.copy()
    zi = np.array([(1.0 - alpha) * x[0]])
    y, _ = lfilter([alpha], [1.0, alpha - 1.0], x, zi=zi)
    return y


def bandpass(
    signal: np.ndarray,
    fps: float,
    min_freq: float = MIN_FREQ_HZ,
    max_freq: float = MAX_FREQ_HZ,
) -> np.ndarray:
    """Apply the HP → LP → LP → HP cascade for the ``[min_freq, max_freq]`` band."""
    a_hp = highpass_alpha(min_freq, fps)
    a_lp = lowpass_alpha(max_freq, fps)

    out = highpass_stage(signal, a_hp)
    out = lowpass_stage(out, a_lp)
    out = lowpass_stage(out, a_lp)
    return highpass_stage(out, a_hp)
