"""Fixed-length display waveform."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from rppg_analyzer.config import WAVEFORM_LENGTH


def downsample_waveform(signal: np.ndarray, length: int = WAVEFORM_LENGTH) -> Tuple[float, ...]:
    """
    Pick ``length`` samples at ``floor(i * len(signal) / length)`` and scale
    them by the largest absolute value so every point lies in ``[-1, 1]``.

    Samples are taken by index, not interpolated; an index past the end of
    the signal yields 0.
    """
    sig = np.asarray(signal, dtype=np.float64)
    n = len(sig)

    idx = (np.arange(length) * n) // length
    wave = np.zeros(length, dtype=np.float64)
    in_range = idx < n
    wave[in_range] = sig[idx[in_range]]

    peak = float(np.max(np.abs(wave))) if length else 0.0
    if peak == 0:
        peak = 1.0
    return tuple(float(v) for v in wave / peak)
