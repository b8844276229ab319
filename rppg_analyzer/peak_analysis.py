"""
Cardiac peak search, sub-bin refinement and confidence scoring.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from rppg_analyzer.config import (
    FLAT_PEAK_EPSILON,
    HIGH_MIN_SAMPLES,
    HIGH_SNR,
    MAX_BPM,
    MAX_FREQ_HZ,
    MEDIUM_MIN_SAMPLES,
    MEDIUM_SNR,
    MIN_BPM,
    MIN_FREQ_HZ,
    MIN_SIGNAL_VARIANCE,
    PEAK_HALF_WIDTH,
)
from rppg_analyzer.models import Confidence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeakEstimate:
    peak_bin: int
    refined_bin: float
    raw_bpm: int
    bpm: int
    snr: float


def band_bins(
    fft_size: int,
    fps: float,
    min_freq: float = MIN_FREQ_HZ,
    max_freq: float = MAX_FREQ_HZ,
) -> Tuple[int, int]:
    """
    Inclusive ``(min_bin, max_bin)`` covering the cardiac band.

    Bin 0 (DC) is never included.  When the band lies above Nyquist the
    returned range is empty (``max_bin < min_bin``).
    """
    min_bin = max(1, int(math.floor(min_freq * fft_size / fps)))
    max_bin = min(fft_size // 2 - 1, int(math.ceil(max_freq * fft_size / fps)))
    return min_bin, max_bin


def find_peak(magnitudes: np.ndarray, min_bin: int, max_bin: int) -> int:
    """Index of the largest magnitude in the band; ties go to the lowest bin."""
    if max_bin < min_bin:
        return min_bin
    return min_bin + int(np.argmax(magnitudes[min_bin : max_bin + 1]))


def refine_peak(magnitudes: np.ndarray, peak: int, min_bin: int, max_bin: int) -> float:
    """
    Parabolic interpolation through the peak and its two neighbours.

    Only done for a peak strictly inside the band; a peak on either edge is
    returned unchanged so the estimate never leaves the searched range.
    """
    if not (min_bin < peak < max_bin):
        return float(peak)

    alpha = magnitudes[peak - 1]
    beta = magnitudes[peak]
    gamma = magnitudes[peak + 1]
    denom = alpha - 2.0 * beta + gamma
    if abs(denom) <= FLAT_PEAK_EPSILON:
        return float(peak)
    return peak + 0.5 * (alpha - gamma) / denom


def band_snr(magnitudes: np.ndarray, peak: int, min_bin: int, max_bin: int) -> float:
    """Share of in-band power within ``PEAK_HALF_WIDTH`` bins of the peak."""
    if max_bin < min_bin:
        return 0.0
    bins = np.arange(min_bin, max_bin + 1)
    power = magnitudes[min_bin : max_bin + 1] ** 2
    total = float(power.sum())
    if total <= 0:
        return 0.0
    peak_power = float(power[np.abs(bins - peak) <= PEAK_HALF_WIDTH].sum())
    return peak_power / total


def bin_to_bpm(refined_bin: float, fps: float, fft_size: int) -> int:
    # round half up
    return int(math.floor(refined_bin * fps / fft_size * 60.0 + 0.5))


def estimate_peak(
    magnitudes: np.ndarray,
    fft_size: int,
    fps: float,
    min_freq: float = MIN_FREQ_HZ,
    max_freq: float = MAX_FREQ_HZ,
    min_bpm: int = MIN_BPM,
    max_bpm: int = MAX_BPM,
) -> PeakEstimate:
    min_bin, max_bin = band_bins(fft_size, fps, min_freq, max_freq)
    peak = find_peak(magnitudes, min_bin, max_bin)
    refined = refine_peak(magnitudes, peak, min_bin, max_bin)

    raw_bpm = bin_to_bpm(refined, fps, fft_size)
    bpm = max(min_bpm, min(max_bpm, raw_bpm))
    snr = band_snr(magnitudes, peak, min_bin, max_bin)

    logger.debug(
        "Peak: band=[%d, %d] bin=%d refined=%.3f bpm=%d (raw %d) snr=%.3f",
        min_bin, max_bin, peak, refined, bpm, raw_bpm, snr,
    )
    return PeakEstimate(peak, refined, raw_bpm, bpm, snr)


def signal_variance(signal: np.ndarray) -> float:
    """Mean power ``Σv² / n`` of the filtered series."""
    sig = np.asarray(signal, dtype=np.float64)
    return float(np.mean(sig ** 2)) if len(sig) else 0.0


def classify_confidence(
    snr: float,
    n_samples: int,
    has_variation: bool,
    high_snr: float = HIGH_SNR,
    high_min_samples: int = HIGH_MIN_SAMPLES,
    medium_snr: float = MEDIUM_SNR,
    medium_min_samples: int = MEDIUM_MIN_SAMPLES,
) -> Confidence:
    if snr > high_snr and n_samples >= high_min_samples and has_variation:
        return Confidence.HIGH
    if snr > medium_snr and n_samples >= medium_min_samples and has_variation:
        return Confidence.MEDIUM
    return Confidence.LOW


def has_signal_variation(signal: np.ndarray, min_variance: float = MIN_SIGNAL_VARIANCE) -> bool:
    return signal_variance(signal) > min_variance
