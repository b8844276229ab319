"""
rPPG heart-rate analyser.

Algorithm
---------
1. Drop failed captures (negative channel values) and require at least
   ``MIN_SAMPLES`` usable samples.
2. Detrend and z-score each of the R, G, B channels.
3. Fuse the channels with the sliding-window POS projection.
4. Band-pass the pulse signal to 0.75 – 3.5 Hz with the one-pole cascade.
5. Hann-window, zero-pad and FFT; the strongest in-band bin, refined by
   parabolic interpolation, gives the heart rate.
6. Score confidence from the peak SNR, the sample count and whether the
   filtered signal varies at all.
7. Downsample the filtered signal to a fixed-length display waveform.

The analyser holds no state between calls: the result is a pure function
of the samples and the sampling rate.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

import numpy as np

from rppg_analyzer import config
from rppg_analyzer.bandpass import bandpass
from rppg_analyzer.errors import InsufficientSamplesError
from rppg_analyzer.models import AnalysisResult, to_rgb_array
from rppg_analyzer.peak_analysis import (
    classify_confidence,
    estimate_peak,
    has_signal_variation,
)
from rppg_analyzer.preprocessing import preprocess_channel
from rppg_analyzer.pulse_extraction import extract_pulse
from rppg_analyzer.spectrum import magnitude_spectrum
from rppg_analyzer.waveform import downsample_waveform

logger = logging.getLogger(__name__)


class PulseAnalyzer:
    """
    Batch heart-rate estimator for averaged skin-region RGB samples.

    Parameters
    ----------
    min_freq, max_freq:
        Cardiac band in Hz used by the band-pass filter and the peak search
        (default 0.75 – 3.5 Hz).
    min_bpm, max_bpm:
        Range the reported heart rate is clamped to (default 45 – 180).
    min_samples:
        Fewest usable samples accepted (default 30).
    waveform_length:
        Number of points in the display waveform (default 100).
    default_fps:
        Sampling rate assumed when none (or a non-positive one) is given.
    """

    def __init__(
        self,
        min_freq: float = config.MIN_FREQ_HZ,
        max_freq: float = config.MAX_FREQ_HZ,
        min_bpm: int = config.MIN_BPM,
        max_bpm: int = config.MAX_BPM,
        min_samples: int = config.MIN_SAMPLES,
        waveform_length: int = config.WAVEFORM_LENGTH,
        default_fps: float = config.DEFAULT_FPS,
    ) -> None:
        if not 0 < min_freq < max_freq:
            raise ValueError("Band edges must satisfy 0 < min_freq < max_freq")
        self.min_freq = min_freq
        self.max_freq = max_freq
        self.min_bpm = min_bpm
        self.max_bpm = max_bpm
        self.min_samples = min_samples
        self.waveform_length = waveform_length
        self.default_fps = default_fps

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def effective_fps(self, fps: float | None) -> float:
        return float(fps) if fps is not None and fps > 0 else self.default_fps

    def analyze(self, signals: Iterable[Any], fps: float | None = None) -> AnalysisResult:
        """
        Estimate heart rate, confidence and display waveform.

        Parameters
        ----------
        signals:
            Sequence of :class:`~rppg_analyzer.models.RGBSample`, ``r/g/b``
            mappings, 3-tuples, or an ``(n, 3)`` array.
        fps:
            Approximate sampling rate in Hz.

        Raises
        ------
        InsufficientSamplesError
            Fewer than ``min_samples`` samples, or fewer than that many left
            after discarding failed captures.
        """
        rgb = self._usable_samples(to_rgb_array(signals))
        fps = self.effective_fps(fps)
        n = len(rgb)

        channels = np.column_stack([preprocess_channel(rgb[:, c]) for c in range(3)])
        pulse = extract_pulse(channels, fps)
        filtered = bandpass(pulse, fps, self.min_freq, self.max_freq)

        magnitudes, fft_size = magnitude_spectrum(filtered)
        peak = estimate_peak(
            magnitudes,
            fft_size,
            fps,
            min_freq=self.min_freq,
            max_freq=self.max_freq,
            min_bpm=self.min_bpm,
            max_bpm=self.max_bpm,
        )

        varying = has_signal_variation(filtered)
        confidence = classify_confidence(peak.snr, n, varying)
        quality = max(0, min(100, int(math.floor(peak.snr * 100 + 0.5))))

        logger.debug(
            "Analysed %d samples at %.1f fps: %d BPM, confidence=%s, quality=%d, varying=%s",
            n, fps, peak.bpm, confidence.value, quality, varying,
        )

        return AnalysisResult(
            heart_rate=peak.bpm,
            confidence=confidence,
            waveform=downsample_waveform(filtered, self.waveform_length),
            signal_quality=quality,
            samples_processed=n,
            message=config.MESSAGES[confidence.value],
            raw_heart_rate=peak.raw_bpm,
            snr=peak.snr,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _usable_samples(self, rgb: np.ndarray) -> np.ndarray:
        if len(rgb) < self.min_samples:
            raise InsufficientSamplesError("Not enough samples for analysis")

        # the capture side reports a failed frame with negative channel values
        valid = rgb[np.all(rgb >= 0, axis=1)]
        if len(valid) < self.min_samples:
            raise InsufficientSamplesError("Too many failed frame captures")
        if len(valid) < len(rgb):
            logger.info("Discarded %d failed frame captures", len(rgb) - len(valid))
        return valid


def analyze(signals: Iterable[Any], fps: float | None = None) -> AnalysisResult:
    """Run the pipeline with default settings."""
    return PulseAnalyzer().analyze(signals, fps)
