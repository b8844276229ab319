"""
End-to-end tests for PulseAnalyzer and the result types.
Run with:  pytest tests/test_analyzer.py
"""

from __future__ import annotations

import numpy as np
import pytest

from rppg_analyzer import PulseAnalyzer, analyze
from rppg_analyzer.errors import InsufficientSamplesError
from rppg_analyzer.models import AnalysisResult, Confidence, RGBSample, to_rgb_array


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


def _pulse_series(
    n: int = 300,
    fps: float = 30.0,
    hz: float = 1.25,
    noise: float = 0.05,
    seed: int = 0,
) -> np.ndarray:
    """R carries a sinusoid at *hz*; every channel gets Gaussian noise scaled by *noise*."""
    rng = np.random.default_rng(seed)
    t = np.arange(n) / fps
    base = rng.normal(size=(n, 3))
    rgb = np.empty((n, 3))
    rgb[:, 0] = 150.0 + np.sin(2 * np.pi * hz * t) + noise * base[:, 0]
    rgb[:, 1] = 100.0 + noise * base[:, 1]
    rgb[:, 2] = 80.0 + noise * base[:, 2]
    return rgb


def _check_ranges(result: AnalysisResult) -> None:
    assert 45 <= result.heart_rate <= 180
    assert 0 <= result.signal_quality <= 100
    assert len(result.waveform) == 100
    assert all(-1.0 <= v <= 1.0 for v in result.waveform)


# ---------------------------------------------------------------------------
# PulseAnalyzer tests
# ---------------------------------------------------------------------------

class TestPulseAnalyzer:

    def test_known_frequency_recovered(self):
        result = analyze(_pulse_series(), fps=30.0)
        assert abs(result.heart_rate - 75) <= 3, f"Expected ~75 BPM, got {result.heart_rate}"
        assert result.confidence in (Confidence.MEDIUM, Confidence.HIGH)
        assert result.samples_processed == 300
        _check_ranges(result)

    def test_other_rate_recovered(self):
        result = analyze(_pulse_series(n=450, hz=1.8, seed=3), fps=30.0)
        assert abs(result.heart_rate - 108) <= 3

    def test_deterministic(self):
        rgb = _pulse_series(noise=1.0, seed=7)
        assert analyze(rgb, 30.0) == analyze(rgb, 30.0)

    def test_too_few_samples(self):
        with pytest.raises(InsufficientSamplesError):
            analyze(_pulse_series(n=29), fps=30.0)

    def test_minimum_samples_runs(self):
        result = analyze(_pulse_series(n=30, seed=1))
        _check_ranges(result)
        assert result.samples_processed == 30
        assert result.confidence is Confidence.LOW     # fewer than 80 samples

    @pytest.mark.parametrize("level", [128.0, 123.456])
    def test_constant_input_is_low_confidence(self, level):
        rgb = np.full((200, 3), level)
        result = analyze(rgb, fps=30.0)
        assert result.confidence is Confidence.LOW
        assert result.message == "Could not detect a reliable heart rate"
        _check_ranges(result)

    def test_zero_signal_waveform(self):
        result = analyze(np.full((60, 3), 50.0), fps=20.0)
        assert result.waveform == (0.0,) * 100
        assert result.signal_quality == 0

    def test_waveform_peak_is_unity(self):
        result = analyze(_pulse_series(noise=0.5, seed=2), fps=30.0)
        assert max(abs(v) for v in result.waveform) == 1.0

    def test_confidence_never_rises_with_noise(self):
        # A long recording spreads pure noise over many in-band bins, so its
        # SNR settles well below the medium threshold and every tier is reached.
        levels = [0.0] + list(np.geomspace(0.5, 100.0, 16))
        confidences = []
        for noise in levels:
            result = analyze(_pulse_series(n=2000, noise=noise, seed=11), fps=30.0)
            _check_ranges(result)
            confidences.append(result.confidence)

        ranks = [_RANK[c] for c in confidences]
        assert confidences[0] is Confidence.HIGH
        assert Confidence.MEDIUM in confidences
        assert confidences[-1] is Confidence.LOW
        assert all(a >= b for a, b in zip(ranks, ranks[1:])), ranks

    def test_pure_noise_is_not_high(self):
        rgb = np.random.default_rng(12).normal(100.0, 5.0, size=(300, 3))
        result = analyze(rgb, fps=30.0)
        assert result.confidence is not Confidence.HIGH
        assert result.snr < 0.25

    def test_fps_fallback(self):
        rgb = _pulse_series(n=120, fps=10.0, hz=1.2, seed=4)
        expected = analyze(rgb, fps=10.0)
        assert analyze(rgb) == expected
        assert analyze(rgb, fps=0) == expected
        assert analyze(rgb, fps=-5) == expected

    def test_failed_captures_dropped(self):
        rgb = _pulse_series(n=100, seed=5)
        rgb[[3, 40, 77], 1] = -1.0
        result = analyze(rgb, fps=30.0)
        assert result.samples_processed == 97

    def test_too_many_failed_captures(self):
        rgb = _pulse_series(n=40, seed=6)
        rgb[:15, 0] = -1.0
        with pytest.raises(InsufficientSamplesError, match="failed frame captures"):
            analyze(rgb, fps=30.0)

    def test_low_fps_band_above_nyquist(self):
        result = analyze(_pulse_series(n=60, fps=1.0, hz=0.3, seed=8), fps=1.0)
        _check_ranges(result)
        assert result.snr == 0.0
        assert result.confidence is Confidence.LOW

    def test_raw_heart_rate_kept_when_clamped(self):
        result = analyze(_pulse_series(n=600, hz=3.3, seed=9), fps=30.0)
        assert result.heart_rate == 180
        assert result.raw_heart_rate > 180
        assert result.clamped

    def test_invalid_band(self):
        with pytest.raises(ValueError):
            PulseAnalyzer(min_freq=3.0, max_freq=1.0)


# ---------------------------------------------------------------------------
# Model tests
# ---------------------------------------------------------------------------

class TestModels:

    def test_to_dict_contract_keys(self):
        result = analyze(_pulse_series(), fps=30.0)
        body = result.to_dict()
        assert set(body) == {
            "heartRate", "confidence", "waveform",
            "signalQuality", "samplesProcessed", "message",
        }
        assert body["confidence"] in ("high", "medium", "low")
        assert isinstance(body["waveform"], list)

    def test_messages_per_tier(self):
        result = analyze(_pulse_series(), fps=30.0)
        expected = {
            Confidence.HIGH: "Strong signal detected",
            Confidence.MEDIUM: "Moderate signal quality - try holding still in good lighting",
            Confidence.LOW: "Could not detect a reliable heart rate",
        }
        assert result.message == expected[result.confidence]

    def test_input_forms_agree(self):
        rgb = _pulse_series(n=60, seed=10)
        samples = [RGBSample(*row) for row in rgb]
        mappings = [{"r": r, "g": g, "b": b} for r, g, b in rgb]
        tuples = [tuple(row) for row in rgb]
        for form in (samples, mappings, tuples):
            assert np.array_equal(to_rgb_array(form), rgb)

    def test_bad_array_shape(self):
        with pytest.raises(ValueError):
            to_rgb_array(np.zeros((10, 4)))

    def test_sample_from_mapping(self):
        assert RGBSample.from_mapping({"r": 1, "g": 2, "b": 3}) == RGBSample(1.0, 2.0, 3.0)
