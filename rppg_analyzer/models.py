"""
Value types exchanged with callers of the analysis pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Tuple

import numpy as np


@dataclass(frozen=True)
class RGBSample:
    """One averaged colour reading of the skin region at a capture instant."""

    r: float
    g: float
    b: float

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RGBSample":
        return cls(r=float(data["r"]), g=float(data["g"]), b=float(data["b"]))


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of one pipeline run.

    Only the fields returned by :meth:`to_dict` are part of the wire
    contract.  ``raw_heart_rate`` (the estimate before clamping) and ``snr``
    are diagnostics for local callers.
    """

    heart_rate: int
    confidence: Confidence
    waveform: Tuple[float, ...]
    signal_quality: int
    samples_processed: int
    message: str
    raw_heart_rate: int = 0
    snr: float = 0.0

    @property
    def clamped(self) -> bool:
        """True when the reported heart rate differs from the raw estimate."""
        return self.heart_rate != self.raw_heart_rate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heartRate": self.heart_rate,
            "confidence": self.confidence.value,
            "waveform": list(self.waveform),
            "signalQuality": self.signal_quality,
            "samplesProcessed": self.samples_processed,
            "message": self.message,
        }


def to_rgb_array(signals: Iterable[Any]) -> np.ndarray:
    """
    Convert caller samples to an ``(n, 3)`` float64 array of R, G, B.

    Accepts :class:`RGBSample` objects, mappings with ``r``/``g``/``b`` keys,
    plain 3-sequences, or an existing ``(n, 3)`` array.
    """
    if isinstance(signals, np.ndarray):
        arr = np.asarray(signals, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise ValueError(f"Expected an (n, 3) array, got shape {arr.shape}")
        return arr

    rows = []
    for s in signals:
        if isinstance(s, Mapping):
            s = RGBSample.from_mapping(s)
        if isinstance(s, RGBSample):
            rows.append((s.r, s.g, s.b))
        else:
            r, g, b = s
            rows.append((float(r), float(g), float(b)))
    return np.array(rows, dtype=np.float64).reshape(-1, 3)
