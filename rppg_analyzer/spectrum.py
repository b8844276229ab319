"""
Magnitude spectrum of the filtered pulse signal.

The signal is Hann-windowed and zero-padded to a power of two at least
``ZERO_PAD_FACTOR`` times its length; the padding only densifies the bins
(it adds no information) but makes the parabolic peak refinement more
accurate.  The transform itself is a recursive radix-2 Cooley–Tukey FFT.
"""

from __future__ import annotations

import logging
import math
from typing import Tuple

import numpy as np
from scipy.signal.windows import hann

from rppg_analyzer.config import ZERO_PAD_FACTOR

logger = logging.getLogger(__name__)


def fft_size_for(n: int, zero_pad_factor: int = ZERO_PAD_FACTOR) -> int:
    """Smallest power of two ``>= n * zero_pad_factor``."""
    return 1 << max(int(math.ceil(math.log2(n * zero_pad_factor))), 0)


def radix2_fft(x: np.ndarray) -> np.ndarray:
    """
    Discrete Fourier transform by recursive radix-2 decimation in time.

    ``len(x)`` must be a power of two.  Each level is vectorised over the
    butterflies, so the recursion depth is only ``log2(len(x))``.
    """
    x = np.asarray(x, dtype=np.complex128)
    n = len(x)
    if n == 0 or n & (n - 1):
        raise ValueError(f"FFT length must be a power of two, got {n}")
    if n == 1:
        return x.copy()

    even = radix2_fft(x[0::2])
    odd = radix2_fft(x[1::2])
    twiddled = np.exp(-2j * np.pi * np.arange(n // 2) / n) * odd
    return np.concatenate([even + twiddled, even - twiddled])


def magnitude_spectrum(
    signal: np.ndarray,
    zero_pad_factor: int = ZERO_PAD_FACTOR,
) -> Tuple[np.ndarray, int]:
    """
    Return ``(magnitudes, fft_size)``.

    ``magnitudes`` covers bins ``[0, fft_size / 2)``, the non-negative
    frequencies of the real input.
    """
    sig = np.asarray(signal, dtype=np.float64)
    n = len(sig)
    fft_size = fft_size_for(n, zero_pad_factor)

    buf = np.zeros(fft_size, dtype=np.float64)
    buf[:n] = sig * hann(n, sym=True)

    spec = radix2_fft(buf)
    logger.debug("Spectrum: n=%d fft_size=%d", n, fft_size)
    return np.abs(spec[: fft_size // 2]), fft_size
