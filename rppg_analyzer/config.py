"""
Tunable constants for the rPPG analysis pipeline.

Every threshold the pipeline compares against lives here so the band edges
and confidence tiers can be audited and overridden in one place.
"""

# Sampling
DEFAULT_FPS = 10.0
MIN_SAMPLES = 30

# Cardiac band searched in the spectrum (Hz) – 45 – 210 BPM
MIN_FREQ_HZ = 0.75
MAX_FREQ_HZ = 3.5

# Reported heart rate is clamped to this range (BPM)
MIN_BPM = 45
MAX_BPM = 180

# POS projection: window = max(floor(fps * factor), min_len), 50 % overlap
POS_WINDOW_SECONDS = 1.6
POS_MIN_WINDOW = 10
POS_OVERLAP = 0.5

# Spectral estimator
ZERO_PAD_FACTOR = 4
PEAK_HALF_WIDTH = 2          # bins either side of the peak counted as signal
FLAT_PEAK_EPSILON = 1e-10    # skip parabolic refinement below this curvature

# Standard deviations at or below this are treated as zero (replaced by 1)
MIN_STD = 1e-9

# Filtered-signal power below this means the input was effectively flat
MIN_SIGNAL_VARIANCE = 1e-10

# Confidence tiers: (snr strictly above, minimum sample count)
HIGH_SNR = 0.25
HIGH_MIN_SAMPLES = 150
MEDIUM_SNR = 0.12
MEDIUM_MIN_SAMPLES = 80

MESSAGES = {
    "high": "Strong signal detected",
    "medium": "Moderate signal quality - try holding still in good lighting",
    "low": "Could not detect a reliable heart rate",
}

# Display waveform
WAVEFORM_LENGTH = 100

# Request bounds checked at the service boundary
MAX_SAMPLES = 1000
MIN_REQUEST_FPS = 1.0
MAX_REQUEST_FPS = 60.0

# Execution boundary
WORKER_TIMEOUT_SECONDS = 10.0
MAX_CONCURRENT_WORKERS = 3
