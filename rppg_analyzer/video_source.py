"""
Offline sample source: turn a recorded video into RGB samples.

Each frame is averaged over a fixed skin region (the whole frame by
default) with OpenCV.  Handy for development and regression recordings
where the live mobile capture is not available.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from rppg_analyzer.config import MAX_SAMPLES
from rppg_analyzer.models import RGBSample

logger = logging.getLogger(__name__)

Roi = Tuple[int, int, int, int]


def sample_from_frame(frame: np.ndarray, roi: Optional[Roi] = None) -> RGBSample:
    """
    Average *frame* over *roi*.

    Parameters
    ----------
    frame:
        BGR image array (H × W × 3, uint8), as delivered by OpenCV.
    roi:
        ``(x, y, w, h)`` region; ``None`` means the whole frame.
    """
    if roi is not None:
        x, y, w, h = roi
        frame = frame[y:y + h, x:x + w]
    if frame.size == 0:
        raise ValueError(f"ROI {roi} is empty for this frame")
    b, g, r, _ = cv2.mean(frame)
    return RGBSample(r=r, g=g, b=b)


def read_video_samples(
    path: str,
    roi: Optional[Roi] = None,
    max_frames: int = MAX_SAMPLES,
) -> Tuple[List[RGBSample], Optional[float]]:
    """
    Read up to *max_frames* frames from *path*.

    Returns
    -------
    (samples, fps)
        ``fps`` is the container's reported rate, or ``None`` when it does
        not report one.
    """
    cap = cv2.VideoCapture(str(path))
    if not cap.isOpened():
        raise OSError(f"Cannot open video {path}")

    try:
        fps = cap.get(cv2.CAP_PROP_FPS)
        samples: List[RGBSample] = []
        while len(samples) < max_frames:
            ok, frame = cap.read()
            if not ok or frame is None:
                break
            samples.append(sample_from_frame(frame, roi))
    finally:
        cap.release()

    logger.info("Read %d frames from %s (fps=%s)", len(samples), path, fps or "unknown")
    return samples, (float(fps) if fps and fps > 0 else None)
