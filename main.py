#!/usr/bin/env python3
"""
rPPG Analyzer – command-line entry point.

Usage
-----
    python main.py INPUT [OPTIONS]

INPUT is either a JSON request (``{"signals": [{"r":..,"g":..,"b":..}, ...],
"fps": 30}``) or a video file whose frames are averaged into samples.

Options
-------
    --fps FLOAT          Sampling rate (overrides the request / video rate)
    --timeout FLOAT      Worker wall-clock limit in seconds (default: 10)
    --workers INT        Concurrent worker limit (default: 3)
    --roi X,Y,W,H        Skin region for video input (default: whole frame)
    --max-frames INT     Frames read from a video (default: 1000)
    --verbose            Debug logging
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rppg_analyzer import config
from rppg_analyzer.service import AnalysisService
from rppg_analyzer.video_source import read_video_samples

logger = logging.getLogger("rppg_analyzer")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Estimate heart rate from RGB samples (rPPG)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("input", type=Path,
                        help="JSON request file or video file")
    parser.add_argument("--fps", type=float, default=None,
                        help="Sampling rate in Hz")
    parser.add_argument("--timeout", type=float, default=config.WORKER_TIMEOUT_SECONDS,
                        help="Worker wall-clock limit in seconds")
    parser.add_argument("--workers", type=int, default=config.MAX_CONCURRENT_WORKERS,
                        help="Concurrent worker limit")
    parser.add_argument("--roi", default=None,
                        help="Skin region for video input, e.g. 100,80,64,64")
    parser.add_argument("--max-frames", type=int, default=config.MAX_SAMPLES,
                        help="Maximum frames read from a video")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def parse_roi(text: str | None) -> tuple[int, int, int, int] | None:
    if text is None:
        return None
    x, y, w, h = (int(v) for v in text.split(","))
    return x, y, w, h


def load_payload(args: argparse.Namespace, roi: tuple[int, int, int, int] | None = None) -> dict:
    if args.input.suffix.lower() == ".json":
        with open(args.input, encoding="utf-8") as f:
            payload = json.load(f)
    else:
        samples, fps = read_video_samples(str(args.input), roi=roi, max_frames=args.max_frames)
        payload = {"signals": [{"r": s.r, "g": s.g, "b": s.b} for s in samples]}
        if fps is not None:
            payload["fps"] = fps
    if args.fps is not None and isinstance(payload, dict):
        payload["fps"] = args.fps
    return payload


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> int:
    try:
        roi = parse_roi(args.roi)
    except ValueError:
        logger.error("Invalid --roi format.  Use X,Y,W,H, e.g. 100,80,64,64.")
        return 1

    try:
        payload = load_payload(args, roi)
    except (OSError, ValueError) as e:
        logger.error("Cannot read %s: %s", args.input, e)
        return 1

    service = AnalysisService(max_workers=args.workers, timeout=args.timeout)
    status, body = service.handle_request(payload)
    print(json.dumps(body, indent=2))
    return 0 if status == 200 else 1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s – %(message)s",
        datefmt="%H:%M:%S",
    )
    return run(args)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
