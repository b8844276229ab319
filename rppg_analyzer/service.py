"""
Execution boundary around the analysis pipeline.

Each analysis runs in its own worker process so a crash or runaway
computation cannot take the caller down with it.  The worker is terminated
when it exceeds its wall-clock limit.  :class:`AnalysisService` adds request
validation, a cap on concurrent workers and the mapping from outcomes to
HTTP-style status codes; internal error text is logged, never returned.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from rppg_analyzer import config
from rppg_analyzer.analyzer import analyze
from rppg_analyzer.errors import (
    InvalidRequestError,
    ProcessingFailedError,
    ProcessingTimeoutError,
    ServiceBusyError,
)
from rppg_analyzer.models import AnalysisResult, RGBSample

logger = logging.getLogger(__name__)

# Workers never inherit the caller's threads or locks
_mp = mp.get_context("spawn")

INVALID_REQUEST_MESSAGE = "At least 30 RGB signal samples are required (10+ seconds of data)"
BUSY_MESSAGE = "Processing queue full, please try again shortly"
TIMEOUT_MESSAGE = "Processing took too long, please try again"
FAILURE_MESSAGE = "Failed to process heart rate data"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class SamplePayload(BaseModel):
    r: float = Field(..., strict=True, allow_inf_nan=False)
    g: float = Field(..., strict=True, allow_inf_nan=False)
    b: float = Field(..., strict=True, allow_inf_nan=False)


class AnalysisRequest(BaseModel):
    signals: List[SamplePayload] = Field(
        ..., min_length=config.MIN_SAMPLES, max_length=config.MAX_SAMPLES
    )
    fps: Optional[float] = Field(
        None, strict=True, ge=config.MIN_REQUEST_FPS, le=config.MAX_REQUEST_FPS
    )


def validate_request(payload: Any) -> Tuple[List[RGBSample], float | None]:
    """
    Check a ``{"signals": [...], "fps": ...}`` payload.

    Returns the parsed samples and the fps (``None`` when absent).

    Raises
    ------
    InvalidRequestError
        Wrong shape, sample count outside ``[30, 1000]``, non-numeric
        channels, or fps outside ``[1, 60]``.
    """
    try:
        request = AnalysisRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequestError(str(e)) from e

    samples = [RGBSample(r=s.r, g=s.g, b=s.b) for s in request.signals]
    return samples, request.fps


# ---------------------------------------------------------------------------
# Worker process
# ---------------------------------------------------------------------------

def _worker_main(conn, samples: List[RGBSample], fps: float | None) -> None:
    try:
        result = analyze(samples, fps)
    except Exception as e:
        conn.send(("error", f"{type(e).__name__}: {e}"))
    else:
        conn.send(("ok", result))
    finally:
        conn.close()


def run_in_worker(
    samples: List[RGBSample],
    fps: float | None = None,
    timeout: float = config.WORKER_TIMEOUT_SECONDS,
    target: Callable[..., None] = _worker_main,
) -> AnalysisResult:
    """
    Run the analysis in a child process and wait at most *timeout* seconds.

    Parameters
    ----------
    target:
        Importable worker entry point ``target(conn, samples, fps)``; it must send
        exactly one ``("ok", result)`` or ``("error", text)`` message.

    Raises
    ------
    ProcessingTimeoutError
        No answer within *timeout*; the worker has been terminated.
    ProcessingFailedError
        The worker reported an exception or exited without an answer.
    """
    parent_conn, child_conn = _mp.Pipe(duplex=False)
    proc = _mp.Process(target=target, args=(child_conn, samples, fps), daemon=True)
    proc.start()
    child_conn.close()

    try:
        if not parent_conn.poll(timeout):
            proc.terminate()
            raise ProcessingTimeoutError(f"Worker exceeded {timeout:g}s")
        try:
            status, payload = parent_conn.recv()
        except EOFError:
            proc.join()
            raise ProcessingFailedError(f"Worker exited with code {proc.exitcode}") from None
    finally:
        proc.join(timeout=1.0)
        if proc.is_alive():
            proc.kill()
            proc.join()
        parent_conn.close()

    if status != "ok":
        raise ProcessingFailedError(payload)
    return payload


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class AnalysisService:
    """
    Request handler with a bounded number of concurrent workers.

    Parameters
    ----------
    max_workers:
        Analyses allowed to run at once; further requests are refused.
    timeout:
        Wall-clock limit per analysis in seconds.
    """

    def __init__(
        self,
        max_workers: int = config.MAX_CONCURRENT_WORKERS,
        timeout: float = config.WORKER_TIMEOUT_SECONDS,
        worker_target: Callable[..., None] = _worker_main,
    ) -> None:
        self.max_workers = max_workers
        self.timeout = timeout
        self._worker_target = worker_target
        self._slots = threading.BoundedSemaphore(max_workers)

    def process(self, payload: Any) -> AnalysisResult:
        """Validate *payload* and analyse it in a worker; raises on failure."""
        samples, fps = validate_request(payload)
        if not self._slots.acquire(blocking=False):
            raise ServiceBusyError(f"All {self.max_workers} workers busy")
        try:
            return run_in_worker(samples, fps, self.timeout, self._worker_target)
        finally:
            self._slots.release()

    def handle_request(self, payload: Any) -> Tuple[int, Dict[str, Any]]:
        """Return ``(status, body)`` for *payload*."""
        try:
            result = self.process(payload)
        except InvalidRequestError as e:
            logger.info("Rejected rPPG request: %s", e)
            return 400, {"error": INVALID_REQUEST_MESSAGE}
        except ServiceBusyError:
            logger.warning("rPPG request refused: worker pool full")
            return 429, {"error": BUSY_MESSAGE}
        except ProcessingTimeoutError as e:
            logger.error("rPPG processing error: %s", e)
            return 504, {"error": TIMEOUT_MESSAGE}
        except Exception as e:
            logger.error("rPPG processing error: %s", e)
            return 500, {"error": FAILURE_MESSAGE}

        logger.info(
            "rPPG analysed %d samples: %d BPM (%s)",
            result.samples_processed, result.heart_rate, result.confidence.value,
        )
        return 200, result.to_dict()
