"""Processing metrics collection and reporting.

Provides JobMetrics dataclass for per-job observability data, StageTimer
context manager for measuring processing stage durations, and
log_job_metrics() for emitting metrics as structured JSON to stdout.
"""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime


@dataclass
class JobMetrics:
    """All metrics collected for a single ASR job run."""

    file_id: str
    job_id: str
    asr: str
    status: str
    processing_wall_time_seconds: float
    recognize_duration_seconds: float
    audio_size_bytes: int
    transcript_length_chars: int = 0
    error_stage: str | None = None
    error_message: str | None = None


class StageTimer:
    """Context manager that records wall-clock duration of a processing stage.

    Captures stage_name, start_time, end_time (as UTC datetimes),
    and duration_seconds (as a monotonic float). The duration is recorded
    even when the block raises.

    Usage:
        timer = StageTimer("recognize")
        with timer:
            await engine.recognize(audio)
        print(timer.duration_seconds)
    """

    def __init__(self, stage_name: str) -> None:
        self.stage_name = stage_name
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None
        self.duration_seconds: float = 0.0
        self._mono_start: float = 0.0

    def __enter__(self) -> StageTimer:
        self.start_time = datetime.now(UTC)
        self._mono_start = time.monotonic()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        elapsed = time.monotonic() - self._mono_start
        self.end_time = datetime.now(UTC)
        self.duration_seconds = elapsed


def log_job_metrics(metrics: JobMetrics) -> None:
    """Emit job metrics as a single structured JSON line to stdout.

    The JSON envelope includes timestamp, severity, and metric_type
    fields. All JobMetrics fields are spread into the top level.

    Args:
        metrics: Populated JobMetrics dataclass.
    """
    entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "severity": "INFO",
        "metric_type": "asr_job_completion",
        **asdict(metrics),
    }
    print(json.dumps(entry))
