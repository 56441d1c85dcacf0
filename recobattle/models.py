"""Audio file, ASR job and transcript data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

DEFAULT_CHANNEL_TAG = "1"


class JobStatus(str, Enum):
    """Lifecycle of an ASR job: NEW -> PROCESSING -> PROCESSED | INVALID."""

    NEW = "NEW"
    PROCESSING = "PROCESSING"
    PROCESSED = "PROCESSED"
    INVALID = "INVALID"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.PROCESSED, JobStatus.INVALID)


@dataclass
class AudioFile:
    """An uploaded recording.

    `file_id` is the identity fingerprint and is filled in on creation.
    `status` and `job_id` describe the latest job and are only populated
    when files are listed. `data` carries the raw audio on its way to the
    ASR engine and is never persisted.
    """

    file_name: str
    user_id: str
    asr: str
    file_id: str = ""
    uploaded_at: datetime | None = None
    status: JobStatus | None = None
    job_id: str | None = None
    data: bytes = field(default=b"", repr=False, compare=False)


@dataclass
class ASRJob:
    """One processing attempt of an AudioFile by one ASR provider."""

    job_id: str
    file_id: str
    asr: str
    status: JobStatus = JobStatus.NEW


@dataclass
class TranscriptResult:
    """Recognized text for one channel of one job."""

    job_id: str
    text: str
    channel_tag: str = DEFAULT_CHANNEL_TAG
    start_time: float | None = None
    end_time: float | None = None
