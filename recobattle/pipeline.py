"""Audio file ingestion and ASR processing orchestrator.

Contains the processing result models and AudioFileService, which owns
the job state machine:

    NEW -> PROCESSING -> PROCESSED | INVALID

Every job gets exactly one terminal status write. A failed job is never
retried in place; a new upload creates a new job.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from recobattle.asr.interface import ASREngine
from recobattle.asr.registry import ASRRegistry
from recobattle.fingerprint import DEFAULT_SECRET, compute_file_id
from recobattle.models import ASRJob, AudioFile, JobStatus, TranscriptResult
from recobattle.observability.metrics import JobMetrics, StageTimer, log_job_metrics
from recobattle.queue.dispatcher import ProcessingDispatcher, ProcessingTask
from recobattle.storage.interface import AudioFileStore

logger = logging.getLogger(__name__)


@dataclass
class ProcessingError:
    """Details about a processing failure."""

    stage: str
    message: str
    exception_type: str


@dataclass
class ProcessingResult:
    """Outcome of processing one upload."""

    status: JobStatus
    file_id: str
    job_id: str
    metrics: JobMetrics
    error: ProcessingError | None = None


class AudioFileService:
    """Creates audio file records and drives their ASR jobs.

    Args:
        store: Persistence for files, jobs and results.
        registry: ASR engines available by name.
        dispatcher: Background dispatcher used by upload().
        secret: Key for the file fingerprint.
    """

    def __init__(
        self,
        store: AudioFileStore,
        registry: ASRRegistry,
        dispatcher: ProcessingDispatcher | None = None,
        secret: str = DEFAULT_SECRET,
    ) -> None:
        self._store = store
        self._registry = registry
        self._dispatcher = dispatcher
        self._secret = secret

    async def upload(
        self, file_name: str, user_id: str, asr: str, audio: bytes
    ) -> str:
        """Accept an upload and queue it for background processing.

        The provider and the dispatcher are checked before anything is
        stored. If the hand-off to the dispatcher still fails or is
        cancelled, the file record is removed again so the same upload can
        be retried.

        Returns:
            The file fingerprint, once the file record is durably created.

        Raises:
            ProviderUnknownError: If `asr` is not registered.
            ConflictError: If this user already uploaded this file name.
            StorageError: If the file record cannot be stored.
            RuntimeError: If the dispatcher is missing or shutting down.
        """
        if self._dispatcher is None:
            raise RuntimeError("AudioFileService has no dispatcher configured")
        if not self._dispatcher.accepting:
            raise RuntimeError("Dispatcher is not accepting work")

        engine = self._registry.require(asr)
        audio_file = AudioFile(file_name=file_name, user_id=user_id, asr=asr)
        file_id = await self.create(audio_file)

        audio_file.data = audio
        try:
            await self._dispatcher.submit(
                ProcessingTask(file=audio_file, engine=engine, audio=audio)
            )
        except BaseException:
            # A file record without a job blocks re-uploads of the same pair
            await self._store.delete_file(file_id)
            raise
        logger.info(
            "Upload accepted for processing",
            extra={"file_id": file_id, "asr": asr},
        )
        return file_id

    async def create(self, audio_file: AudioFile) -> str:
        """Fingerprint and persist a new file record.

        Returns:
            The fingerprint now stored in audio_file.file_id.

        Raises:
            ConflictError: If the (file name, user) pair already exists.
            StorageError: On any other store failure.
        """
        audio_file.file_id = compute_file_id(
            audio_file.file_name, audio_file.user_id, self._secret
        )
        audio_file.uploaded_at = datetime.now(UTC)
        await self._store.create_file(audio_file)
        logger.info(
            "File record created",
            extra={"file_id": audio_file.file_id, "asr": audio_file.asr},
        )
        return audio_file.file_id

    async def process(
        self, audio_file: AudioFile, engine: ASREngine, audio: bytes
    ) -> ProcessingResult:
        """Run one ASR job for a file through the status state machine.

        Adapter and result-storage failures end the job as INVALID and are
        reported in the returned result. Failures writing the job or its
        status are raised and leave the job in its last stored status.
        Cancellation is not intercepted either.

        Returns:
            ProcessingResult with the terminal status.

        Raises:
            StorageError: If creating the job or writing a status fails.
        """
        wall_start = time.monotonic()
        job = ASRJob(
            job_id=str(uuid.uuid4()),
            file_id=audio_file.file_id,
            asr=audio_file.asr,
        )

        await self._store.create_job(job)
        await self._set_status(job, JobStatus.PROCESSING)

        timer = StageTimer("recognize")
        try:
            with timer:
                text = await engine.recognize(audio)
        except Exception as exc:
            return await self._fail(
                job, "asr", exc, wall_start, timer.duration_seconds, len(audio)
            )
        finally:
            audio_file.data = b""

        try:
            await self._store.create_result(
                TranscriptResult(job_id=job.job_id, text=text)
            )
        except Exception as exc:
            return await self._fail(
                job, "store_result", exc, wall_start, timer.duration_seconds, len(audio)
            )

        await self._set_status(job, JobStatus.PROCESSED)

        metrics = JobMetrics(
            file_id=job.file_id,
            job_id=job.job_id,
            asr=job.asr,
            status=JobStatus.PROCESSED.value,
            processing_wall_time_seconds=time.monotonic() - wall_start,
            recognize_duration_seconds=timer.duration_seconds,
            audio_size_bytes=len(audio),
            transcript_length_chars=len(text),
        )
        log_job_metrics(metrics)
        return ProcessingResult(
            status=JobStatus.PROCESSED,
            file_id=job.file_id,
            job_id=job.job_id,
            metrics=metrics,
        )

    async def list_files(self, user_id: str) -> list[AudioFile]:
        """Files of a user with their latest job status, newest first."""
        return await self._store.list_files(user_id)

    async def get_transcripts(self, file_id: str) -> list[TranscriptResult]:
        """All transcript results stored for a file."""
        return await self._store.list_results(file_id)

    async def _set_status(self, job: ASRJob, status: JobStatus) -> None:
        await self._store.update_job_status(job.job_id, status)
        job.status = status
        logger.info(
            "Job finished" if status.is_terminal else "Job status changed",
            extra={
                "file_id": job.file_id,
                "job_id": job.job_id,
                "asr": job.asr,
                "status": status.value,
            },
        )

    async def _fail(
        self,
        job: ASRJob,
        stage: str,
        exc: Exception,
        wall_start: float,
        recognize_seconds: float,
        audio_size: int,
    ) -> ProcessingResult:
        """Mark the job INVALID and build the failed result."""
        logger.error(
            "Processing failed at stage '%s': %s",
            stage,
            exc,
            extra={
                "file_id": job.file_id,
                "job_id": job.job_id,
                "asr": job.asr,
                "stage": stage,
            },
        )
        await self._set_status(job, JobStatus.INVALID)

        error = ProcessingError(
            stage=stage,
            message=str(exc),
            exception_type=type(exc).__name__,
        )
        metrics = JobMetrics(
            file_id=job.file_id,
            job_id=job.job_id,
            asr=job.asr,
            status=JobStatus.INVALID.value,
            processing_wall_time_seconds=time.monotonic() - wall_start,
            recognize_duration_seconds=recognize_seconds,
            audio_size_bytes=audio_size,
            error_stage=stage,
            error_message=error.message,
        )
        log_job_metrics(metrics)
        return ProcessingResult(
            status=JobStatus.INVALID,
            file_id=job.file_id,
            job_id=job.job_id,
            metrics=metrics,
            error=error,
        )
