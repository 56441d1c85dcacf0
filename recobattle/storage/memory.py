"""In-memory implementation of the audio file and quality control stores.

Keeps everything in process dictionaries guarded by a single asyncio.Lock.
Suitable for local runs and tests; state is lost on restart.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime

from recobattle.models import ASRJob, AudioFile, JobStatus, TranscriptResult
from recobattle.quality.models import IdealText, RawTranscript
from recobattle.storage.interface import AudioFileStore, QualityControlStore
from recobattle.utils.errors import ConflictError, StorageError


class InMemoryStore(AudioFileStore, QualityControlStore):
    """Dictionary-backed store implementing both storage contracts."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._files: dict[str, AudioFile] = {}
        self._jobs: dict[str, ASRJob] = {}
        self._results: list[TranscriptResult] = []
        self._ideals: dict[tuple[str, str], IdealText] = {}

    async def create_file(self, audio_file: AudioFile) -> None:
        async with self._lock:
            if audio_file.file_id in self._files:
                raise ConflictError(
                    f"File '{audio_file.file_name}' already exists",
                    file_id=audio_file.file_id,
                    resource="audio_file",
                )
            # Raw audio is never retained
            self._files[audio_file.file_id] = replace(
                audio_file,
                data=b"",
                status=None,
                job_id=None,
                uploaded_at=audio_file.uploaded_at or datetime.now(UTC),
            )

    async def delete_file(self, file_id: str) -> None:
        async with self._lock:
            if any(job.file_id == file_id for job in self._jobs.values()):
                raise StorageError(
                    "Cannot delete a file that has jobs",
                    file_id=file_id,
                    operation="delete_file",
                )
            self._files.pop(file_id, None)

    async def create_job(self, job: ASRJob) -> None:
        async with self._lock:
            if job.file_id not in self._files:
                raise StorageError(
                    f"Cannot create job {job.job_id}: unknown file",
                    file_id=job.file_id,
                    operation="create_job",
                )
            if job.job_id in self._jobs:
                raise StorageError(
                    f"Job {job.job_id} already exists",
                    file_id=job.file_id,
                    operation="create_job",
                )
            self._jobs[job.job_id] = replace(job)

    async def update_job_status(self, job_id: str, status: JobStatus) -> None:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise StorageError(
                    f"Cannot update status of unknown job {job_id}",
                    operation="update_job_status",
                )
            job.status = status

    async def create_result(self, result: TranscriptResult) -> None:
        async with self._lock:
            if result.job_id not in self._jobs:
                raise StorageError(
                    f"Cannot store result for unknown job {result.job_id}",
                    operation="create_result",
                )
            self._results.append(replace(result))

    async def list_files(self, user_id: str) -> list[AudioFile]:
        async with self._lock:
            latest_jobs: dict[str, ASRJob] = {}
            for job in self._jobs.values():
                latest_jobs[job.file_id] = job

            files: list[AudioFile] = []
            for audio_file in reversed(list(self._files.values())):
                if audio_file.user_id != user_id:
                    continue
                job = latest_jobs.get(audio_file.file_id)
                files.append(
                    replace(
                        audio_file,
                        status=job.status if job else None,
                        job_id=job.job_id if job else None,
                    )
                )

        files.sort(key=lambda f: f.uploaded_at, reverse=True)
        return files

    async def list_results(self, file_id: str) -> list[TranscriptResult]:
        async with self._lock:
            job_ids = {
                job.job_id for job in self._jobs.values() if job.file_id == file_id
            }
            return [replace(r) for r in self._results if r.job_id in job_ids]

    async def create_ideal(self, ideal: IdealText) -> None:
        key = (ideal.file_id, ideal.channel_tag)
        async with self._lock:
            if ideal.file_id not in self._files:
                raise StorageError(
                    "Cannot record ideal text: unknown file",
                    file_id=ideal.file_id,
                    operation="create_ideal",
                )
            if key in self._ideals:
                raise ConflictError(
                    f"Ideal text for channel {ideal.channel_tag} already exists",
                    file_id=ideal.file_id,
                    resource="ideal_text",
                )
            self._ideals[key] = replace(ideal)

    async def get_transcripts_with_ideal(
        self, file_id: str
    ) -> tuple[list[RawTranscript], str | None]:
        async with self._lock:
            ideal = next(
                (i for (fid, _), i in self._ideals.items() if fid == file_id),
                None,
            )
            if ideal is None:
                return [], None

            transcripts: list[RawTranscript] = []
            for result in self._results:
                job = self._jobs[result.job_id]
                if job.file_id == file_id:
                    transcripts.append(RawTranscript(asr=job.asr, text=result.text))
            return transcripts, ideal.text
