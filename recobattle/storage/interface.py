"""Persistence contracts consumed by the processing and quality services.

Implementations translate their own uniqueness violations into
ConflictError and every other failure into StorageError.
"""

from abc import ABC, abstractmethod

from recobattle.models import ASRJob, AudioFile, JobStatus, TranscriptResult
from recobattle.quality.models import IdealText, RawTranscript


class AudioFileStore(ABC):
    """Storage for audio file records, ASR jobs and their results."""

    @abstractmethod
    async def create_file(self, audio_file: AudioFile) -> None:
        """Persist a new file record.

        Raises:
            ConflictError: If a file with the same file_id exists.
            StorageError: On any other failure.
        """

    @abstractmethod
    async def delete_file(self, file_id: str) -> None:
        """Remove a file record that has no jobs. Unknown ids are ignored.

        Raises:
            StorageError: If the file already has jobs.
        """

    @abstractmethod
    async def create_job(self, job: ASRJob) -> None:
        """Persist a new ASR job."""

    @abstractmethod
    async def update_job_status(self, job_id: str, status: JobStatus) -> None:
        """Set the status of an existing job."""

    @abstractmethod
    async def create_result(self, result: TranscriptResult) -> None:
        """Persist a transcript for an existing job."""

    @abstractmethod
    async def list_files(self, user_id: str) -> list[AudioFile]:
        """Files of a user with their latest job status, newest first."""

    @abstractmethod
    async def list_results(self, file_id: str) -> list[TranscriptResult]:
        """All transcript results of every job of a file."""


class QualityControlStore(ABC):
    """Storage for ideal texts and the transcripts they are scored against."""

    @abstractmethod
    async def create_ideal(self, ideal: IdealText) -> None:
        """Persist an ideal text.

        Raises:
            ConflictError: If the file already has an ideal text for the
                same channel.
            StorageError: If the file is unknown, or on any other failure.
        """

    @abstractmethod
    async def get_transcripts_with_ideal(
        self, file_id: str
    ) -> tuple[list[RawTranscript], str | None]:
        """Read the machine transcripts of a file and its ideal text.

        Returns:
            (transcripts, ideal_text); ideal_text is None when none was
            recorded for the file.
        """
