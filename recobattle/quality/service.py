"""Quality control service: ideal texts and per-provider scores."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from recobattle.models import DEFAULT_CHANNEL_TAG
from recobattle.quality.models import IdealText, QualityScore
from recobattle.quality.scoring import compare_texts, normalize_text

if TYPE_CHECKING:
    from recobattle.storage.interface import QualityControlStore

logger = logging.getLogger(__name__)


class QualityControlService:
    """Records reference transcripts and scores ASR output against them."""

    def __init__(self, store: QualityControlStore) -> None:
        self._store = store

    async def record_ideal(
        self, file_id: str, text: str, channel_tag: str = DEFAULT_CHANNEL_TAG
    ) -> IdealText:
        """Store the human reference text for one channel of a file.

        Args:
            file_id: Fingerprint of the audio file.
            text: Reference transcript.
            channel_tag: Channel the text belongs to.

        Returns:
            The stored IdealText with its freshly generated id.

        Raises:
            ConflictError: If the channel already has an ideal text.
            StorageError: On any other store failure.
        """
        ideal = IdealText(
            ideal_id=str(uuid.uuid4()),
            file_id=file_id,
            text=text,
            channel_tag=channel_tag,
        )
        await self._store.create_ideal(ideal)
        logger.info(
            "Ideal text recorded for channel %s",
            channel_tag,
            extra={"file_id": file_id},
        )
        return ideal

    async def score(self, file_id: str) -> list[QualityScore]:
        """Score every ASR transcript of a file against its ideal text.

        Returns:
            One QualityScore per stored transcript; empty when the file has
            no ideal text yet.
        """
        transcripts, ideal_text = await self._store.get_transcripts_with_ideal(
            file_id
        )
        if ideal_text is None:
            logger.info("No ideal text to score against", extra={"file_id": file_id})
            return []

        normalized_ideal = normalize_text(ideal_text)
        scores: list[QualityScore] = []
        for transcript in transcripts:
            normalized_asr = normalize_text(transcript.text)
            scores.append(
                QualityScore(
                    asr=transcript.asr,
                    ideal_text=normalized_ideal,
                    asr_text=normalized_asr,
                    quality=compare_texts(normalized_ideal, normalized_asr),
                )
            )
        return scores
