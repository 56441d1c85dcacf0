"""Quality control data models."""

from dataclasses import dataclass

from recobattle.models import DEFAULT_CHANNEL_TAG


@dataclass
class IdealText:
    """Human-supplied reference transcript for one channel of a file."""

    ideal_id: str
    file_id: str
    text: str
    channel_tag: str = DEFAULT_CHANNEL_TAG


@dataclass
class RawTranscript:
    """A machine transcript as read back for scoring."""

    asr: str
    text: str


@dataclass
class QualityScore:
    """Similarity of one provider's transcript to the ideal text.

    Both texts are stored normalized. Computed on read, never persisted.
    """

    asr: str
    ideal_text: str
    asr_text: str
    quality: float
