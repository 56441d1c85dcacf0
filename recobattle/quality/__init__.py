"""Transcript quality control."""

from recobattle.quality.models import IdealText, QualityScore, RawTranscript
from recobattle.quality.scoring import (
    compare_texts,
    normalize_text,
    score_transcript,
    tokenize,
)
from recobattle.quality.service import QualityControlService

__all__ = [
    "IdealText",
    "QualityControlService",
    "QualityScore",
    "RawTranscript",
    "compare_texts",
    "normalize_text",
    "score_transcript",
    "tokenize",
]
