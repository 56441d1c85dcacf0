"""Automatic speech recognition engines and registry."""

from recobattle.asr.interface import ASREngine
from recobattle.asr.registry import ASRRegistry, build_asr_registry

__all__ = ["ASREngine", "ASRRegistry", "build_asr_registry"]
