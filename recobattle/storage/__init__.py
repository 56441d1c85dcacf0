"""Persistence contracts and the in-memory store."""

from recobattle.storage.interface import AudioFileStore, QualityControlStore
from recobattle.storage.memory import InMemoryStore

__all__ = ["AudioFileStore", "InMemoryStore", "QualityControlStore"]
