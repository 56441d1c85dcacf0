"""Audio ingestion, asynchronous ASR processing and transcript quality scoring."""

__version__ = "0.1.0"
