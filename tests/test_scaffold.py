"""Tests for project scaffold: imports, logger, and custom exceptions."""

import json
import logging

from recobattle.observability.logger import StructuredJsonFormatter, get_logger
from recobattle.utils.errors import (
    ASRError,
    ConfigError,
    ConflictError,
    ProviderUnknownError,
    RecoBattleError,
    StorageError,
    error_category,
    public_message,
)


class TestModuleImports:
    """Verify all package modules are importable."""

    def test_top_level_import(self) -> None:
        import recobattle

        assert recobattle.__version__

    def test_subpackage_imports(self) -> None:
        import recobattle.asr
        import recobattle.observability
        import recobattle.quality
        import recobattle.queue
        import recobattle.storage
        import recobattle.utils

        assert recobattle.asr is not None
        assert recobattle.observability is not None
        assert recobattle.quality is not None
        assert recobattle.queue is not None
        assert recobattle.storage is not None
        assert recobattle.utils is not None


class TestCustomExceptions:
    """Verify custom exception hierarchy and string representations."""

    def test_all_exceptions_inherit_from_base(self) -> None:
        for cls in (
            ConflictError,
            ProviderUnknownError,
            ASRError,
            StorageError,
            ConfigError,
        ):
            assert issubclass(cls, RecoBattleError), (
                f"{cls.__name__} must inherit from RecoBattleError"
            )

    def test_str_without_file_id(self) -> None:
        assert str(RecoBattleError("something failed")) == "something failed"

    def test_str_with_file_id(self) -> None:
        error = RecoBattleError("something failed", file_id="abc123")
        assert "[file=abc123]" in str(error)
        assert "something failed" in str(error)

    def test_context_attributes(self) -> None:
        assert ConflictError("dup", resource="audio_file").resource == "audio_file"
        assert ProviderUnknownError("x", provider="vosk").provider == "vosk"
        assert ASRError("x", provider="yandexSpeachKit").provider == "yandexSpeachKit"
        assert StorageError("x", operation="create_job").operation == "create_job"


class TestErrorCategory:
    """Tests for boundary error classification."""

    def test_conflict(self) -> None:
        assert error_category(ConflictError("dup")) == "conflict"
        assert public_message(ConflictError("dup")) == "resource already exists"

    def test_unknown_provider_is_unprocessable(self) -> None:
        exc = ProviderUnknownError("nope", provider="nope")
        assert error_category(exc) == "unprocessable"

    def test_everything_else_is_internal_and_opaque(self) -> None:
        exc = StorageError("connection refused on 10.0.0.5:5432")
        assert error_category(exc) == "internal"
        assert error_category(RuntimeError("boom")) == "internal"
        assert "10.0.0.5" not in public_message(exc)


class TestStructuredJsonFormatter:
    """Tests for the JSON log formatter."""

    def _record(self, **extra: object) -> logging.LogRecord:
        record = logging.LogRecord(
            name="recobattle.pipeline",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Job status changed to %s",
            args=("PROCESSING",),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_formats_message_and_severity(self) -> None:
        entry = json.loads(StructuredJsonFormatter().format(self._record()))
        assert entry["severity"] == "INFO"
        assert entry["message"] == "Job status changed to PROCESSING"
        assert "timestamp" in entry

    def test_includes_extra_fields(self) -> None:
        record = self._record(file_id="f-1", job_id="j-1", status="PROCESSING")
        entry = json.loads(StructuredJsonFormatter().format(record))
        assert entry["file_id"] == "f-1"
        assert entry["job_id"] == "j-1"
        assert entry["status"] == "PROCESSING"
        assert "asr" not in entry

    def test_get_logger_does_not_duplicate_handlers(self) -> None:
        first = get_logger("recobattle.test.scaffold")
        second = get_logger("recobattle.test.scaffold")
        assert first is second
        assert len(second.handlers) == 1
