"""Tests for recobattle.main wiring and shutdown behavior."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from recobattle.asr.interface import ASREngine
from recobattle.asr.registry import ASRRegistry
from recobattle.asr.yandex import YandexSpeechKitEngine
from recobattle.config import Settings, YandexSettings
from recobattle.main import _run, build_app
from recobattle.models import AudioFile, JobStatus
from recobattle.storage.memory import InMemoryStore


class StaticASR(ASREngine):
    async def recognize(self, audio: bytes) -> str:
        return "hello"


class HangingASR(ASREngine):
    def __init__(self) -> None:
        self.cancelled = asyncio.Event()

    async def recognize(self, audio: bytes) -> str:
        try:
            await asyncio.sleep(9999)
        except asyncio.CancelledError:
            self.cancelled.set()
            raise
        return ""


async def _run_until_shutdown(app, before_shutdown=None) -> None:
    """Run _run() with patched server/signals and trigger the shutdown callback."""
    with patch("recobattle.main.asyncio.start_server") as mock_server:
        mock_srv = AsyncMock()
        mock_srv.close = MagicMock()
        mock_server.return_value = mock_srv

        shutdown_callback = None

        def capture_handler(sig, callback):
            nonlocal shutdown_callback
            shutdown_callback = callback

        loop = asyncio.get_running_loop()
        original_add = loop.add_signal_handler
        loop.add_signal_handler = capture_handler

        try:
            task = asyncio.create_task(_run(app))
            await asyncio.sleep(0.05)

            if before_shutdown is not None:
                await before_shutdown()

            assert shutdown_callback is not None
            shutdown_callback()

            await asyncio.wait_for(task, timeout=2.0)
        finally:
            loop.add_signal_handler = original_add

        mock_srv.close.assert_called_once()


class TestBuildApp:
    """Tests for build_app() wiring."""

    def test_builds_registry_from_settings(self) -> None:
        settings = Settings(yandex=YandexSettings(api_key="key", folder_id="f"))

        app = build_app(settings)

        engine, found = app.registry.lookup("yandexSpeachKit")
        assert found
        assert isinstance(engine, YandexSpeechKitEngine)
        assert app.dispatcher.worker_count == settings.worker_count

    def test_uses_supplied_store_and_registry(self) -> None:
        store = InMemoryStore()
        registry = ASRRegistry()

        app = build_app(Settings(), store=store, registry=registry)

        assert app.store is store
        assert app.registry is registry
        assert app.registry.names() == []


class TestShutdown:
    """Tests for graceful shutdown with timeout."""

    async def test_queued_upload_finishes_before_exit(self) -> None:
        registry = ASRRegistry()
        registry.register("static", StaticASR())
        app = build_app(Settings(), registry=registry)

        async def upload() -> None:
            await app.audio_files.upload("a.wav", "U", "static", b"audio")

        await _run_until_shutdown(app, upload)

        [listed] = await app.audio_files.list_files("U")
        assert listed.status is JobStatus.PROCESSED
        assert not app.dispatcher.running

    async def test_shutdown_timeout_cancels_hanging_job(self) -> None:
        engine = HangingASR()
        registry = ASRRegistry()
        registry.register("hanging", engine)
        app = build_app(Settings(shutdown_timeout_seconds=0.1), registry=registry)

        async def upload() -> None:
            await app.audio_files.upload("a.wav", "U", "hanging", b"audio")
            await asyncio.sleep(0.01)

        await _run_until_shutdown(app, upload)

        assert engine.cancelled.is_set()
        [listed] = await app.audio_files.list_files("U")
        assert listed.status is JobStatus.PROCESSING

    async def test_process_is_dispatched_through_service(self) -> None:
        app = build_app(Settings(), registry=ASRRegistry())
        audio_file = AudioFile(file_name="a.wav", user_id="U", asr="static")
        await app.audio_files.create(audio_file)

        result = await app.audio_files.process(audio_file, StaticASR(), b"audio")

        assert result.status is JobStatus.PROCESSED
