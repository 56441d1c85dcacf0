"""Service entry point for the recognition core.

Wires the ASR registry, store, dispatcher and services together, starts
the processing workers alongside a lightweight HTTP health check server,
and handles SIGTERM/SIGINT for graceful shutdown: queued jobs get up to
the configured shutdown timeout to finish before in-flight work is
cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from asyncio import StreamReader, StreamWriter
from dataclasses import dataclass

from recobattle.asr.registry import ASRRegistry, build_asr_registry
from recobattle.config import Settings, load_settings
from recobattle.observability.logger import setup_logging
from recobattle.pipeline import AudioFileService
from recobattle.quality.service import QualityControlService
from recobattle.queue.dispatcher import ProcessingDispatcher
from recobattle.storage.memory import InMemoryStore

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """Everything the transport layer needs to serve requests."""

    settings: Settings
    registry: ASRRegistry
    store: InMemoryStore
    dispatcher: ProcessingDispatcher
    audio_files: AudioFileService
    quality: QualityControlService


def build_app(
    settings: Settings,
    store: InMemoryStore | None = None,
    registry: ASRRegistry | None = None,
) -> Application:
    """Construct the services from settings.

    Args:
        settings: Loaded settings.
        store: Store to use (a fresh InMemoryStore by default).
        registry: Registry to use (built from settings by default).
    """
    if store is None:
        store = InMemoryStore()
    if registry is None:
        registry = build_asr_registry(settings)

    dispatcher = ProcessingDispatcher(
        worker_count=settings.worker_count, queue_size=settings.queue_size
    )
    audio_files = AudioFileService(
        store=store,
        registry=registry,
        dispatcher=dispatcher,
        secret=settings.fingerprint_secret,
    )
    return Application(
        settings=settings,
        registry=registry,
        store=store,
        dispatcher=dispatcher,
        audio_files=audio_files,
        quality=QualityControlService(store),
    )


async def _health_handler(reader: StreamReader, writer: StreamWriter) -> None:
    """Minimal HTTP handler that returns 200 OK for liveness probes."""
    await reader.read(4096)
    response = (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: text/plain\r\n"
        "Content-Length: 2\r\n"
        "\r\n"
        "ok"
    )
    writer.write(response.encode())
    await writer.drain()
    writer.close()


async def _run(app: Application) -> None:
    """Run the health server and processing workers until a shutdown signal."""
    port = app.settings.health_port
    server = await asyncio.start_server(_health_handler, "0.0.0.0", port)
    logger.info("Health server listening on port %d", port)

    app.dispatcher.start(app.audio_files.process)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _shutdown() -> None:
        logger.info("Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _shutdown)

    await stop_event.wait()
    await app.dispatcher.shutdown(app.settings.shutdown_timeout_seconds)
    server.close()
    await server.wait_closed()
    logger.info("Shutdown complete")


def main() -> None:
    """Load settings, build the application and serve until stopped."""
    settings = load_settings()
    setup_logging(settings.log_level)
    logger.info("RecoBattle core starting")

    app = build_app(settings)
    logger.info("ASR providers available: %s", ", ".join(app.registry.names()))

    asyncio.run(_run(app))


if __name__ == "__main__":
    main()
