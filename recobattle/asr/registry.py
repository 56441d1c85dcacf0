"""ASR engine registry with configuration-driven provider setup.

ASRRegistry maps provider names to engine instances and is built once at
startup, then passed to the services that need it. ASR_ENGINES maps
provider names to engine classes for build_asr_registry().
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from recobattle.asr.interface import ASREngine
from recobattle.asr.yandex import PROVIDER_NAME as YANDEX_PROVIDER
from recobattle.asr.yandex import YandexSpeechKitEngine
from recobattle.utils.errors import ProviderUnknownError

if TYPE_CHECKING:
    from recobattle.config import Settings

logger = logging.getLogger(__name__)

ASR_ENGINES: dict[str, type[ASREngine]] = {
    YANDEX_PROVIDER: YandexSpeechKitEngine,
}


class _ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class ASRRegistry:
    """Thread-safe directory of named ASR engines."""

    def __init__(self) -> None:
        self._engines: dict[str, ASREngine] = {}
        self._lock = _ReadWriteLock()

    def register(self, name: str, engine: ASREngine) -> bool:
        """Register an engine under a provider name.

        Registering a name that is already taken keeps the existing engine.

        Args:
            name: Provider name clients select at upload time.
            engine: Engine instance serving that name.

        Returns:
            True if the engine was added, False if the name already existed.
        """
        with self._lock.write():
            if name in self._engines:
                logger.info("ASR provider [%s] already registered, skipping", name)
                return False
            self._engines[name] = engine
        logger.info("ASR provider [%s] registered", name)
        return True

    def lookup(self, name: str) -> tuple[ASREngine | None, bool]:
        """Find the engine registered under a name.

        Returns:
            (engine, True) when registered, (None, False) otherwise.
        """
        with self._lock.read():
            engine = self._engines.get(name)
        return engine, engine is not None

    def require(self, name: str) -> ASREngine:
        """Return the engine for a name.

        Raises:
            ProviderUnknownError: If the name is not registered.
        """
        engine, found = self.lookup(name)
        if not found:
            available = ", ".join(self.names())
            raise ProviderUnknownError(
                f"Unknown ASR provider: '{name}'. Available: {available}",
                provider=name,
            )
        return engine  # type: ignore[return-value]

    def names(self) -> list[str]:
        """Sorted list of registered provider names."""
        with self._lock.read():
            return sorted(self._engines)

    def __contains__(self, name: object) -> bool:
        with self._lock.read():
            return name in self._engines


def build_asr_registry(settings: Settings) -> ASRRegistry:
    """Create a registry holding every engine the settings configure.

    Args:
        settings: Loaded service settings.

    Returns:
        A populated ASRRegistry (possibly empty).
    """
    registry = ASRRegistry()

    if settings.yandex is not None:
        yandex = settings.yandex
        engine_cls = ASR_ENGINES[YANDEX_PROVIDER]
        registry.register(
            YANDEX_PROVIDER,
            engine_cls(
                api_key=yandex.api_key,
                folder_id=yandex.folder_id,
                uri=yandex.uri,
                audio_format=yandex.audio_format,
                sample_rate_hertz=yandex.sample_rate_hertz,
                language=yandex.language,
                topic=yandex.topic,
                timeout=yandex.timeout,
            ),
        )

    if not registry.names():
        logger.warning("No ASR providers configured")
    return registry
