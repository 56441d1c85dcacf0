"""Service configuration.

Settings come from environment variables and can be overlaid by a TOML
file named in RECOBATTLE_CONFIG. The file uses the same section layout as
the service's historical config.toml:

    [YandexAsr]
    YandexKey = "..."
    YandexFolderId = "..."
    YandexAsrUri = "https://stt.api.cloud.yandex.net/speech/v1/stt:recognize"
    Format = "lpcm"
    SampleRateHertz = "48000"

    [Processing]
    FingerprintSecret = "..."
    WorkerCount = 4
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from recobattle.asr.yandex import DEFAULT_TIMEOUT_SECONDS, DEFAULT_URI
from recobattle.fingerprint import DEFAULT_SECRET
from recobattle.utils.errors import ConfigError


@dataclass
class YandexSettings:
    """Connection settings for the Yandex SpeechKit engine."""

    api_key: str
    folder_id: str = ""
    uri: str = DEFAULT_URI
    audio_format: str = "lpcm"
    sample_rate_hertz: str = "48000"
    language: str = "ru-RU"
    topic: str = "general"
    timeout: float = DEFAULT_TIMEOUT_SECONDS


@dataclass
class Settings:
    """Top-level service settings."""

    fingerprint_secret: str = DEFAULT_SECRET
    worker_count: int = 4
    queue_size: int = 100
    shutdown_timeout_seconds: float = 25.0
    health_port: int = 8080
    log_level: str = "INFO"
    yandex: YandexSettings | None = field(default=None)


def _number(name: str, raw: Any, kind: type) -> Any:
    try:
        value = kind(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def _yandex_from_env(env: Mapping[str, str]) -> YandexSettings | None:
    api_key = env.get("YANDEX_API_KEY", "")
    if not api_key:
        return None
    return YandexSettings(
        api_key=api_key,
        folder_id=env.get("YANDEX_FOLDER_ID", ""),
        uri=env.get("YANDEX_ASR_URI", DEFAULT_URI),
        audio_format=env.get("YANDEX_FORMAT", "lpcm"),
        sample_rate_hertz=env.get("YANDEX_SAMPLE_RATE_HERTZ", "48000"),
        language=env.get("YANDEX_LANGUAGE", "ru-RU"),
        topic=env.get("YANDEX_TOPIC", "general"),
        timeout=_number(
            "YANDEX_TIMEOUT_SECONDS",
            env.get("YANDEX_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            float,
        ),
    )


def _apply_toml(settings: Settings, data: dict[str, Any]) -> None:
    """Overlay values from a parsed TOML document onto settings."""
    processing = data.get("Processing", {})
    if "FingerprintSecret" in processing:
        settings.fingerprint_secret = str(processing["FingerprintSecret"])
    if "WorkerCount" in processing:
        settings.worker_count = _number(
            "WorkerCount", processing["WorkerCount"], int
        )
    if "QueueSize" in processing:
        settings.queue_size = _number("QueueSize", processing["QueueSize"], int)

    yandex = data.get("YandexAsr")
    if not yandex:
        return
    api_key = yandex.get("YandexKey", "")
    if not api_key:
        raise ConfigError("YandexAsr.YandexKey is required")
    settings.yandex = YandexSettings(
        api_key=api_key,
        folder_id=yandex.get("YandexFolderId", ""),
        uri=yandex.get("YandexAsrUri", DEFAULT_URI),
        audio_format=yandex.get("Format", "lpcm"),
        sample_rate_hertz=str(yandex.get("SampleRateHertz", "48000")),
        language=yandex.get("Language", "ru-RU"),
        topic=yandex.get("Topic", "general"),
        timeout=_number(
            "YandexAsr.Timeout",
            yandex.get("Timeout", DEFAULT_TIMEOUT_SECONDS),
            float,
        ),
    )


def load_settings(
    env: Mapping[str, str] | None = None, config_path: str | None = None
) -> Settings:
    """Build Settings from the environment and an optional TOML file.

    Args:
        env: Environment mapping (defaults to os.environ).
        config_path: TOML file path (defaults to $RECOBATTLE_CONFIG).

    Returns:
        Populated Settings.

    Raises:
        ConfigError: On malformed values or an unreadable config file.
    """
    if env is None:
        env = os.environ

    settings = Settings(
        fingerprint_secret=env.get("FINGERPRINT_SECRET", DEFAULT_SECRET),
        worker_count=_number(
            "ASR_WORKER_COUNT", env.get("ASR_WORKER_COUNT", "4"), int
        ),
        queue_size=_number("ASR_QUEUE_SIZE", env.get("ASR_QUEUE_SIZE", "100"), int),
        shutdown_timeout_seconds=_number(
            "SHUTDOWN_TIMEOUT_SECONDS",
            env.get("SHUTDOWN_TIMEOUT_SECONDS", "25"),
            float,
        ),
        health_port=_number("PORT", env.get("PORT", "8080"), int),
        log_level=env.get("LOG_LEVEL", "INFO"),
        yandex=_yandex_from_env(env),
    )

    config_path = config_path or env.get("RECOBATTLE_CONFIG")
    if config_path:
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
        _apply_toml(settings, data)

    if settings.worker_count < 1:
        raise ConfigError("ASR_WORKER_COUNT must be at least 1")
    if not settings.fingerprint_secret:
        raise ConfigError("FINGERPRINT_SECRET must not be empty")

    return settings
