"""Tests for recobattle.config.load_settings()."""

import pytest

from recobattle.asr.yandex import DEFAULT_TIMEOUT_SECONDS, DEFAULT_URI
from recobattle.config import Settings, YandexSettings, load_settings
from recobattle.fingerprint import DEFAULT_SECRET
from recobattle.utils.errors import ConfigError


class TestEnvironment:
    """Tests for settings read from environment variables."""

    def test_defaults_with_empty_environment(self) -> None:
        settings = load_settings(env={})

        assert settings == Settings()
        assert settings.fingerprint_secret == DEFAULT_SECRET
        assert settings.worker_count == 4
        assert settings.shutdown_timeout_seconds == 25.0
        assert settings.yandex is None

    def test_values_from_environment(self) -> None:
        settings = load_settings(
            env={
                "FINGERPRINT_SECRET": "s3cret",
                "ASR_WORKER_COUNT": "8",
                "ASR_QUEUE_SIZE": "10",
                "SHUTDOWN_TIMEOUT_SECONDS": "5.5",
                "PORT": "9000",
                "LOG_LEVEL": "DEBUG",
            }
        )

        assert settings.fingerprint_secret == "s3cret"
        assert settings.worker_count == 8
        assert settings.queue_size == 10
        assert settings.shutdown_timeout_seconds == 5.5
        assert settings.health_port == 9000
        assert settings.log_level == "DEBUG"

    def test_yandex_enabled_by_api_key(self) -> None:
        settings = load_settings(
            env={"YANDEX_API_KEY": "key", "YANDEX_FOLDER_ID": "folder"}
        )

        assert settings.yandex == YandexSettings(api_key="key", folder_id="folder")
        assert settings.yandex.uri == DEFAULT_URI
        assert settings.yandex.timeout == DEFAULT_TIMEOUT_SECONDS

    @pytest.mark.parametrize(
        "env",
        [
            {"ASR_WORKER_COUNT": "many"},
            {"ASR_QUEUE_SIZE": "-1"},
            {"ASR_WORKER_COUNT": "0"},
            {"FINGERPRINT_SECRET": ""},
            {"YANDEX_API_KEY": "key", "YANDEX_TIMEOUT_SECONDS": "soon"},
        ],
    )
    def test_invalid_values_raise_config_error(self, env) -> None:
        with pytest.raises(ConfigError):
            load_settings(env=env)


class TestTomlOverlay:
    """Tests for the TOML config file overlay."""

    def test_file_overrides_environment(self, tmp_path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            "[Processing]\n"
            'FingerprintSecret = "from-file"\n'
            "WorkerCount = 2\n"
            "\n"
            "[YandexAsr]\n"
            'YandexKey = "file-key"\n'
            'YandexFolderId = "file-folder"\n'
            'Format = "oggopus"\n'
            "SampleRateHertz = 16000\n"
        )

        settings = load_settings(
            env={"FINGERPRINT_SECRET": "from-env", "YANDEX_API_KEY": "env-key"},
            config_path=str(path),
        )

        assert settings.fingerprint_secret == "from-file"
        assert settings.worker_count == 2
        assert settings.yandex.api_key == "file-key"
        assert settings.yandex.folder_id == "file-folder"
        assert settings.yandex.audio_format == "oggopus"
        assert settings.yandex.sample_rate_hertz == "16000"

    def test_path_from_environment_variable(self, tmp_path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[Processing]\nQueueSize = 7\n')

        settings = load_settings(env={"RECOBATTLE_CONFIG": str(path)})

        assert settings.queue_size == 7

    def test_yandex_section_requires_key(self, tmp_path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[YandexAsr]\nYandexFolderId = "folder"\n')

        with pytest.raises(ConfigError, match="YandexKey"):
            load_settings(env={}, config_path=str(path))

    def test_missing_file_raises_config_error(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_settings(env={}, config_path=str(tmp_path / "absent.toml"))

    def test_malformed_file_raises_config_error(self, tmp_path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[Processing\nWorkerCount = ")

        with pytest.raises(ConfigError):
            load_settings(env={}, config_path=str(path))
