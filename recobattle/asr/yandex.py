"""Yandex SpeechKit ASR client implementation.

Implements YandexSpeechKitEngine using the SpeechKit synchronous
recognition endpoint: the raw audio is POSTed in a single request and the
recognized text comes back in the "result" field of a JSON body.
"""

from __future__ import annotations

import logging

import httpx

from recobattle.asr.interface import ASREngine
from recobattle.utils.errors import ASRError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "yandexSpeachKit"
DEFAULT_URI = "https://stt.api.cloud.yandex.net/speech/v1/stt:recognize"
DEFAULT_TIMEOUT_SECONDS = 10.0


class YandexSpeechKitEngine(ASREngine):
    """Yandex SpeechKit short-audio recognition engine.

    Args:
        api_key: SpeechKit API key for authentication.
        folder_id: Yandex Cloud folder the requests are billed to.
        uri: Recognition endpoint (default production endpoint).
        audio_format: Audio encoding, e.g. "lpcm" or "oggopus".
        sample_rate_hertz: Sample rate of LPCM audio.
        language: Recognition language (default "ru-RU").
        topic: Language model to use (default "general").
        timeout: Maximum seconds for one recognition call (default 10).
        client: Optional shared httpx.AsyncClient.
    """

    def __init__(
        self,
        api_key: str,
        folder_id: str = "",
        uri: str = DEFAULT_URI,
        audio_format: str = "lpcm",
        sample_rate_hertz: int | str = 48000,
        language: str = "ru-RU",
        topic: str = "general",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self._api_key = api_key
        self._folder_id = folder_id
        self._uri = uri
        self._audio_format = audio_format
        self._sample_rate_hertz = str(sample_rate_hertz)
        self._language = language
        self._topic = topic
        self._timeout = timeout
        self._client = client

    def _params(self) -> dict[str, str]:
        """Build the recognition query parameters."""
        return {
            "topic": self._topic,
            "folderId": self._folder_id,
            "lang": self._language,
            "format": self._audio_format,
            "sampleRateHertz": self._sample_rate_hertz,
        }

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Api-Key {self._api_key}"}

    async def recognize(self, audio: bytes) -> str:
        """Recognize speech via the SpeechKit REST API.

        Args:
            audio: Raw audio bytes.

        Returns:
            The recognized text.

        Raises:
            ASRError: On timeout, transport failure, non-2xx status or a
                body without a textual "result" field.
        """
        if self._client is not None:
            response = await self._post(self._client, audio)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await self._post(client, audio)
        return self._parse_response(response)

    async def _post(self, client: httpx.AsyncClient, audio: bytes) -> httpx.Response:
        """Send the audio to the recognition endpoint.

        Raises:
            ASRError: If the request times out or fails in transport.
        """
        logger.info(
            "Yandex recognition request to %s (%d bytes)", self._uri, len(audio)
        )
        try:
            return await client.post(
                self._uri,
                params=self._params(),
                headers=self._headers(),
                content=audio,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise ASRError(
                f"Recognition timed out after {self._timeout}s",
                provider=PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            raise ASRError(
                f"Failed to send recognition request: {exc}",
                provider=PROVIDER_NAME,
            ) from exc

    def _parse_response(self, response: httpx.Response) -> str:
        """Extract the recognized text from a SpeechKit response.

        Raises:
            ASRError: If the status is not 2xx or the body is malformed.
        """
        if not response.is_success:
            raise ASRError(
                f"Recognition failed with status {response.status_code}: "
                f"{response.text}",
                provider=PROVIDER_NAME,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ASRError(
                f"Malformed recognition response: {exc}",
                provider=PROVIDER_NAME,
            ) from exc

        result = body.get("result") if isinstance(body, dict) else None
        if not isinstance(result, str):
            raise ASRError(
                "No result text in recognition response",
                provider=PROVIDER_NAME,
            )
        return result
