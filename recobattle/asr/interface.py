"""Abstract ASR engine interface.

Concrete providers (e.g., Yandex SpeechKit) subclass ASREngine and are
registered by name in an ASRRegistry at startup.
"""

from abc import ABC, abstractmethod


class ASREngine(ABC):
    """Abstract base class for ASR engine implementations.

    Subclasses must implement the recognize() method. Implementations bound
    the upstream call with a timeout and raise ASRError on any failure
    rather than returning partial text.
    """

    @abstractmethod
    async def recognize(self, audio: bytes) -> str:
        """Recognize speech in raw audio bytes.

        Args:
            audio: Audio payload in the format the engine was configured for.

        Returns:
            The recognized text.

        Raises:
            ASRError: On timeout, transport failure or malformed response.
        """
