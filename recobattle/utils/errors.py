"""Custom exception hierarchy for the recognition core.

All exceptions inherit from RecoBattleError, enabling targeted handling
at service boundaries while preserving specific failure context.
"""

from typing import Literal

ErrorCategory = Literal["conflict", "unprocessable", "internal"]


class RecoBattleError(Exception):
    """Base exception for all recognition core errors."""

    def __init__(self, message: str, file_id: str | None = None) -> None:
        self.file_id = file_id
        super().__init__(message)

    def __str__(self) -> str:
        if self.file_id:
            return f"[file={self.file_id}] {super().__str__()}"
        return super().__str__()


class ConflictError(RecoBattleError):
    """Raised when a file or ideal text with the same identity already exists."""

    def __init__(
        self,
        message: str,
        file_id: str | None = None,
        resource: str | None = None,
    ) -> None:
        self.resource = resource
        super().__init__(message, file_id)


class ProviderUnknownError(RecoBattleError):
    """Raised when the requested ASR provider is not registered."""

    def __init__(
        self,
        message: str,
        file_id: str | None = None,
        provider: str | None = None,
    ) -> None:
        self.provider = provider
        super().__init__(message, file_id)


class ASRError(RecoBattleError):
    """Raised when the upstream speech recognition call fails."""

    def __init__(
        self,
        message: str,
        file_id: str | None = None,
        provider: str | None = None,
    ) -> None:
        self.provider = provider
        super().__init__(message, file_id)


class StorageError(RecoBattleError):
    """Raised when a store operation fails."""

    def __init__(
        self,
        message: str,
        file_id: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.operation = operation
        super().__init__(message, file_id)


class ConfigError(RecoBattleError):
    """Raised when service configuration is missing or malformed."""


_PUBLIC_MESSAGES: dict[str, str] = {
    "conflict": "resource already exists",
    "unprocessable": "request cannot be processed as specified",
    "internal": "internal server error",
}


def error_category(exc: BaseException) -> ErrorCategory:
    """Classify an exception for the transport layer.

    Args:
        exc: The exception raised by a core operation.

    Returns:
        "conflict" for ConflictError, "unprocessable" for
        ProviderUnknownError, "internal" for everything else.
    """
    if isinstance(exc, ConflictError):
        return "conflict"
    if isinstance(exc, ProviderUnknownError):
        return "unprocessable"
    return "internal"


def public_message(exc: BaseException) -> str:
    """Client-safe message for an exception; never leaks internals."""
    return _PUBLIC_MESSAGES[error_category(exc)]
