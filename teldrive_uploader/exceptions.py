"""Error types raised by the uploader."""
from typing import Any, Optional


class TeldriveError(Exception):
    """Base class for every uploader error."""


class ConfigError(TeldriveError):
    """Raised when required configuration is missing or invalid."""


class TeldriveAPIError(TeldriveError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, method: str, endpoint: str, detail: Any = None):
        self.status_code = status_code
        self.method = method
        self.endpoint = endpoint
        self.detail = detail
        super().__init__(f"API error {status_code} on {method} {endpoint}: {detail}")


class UnsupportedSizeError(TeldriveError):
    """Raised for sources whose total length is unknown or negative."""

    def __init__(self, size: Optional[int]):
        self.size = size
        super().__init__(f"unsupported file size: {size!r} (uploads need a known length)")


class StreamExhaustedError(TeldriveError):
    """Raised when the source ends before the requested number of bytes."""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(f"source stream ended early: expected {expected} bytes, got {received}")


class ChunkTransferError(TeldriveError):
    """Raised when a chunk upload fails; the whole upload is aborted."""

    def __init__(self, part_no: int, reason: str):
        self.part_no = part_no
        self.reason = reason
        super().__init__(f"chunk {part_no} upload failed: {reason}")


class ManifestError(TeldriveError):
    """Raised when collected parts do not form a complete, gap-free manifest."""


class CommitError(TeldriveError):
    """Raised when the final create-file call fails."""


class NotAFileError(TeldriveError):
    """Raised when a file-only operation receives a folder."""
