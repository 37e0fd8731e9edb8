"""
Models for the TelDrive uploader.

Immutable dataclasses describing configuration, upload sessions, chunk parts
and the committed file objects.
"""
import os
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, BinaryIO, Dict, Optional

from .exceptions import ConfigError

MB = 1024 * 1024

DEFAULT_CHUNK_SIZE_MB = 500
DEFAULT_UPLOAD_CONCURRENCY = 4

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp from the API (``Z`` suffix allowed)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime the way the API expects it (UTC, ``Z`` suffix)."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class DriveConfig:
    """Immutable configuration for a TelDrive storage instance."""
    api_host: str
    access_token: str
    channel_id: int
    upload_host: Optional[str] = None  # overrides api_host for chunk uploads only
    chunk_size_mb: int = DEFAULT_CHUNK_SIZE_MB
    random_chunk_name: bool = True
    encrypt_files: bool = False
    upload_concurrency: int = DEFAULT_UPLOAD_CONCURRENCY  # advisory, transfer is sequential
    timeout: Optional[float] = None

    def __post_init__(self):
        if not self.api_host:
            raise ConfigError("api_host is required")
        if not self.access_token:
            raise ConfigError("access_token is required")
        if self.chunk_size_mb <= 0:
            raise ConfigError(f"chunk_size_mb must be positive, got {self.chunk_size_mb}")
        if self.upload_concurrency <= 0:
            raise ConfigError(f"upload_concurrency must be positive, got {self.upload_concurrency}")

    @property
    def upload_base_url(self) -> str:
        return (self.upload_host or self.api_host).rstrip("/")

    def with_overrides(self, **changes) -> "DriveConfig":
        """Return a copy with the non-None values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls) -> "DriveConfig":
        """Build configuration from ``TELDRIVE_*`` environment variables."""
        api_host = os.getenv("TELDRIVE_API_HOST")
        if not api_host:
            raise ConfigError("TELDRIVE_API_HOST environment variable is not set")
        access_token = os.getenv("TELDRIVE_ACCESS_TOKEN")
        if not access_token:
            raise ConfigError("TELDRIVE_ACCESS_TOKEN environment variable is not set")
        raw_channel = os.getenv("TELDRIVE_CHANNEL_ID")
        if not raw_channel:
            raise ConfigError("TELDRIVE_CHANNEL_ID environment variable is not set")
        try:
            channel_id = int(raw_channel)
        except ValueError as exc:
            raise ConfigError(f"TELDRIVE_CHANNEL_ID must be an integer, got {raw_channel!r}") from exc

        return cls(
            api_host=api_host.rstrip("/"),
            access_token=access_token,
            channel_id=channel_id,
            upload_host=os.getenv("TELDRIVE_UPLOAD_HOST") or None,
            chunk_size_mb=_env_int("TELDRIVE_CHUNK_SIZE_MB", DEFAULT_CHUNK_SIZE_MB),
            random_chunk_name=_env_bool("TELDRIVE_RANDOM_CHUNK_NAME", True),
            encrypt_files=_env_bool("TELDRIVE_ENCRYPT_FILES", False),
            upload_concurrency=_env_int("TELDRIVE_UPLOAD_CONCURRENCY", DEFAULT_UPLOAD_CONCURRENCY),
        )


@dataclass(frozen=True)
class UploadSource:
    """A readable byte stream plus the metadata needed to upload it."""
    name: str
    size: Optional[int]
    stream: BinaryIO
    modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class UploadSession:
    """Resumable upload state derived for a single ``put`` call."""
    session_id: str
    channel_id: int
    encrypted: bool
    chunk_size: int
    total_chunks: int


@dataclass(frozen=True)
class RemotePart:
    """Server record of one transferred chunk."""
    part_id: int
    part_no: int
    size: int
    channel_id: int = 0
    encrypted: bool = False
    salt: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any], **defaults) -> "RemotePart":
        """
        Build a part from an API payload.

        ``defaults`` fill fields the payload omits (the upload response only
        carries ``partId`` and ``salt``).
        """
        values = {
            "part_id": data.get("partId"),
            "part_no": data.get("partNo"),
            "size": data.get("size"),
            "channel_id": data.get("channelId"),
            "encrypted": data.get("encrypted"),
            "salt": data.get("salt") or None,
            "name": data.get("name"),
        }
        for key, value in defaults.items():
            if values.get(key) is None:
                values[key] = value
        return cls(
            part_id=int(values["part_id"] or 0),
            part_no=int(values["part_no"] or 0),
            size=int(values["size"] or 0),
            channel_id=int(values["channel_id"] or 0),
            encrypted=bool(values["encrypted"]),
            salt=values["salt"],
            name=values["name"],
        )


@dataclass(frozen=True)
class FilePart:
    """Manifest entry referencing a committed part."""
    id: int
    salt: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id}
        if self.salt:
            payload["salt"] = self.salt
        return payload


@dataclass(frozen=True)
class DriveObject:
    """A file or folder stored in TelDrive."""
    id: str
    name: str
    size: int = 0
    modified: Optional[datetime] = None
    is_folder: bool = False
    path: str = ""
    parent_id: Optional[str] = None
    mime_type: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any], parent_path: str = "") -> "DriveObject":
        name = data.get("name", "")
        return cls(
            id=str(data.get("id", "")),
            name=name,
            size=int(data.get("size") or 0),
            modified=parse_timestamp(data.get("updatedAt")),
            is_folder=data.get("type") == "folder",
            path=f"{parent_path}/{name}",
            parent_id=data.get("parentId"),
            mime_type=data.get("mimeType"),
        )
