"""
TelDrive uploader - resumable chunked uploads to a TelDrive server.

Usage:
    from teldrive_uploader import DriveConfig, TeldriveDriver, UploadSource

    config = DriveConfig.from_env()
    async with TeldriveDriver(config) as drive:
        with open(path, "rb") as f:
            source = UploadSource(name=path.name, size=path.stat().st_size, stream=f)
            record = await drive.put(await drive.get_root(), source)

Interrupted uploads resume automatically: calling ``put`` again with the same
destination, name and size skips every chunk the server already holds.
"""
from .driver import TeldriveDriver
from .exceptions import (
    ChunkTransferError,
    CommitError,
    ConfigError,
    ManifestError,
    NotAFileError,
    StreamExhaustedError,
    TeldriveAPIError,
    TeldriveError,
    UnsupportedSizeError,
)
from .models import DriveConfig, DriveObject, FilePart, RemotePart, UploadSession, UploadSource
from .orchestrator import UploadOrchestrator
from .services import HTTPAPIClient, PartRegistryClient

__version__ = "0.1.0"
__all__ = [
    # Main
    "TeldriveDriver",
    "UploadOrchestrator",
    # Models
    "DriveConfig",
    "DriveObject",
    "FilePart",
    "RemotePart",
    "UploadSession",
    "UploadSource",
    # Services
    "HTTPAPIClient",
    "PartRegistryClient",
    # Errors
    "TeldriveError",
    "ConfigError",
    "TeldriveAPIError",
    "UnsupportedSizeError",
    "StreamExhaustedError",
    "ChunkTransferError",
    "ManifestError",
    "CommitError",
    "NotAFileError",
]
