"""Services for the TelDrive uploader."""
from .api_client import HTTPAPIClient
from .registry import PartRegistryClient

__all__ = [
    "HTTPAPIClient",
    "PartRegistryClient",
]
