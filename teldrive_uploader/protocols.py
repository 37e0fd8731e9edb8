"""
Protocols (Interfaces) for Dependency Inversion.

Following Interface Segregation Principle - small, focused interfaces.
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

import httpx

from .models import DriveObject, RemotePart, UploadSource

ProgressCallback = Callable[[float], Union[None, Awaitable[None]]]


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for TelDrive API calls."""

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, check: bool = True) -> httpx.Response:
        """GET request to API."""
        ...

    async def post(
        self,
        endpoint: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        content: Any = None,
        headers: Optional[Dict[str, str]] = None,
        check: bool = True,
    ) -> httpx.Response:
        """POST request to API."""
        ...

    async def patch(self, endpoint: str, json: Any = None, check: bool = True) -> httpx.Response:
        """PATCH request to API."""
        ...

    async def delete(self, endpoint: str, json: Any = None, check: bool = True) -> httpx.Response:
        """DELETE request to API."""
        ...


@runtime_checkable
class IPartRegistry(Protocol):
    """Interface for looking up parts already uploaded for a session."""

    async def list_existing_parts(self, session_id: str) -> Dict[int, RemotePart]:
        """Return existing parts keyed by part number."""
        ...


@runtime_checkable
class IStorageDriver(Protocol):
    """Interface for storage-object operations exposed by a backend."""

    async def get_root(self) -> DriveObject:
        ...

    async def list(self, directory: DriveObject) -> List[DriveObject]:
        """List children of a folder."""
        ...

    async def make_dir(self, parent: DriveObject, name: str) -> DriveObject:
        ...

    async def remove(self, obj: DriveObject) -> None:
        ...

    async def rename(self, obj: DriveObject, new_name: str) -> DriveObject:
        ...

    async def move(self, obj: DriveObject, destination: DriveObject) -> DriveObject:
        ...

    async def link(self, obj: DriveObject) -> str:
        """Resolve a download URL for a file."""
        ...

    async def put(
        self,
        destination: DriveObject,
        source: UploadSource,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> DriveObject:
        """Upload a stream into a folder."""
        ...
