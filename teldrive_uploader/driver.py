"""
TelDrive storage driver.

Implements the IStorageDriver protocol: one-shot listing, folder, delete,
rename, move and link calls, plus ``put`` which delegates to the resumable
upload orchestrator.
"""
import logging
import posixpath
from datetime import datetime, timezone
from typing import List, Optional

from .exceptions import NotAFileError, TeldriveAPIError
from .models import DriveConfig, DriveObject, UploadSource
from .orchestrator import UploadOrchestrator
from .orchestrator.identity import normalize_dir_path
from .protocols import IAPIClient, ProgressCallback
from .services.api_client import HTTPAPIClient

logger = logging.getLogger(__name__)

LIST_PAGE_LIMIT = 1000
# the download endpoint answers with a redirect to the file URL
LINK_STATUSES = {200, 301, 302, 303, 307, 308}


class TeldriveDriver:
    """
    TelDrive backend bound to one account and channel.

    Usage:
        async with TeldriveDriver(config) as drive:
            root = await drive.get_root()
            record = await drive.put(root, source, progress_callback)
    """

    def __init__(self, config: DriveConfig, api: Optional[IAPIClient] = None):
        self._config = config
        self._external_api = api
        self._api: Optional[IAPIClient] = api
        self._owned_api: Optional[HTTPAPIClient] = None
        self._user_id: Optional[int] = None
        self._user_name: Optional[str] = None

    @property
    def config(self) -> DriveConfig:
        return self._config

    @property
    def user_id(self) -> Optional[int]:
        return self._user_id

    async def __aenter__(self):
        if self._external_api is None:
            self._owned_api = HTTPAPIClient(
                self._config.api_host,
                access_token=self._config.access_token,
                timeout=self._config.timeout,
            )
            await self._owned_api.__aenter__()
            self._api = self._owned_api
        try:
            await self.init()
        except BaseException:
            await self.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(self, *args):
        if self._owned_api:
            await self._owned_api.__aexit__(*args)
            self._owned_api = None
            self._api = None

    def _require_api(self) -> IAPIClient:
        if self._api is None:
            raise RuntimeError("TeldriveDriver not initialized. Use 'async with' context.")
        return self._api

    async def init(self) -> int:
        """Resolve the authenticated user; the id seeds upload session ids."""
        resp = await self._require_api().get("/api/auth/session")
        session = resp.json() or {}
        if "userId" not in session:
            raise TeldriveAPIError(resp.status_code, "GET", "/api/auth/session", "session carries no userId")
        self._user_id = int(session["userId"])
        self._user_name = session.get("userName")
        logger.info("Authenticated as %s (user %d)", self._user_name or "?", self._user_id)
        return self._user_id

    async def get_root(self) -> DriveObject:
        return DriveObject(
            id="root",
            name="",
            modified=datetime.now(timezone.utc),
            is_folder=True,
            path="/",
        )

    async def list(self, directory: DriveObject) -> List[DriveObject]:
        path = normalize_dir_path(directory.path)
        resp = await self._require_api().get(
            "/api/files",
            params={"path": path, "page": "1", "limit": str(LIST_PAGE_LIMIT)},
        )
        items = (resp.json() or {}).get("items") or []
        return [DriveObject.from_api(item, parent_path=path) for item in items]

    async def make_dir(self, parent: DriveObject, name: str) -> DriveObject:
        new_path = posixpath.join(normalize_dir_path(parent.path), name)
        resp = await self._require_api().post("/api/files/folder", json={"path": new_path})
        info = resp.json() or {}
        return DriveObject(
            id=str(info.get("id", "")),
            name=name,
            modified=DriveObject.from_api(info).modified,
            is_folder=True,
            path=new_path,
            parent_id=info.get("parentId"),
        )

    async def remove(self, obj: DriveObject) -> None:
        await self._require_api().delete("/api/files", json={"ids": [obj.id]})

    async def rename(self, obj: DriveObject, new_name: str) -> DriveObject:
        await self._require_api().patch(f"/api/files/{obj.id}", json={"name": new_name})
        return DriveObject(
            id=obj.id,
            name=new_name,
            size=obj.size,
            modified=obj.modified,
            is_folder=obj.is_folder,
            path=posixpath.join(posixpath.dirname(obj.path), new_name),
            parent_id=obj.parent_id,
            mime_type=obj.mime_type,
        )

    async def move(self, obj: DriveObject, destination: DriveObject) -> DriveObject:
        await self._require_api().post(
            "/api/files/move",
            json={"destinationParent": destination.id, "ids": [obj.id]},
        )
        return DriveObject(
            id=obj.id,
            name=obj.name,
            size=obj.size,
            modified=obj.modified,
            is_folder=obj.is_folder,
            path=posixpath.join(destination.path, obj.name),
            parent_id=destination.id,
            mime_type=obj.mime_type,
        )

    async def link(self, obj: DriveObject) -> str:
        if obj.is_folder:
            raise NotAFileError(f"{obj.path} is a folder")
        resp = await self._require_api().get("/api/files/download", params={"id": obj.id}, check=False)
        if resp.status_code not in LINK_STATUSES:
            raise TeldriveAPIError(resp.status_code, "GET", "/api/files/download", resp.text)
        location = resp.headers.get("Location")
        if not location:
            raise TeldriveAPIError(resp.status_code, "GET", "/api/files/download", "no redirect location")
        return location

    async def put(
        self,
        destination: DriveObject,
        source: UploadSource,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> DriveObject:
        if self._user_id is None:
            raise RuntimeError("TeldriveDriver.init() must run before uploading")
        orchestrator = UploadOrchestrator(self._require_api(), self._config, self._user_id)
        return await orchestrator.put(destination.path, source, progress_callback)
