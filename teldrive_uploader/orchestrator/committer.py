"""Manifest commit: turns the collected parts into one logical file."""
import logging
import posixpath
from collections import Counter
from datetime import datetime
from typing import Iterable, List

import httpx

from ..exceptions import CommitError, ManifestError
from ..models import DriveObject, FilePart, RemotePart, UploadSession, format_timestamp, parse_timestamp
from ..protocols import IAPIClient
from ..services.api_client import SUCCESS_STATUS

logger = logging.getLogger(__name__)


def build_manifest(parts: Iterable[RemotePart], expected_count: int) -> List[FilePart]:
    """
    Order parts by part number and reduce them to manifest entries.

    Raises:
        ManifestError: if a part number is duplicated or missing
    """
    ordered = sorted(parts, key=lambda p: p.part_no)
    numbers = [p.part_no for p in ordered]
    if numbers != list(range(1, expected_count + 1)):
        duplicates = sorted(n for n, count in Counter(numbers).items() if count > 1)
        missing = sorted(set(range(1, expected_count + 1)) - set(numbers))
        raise ManifestError(
            f"incomplete manifest: expected parts 1..{expected_count}, "
            f"duplicates={duplicates}, missing={missing}"
        )
    return [FilePart(id=p.part_id, salt=p.salt) for p in ordered]


class ManifestCommitter:
    """Issues the single create-file call for an upload session."""

    def __init__(self, api: IAPIClient):
        self._api = api

    async def commit(
        self,
        session: UploadSession,
        dest_path: str,
        file_name: str,
        file_size: int,
        modified: datetime,
        parts: Iterable[RemotePart],
    ) -> DriveObject:
        manifest = build_manifest(parts, session.total_chunks)
        full_path = posixpath.join(dest_path, file_name)
        body = {
            "name": file_name,
            "type": "file",
            "path": full_path,
            "size": file_size,
            "channelId": session.channel_id,
            "encrypted": session.encrypted,
            "parts": [entry.to_payload() for entry in manifest],
            "updatedAt": format_timestamp(modified),
        }

        try:
            resp = await self._api.post("/api/files", json=body, check=False)
        except httpx.HTTPError as e:
            raise CommitError(f"create file {full_path} failed: {e}") from e

        if resp.status_code != SUCCESS_STATUS:
            raise CommitError(f"create file {full_path} failed: status {resp.status_code}: {resp.text}")

        try:
            info = resp.json()
            file_id = info["id"]
        except (ValueError, TypeError, KeyError) as e:
            raise CommitError(f"create file {full_path}: unparseable response: {e}") from e

        logger.info("Committed %s (%d bytes, %d parts)", full_path, file_size, len(manifest))
        return DriveObject(
            id=str(file_id),
            name=file_name,
            size=file_size,
            modified=parse_timestamp(info.get("updatedAt")) or modified,
            is_folder=False,
            path=full_path,
            parent_id=info.get("parentId"),
        )
