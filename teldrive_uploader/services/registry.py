"""
Part Registry - looks up chunks already uploaded for a session.

Lookups are best effort: any failure degrades to "nothing uploaded yet" so
an upload can always start fresh.
"""
import logging
from typing import Dict

import httpx

from ..models import RemotePart
from ..protocols import IAPIClient
from .api_client import SUCCESS_STATUS

log = logging.getLogger(__name__)


class PartRegistryClient:
    """
    Query existing parts of a resumable upload session.

    Usage:
        registry = PartRegistryClient(api)
        existing = await registry.list_existing_parts(session_id)
        # existing = {part_no: RemotePart}
    """

    def __init__(self, api: IAPIClient):
        self._api = api

    async def list_existing_parts(self, session_id: str) -> Dict[int, RemotePart]:
        try:
            resp = await self._api.get(f"/api/uploads/{session_id}", check=False)
        except httpx.HTTPError as e:
            log.warning(f"[resume] Part lookup failed for session {session_id}: {e}")
            return {}

        if resp.status_code != SUCCESS_STATUS:
            log.debug(f"[resume] No parts for session {session_id} (status {resp.status_code})")
            return {}

        try:
            payload = resp.json()
            parts = [RemotePart.from_api(item) for item in payload or []]
        except (ValueError, TypeError, AttributeError) as e:
            log.warning(f"[resume] Unparseable part list for session {session_id}: {e}")
            return {}

        existing: Dict[int, RemotePart] = {}
        for part in parts:
            if part.part_id == 0 or part.part_no <= 0:
                continue
            existing[part.part_no] = part

        if existing:
            log.info(f"[resume] Found {len(existing)} uploaded parts for session {session_id}")
        return existing
