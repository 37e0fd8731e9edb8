"""Shared fixtures: an in-memory TelDrive server behind httpx.MockTransport."""
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from teldrive_uploader.models import DriveConfig
from teldrive_uploader.services.api_client import HTTPAPIClient

API_HOST = "http://api.test"
USER_ID = 42
CHANNEL_ID = 1001


class FakeTeldrive:
    """Minimal TelDrive API: sessions, resumable parts and file creation."""

    def __init__(self, user_id: int = USER_ID):
        self.user_id = user_id
        self.parts: Dict[str, Dict[int, Dict[str, Any]]] = {}
        self.uploads: List[Dict[str, Any]] = []
        self.created: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []
        self.fail_part_no: Optional[int] = None
        self.part_id_override: Optional[int] = None
        self.commit_status = 200
        self.lookup_status: Optional[int] = None
        self._next_part_id = 500

    def seed_part(self, session_id: str, part_no: int, size: int, salt: str = "") -> Dict[str, Any]:
        self._next_part_id += 1
        part = {
            "name": f"seeded-{part_no}",
            "partId": self._next_part_id,
            "partNo": part_no,
            "totalParts": 0,
            "size": size,
            "channelId": CHANNEL_ID,
            "encrypted": False,
            "salt": salt,
        }
        self.parts.setdefault(session_id, {})[part_no] = part
        return part

    def upload_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST" and r.url.path.startswith("/api/uploads/")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/api/auth/session":
            return httpx.Response(200, json={"userName": "alice", "userId": self.user_id, "hash": "h"})

        if path.startswith("/api/uploads/"):
            session_id = path.rsplit("/", 1)[-1]
            if request.method == "GET":
                if self.lookup_status is not None:
                    return httpx.Response(self.lookup_status, json={"message": "lookup failed"})
                if session_id not in self.parts:
                    return httpx.Response(404, json={"message": "upload not found"})
                return httpx.Response(200, json=list(self.parts[session_id].values()))
            return self._upload_part(session_id, request)

        if path == "/api/files" and request.method == "POST":
            body = json.loads(request.content)
            self.created.append(body)
            if self.commit_status != 200:
                return httpx.Response(self.commit_status, json={"message": "create failed"})
            return httpx.Response(
                200,
                json={
                    "id": f"file-{len(self.created)}",
                    "name": body["name"],
                    "type": "file",
                    "parentId": "parent-1",
                    "size": body["size"],
                    "updatedAt": "2026-01-02T03:04:05Z",
                },
            )

        return httpx.Response(404, json={"message": f"no route for {request.method} {path}"})

    def _upload_part(self, session_id: str, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        part_no = int(params["partNo"])
        body = request.content
        self.uploads.append(
            {
                "session_id": session_id,
                "host": request.url.host,
                "part_no": part_no,
                "part_name": params["partName"],
                "file_name": params["fileName"],
                "channel_id": params["channelId"],
                "encrypted": params["encrypted"],
                "body": body,
            }
        )
        if part_no == self.fail_part_no:
            return httpx.Response(500, json={"message": "telegram upload failed"})

        self._next_part_id += 1
        encrypted = params["encrypted"] == "true"
        part = {
            "name": params["partName"],
            "partId": self._next_part_id if self.part_id_override is None else self.part_id_override,
            "partNo": part_no,
            "totalParts": 0,
            "size": len(body),
            "channelId": int(params["channelId"]),
            "encrypted": encrypted,
            "salt": f"salt-{part_no}" if encrypted else "",
        }
        self.parts.setdefault(session_id, {})[part_no] = part
        return httpx.Response(200, json=part)


@pytest.fixture
def fake_server():
    return FakeTeldrive()


@pytest.fixture
def config():
    return DriveConfig(
        api_host=API_HOST,
        access_token="secret-token",
        channel_id=CHANNEL_ID,
        chunk_size_mb=1,
        random_chunk_name=False,
    )


@pytest.fixture
def make_api(fake_server):
    """Factory for API clients wired to the fake server; use with ``async with``."""
    def factory(handler=None) -> HTTPAPIClient:
        transport = httpx.MockTransport(handler or fake_server.handler)
        return HTTPAPIClient(API_HOST, access_token="secret-token", transport=transport)

    return factory
