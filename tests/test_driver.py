"""Tests for TeldriveDriver collaborator operations."""
import io
import json

import httpx
import pytest

from teldrive_uploader.driver import TeldriveDriver
from teldrive_uploader.exceptions import NotAFileError, TeldriveAPIError
from teldrive_uploader.models import DriveObject, UploadSource
from teldrive_uploader.protocols import IStorageDriver

FOLDER = DriveObject(id="dir-1", name="Videos", is_folder=True, path="/Videos")
FILE = DriveObject(id="file-9", name="a.mkv", size=5, path="/Videos/a.mkv", parent_id="dir-1")


class ScriptedServer:
    """Answers each route with a canned response and records requests."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if request.url.path == "/api/auth/session":
            return httpx.Response(200, json={"userName": "alice", "userId": 42})
        return self.routes[(request.method, request.url.path)](request)

    def last(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path][-1]


class TestTeldriveDriver:
    @pytest.mark.asyncio
    async def test_init_resolves_user(self, config, make_api):
        server = ScriptedServer({})

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                assert drive.user_id == 42
                assert isinstance(drive, IStorageDriver)

    @pytest.mark.asyncio
    async def test_init_failure_raises(self, config, make_api):
        def handler(request):
            return httpx.Response(401, json={"message": "expired token"})

        async with make_api(handler) as api:
            with pytest.raises(TeldriveAPIError) as exc_info:
                async with TeldriveDriver(config, api=api):
                    pass

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_list_maps_items(self, config, make_api):
        server = ScriptedServer({
            ("GET", "/api/files"): lambda r: httpx.Response(200, json={
                "items": [
                    {"id": "1", "name": "sub", "type": "folder", "parentId": "dir-1",
                     "updatedAt": "2026-01-01T00:00:00Z"},
                    {"id": "2", "name": "a.mkv", "type": "file", "size": 5, "parentId": "dir-1",
                     "mimeType": "video/x-matroska", "updatedAt": "2026-01-01T00:00:00Z"},
                ],
                "meta": {"count": 2, "totalPages": 1, "currentPage": 1},
            }),
        })

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                children = await drive.list(FOLDER)

        request = server.last("GET", "/api/files")
        assert request.url.params["path"] == "/Videos"
        assert request.url.params["limit"] == "1000"
        assert [c.is_folder for c in children] == [True, False]
        assert children[1].path == "/Videos/a.mkv"
        assert children[1].size == 5
        assert children[1].mime_type == "video/x-matroska"

    @pytest.mark.asyncio
    async def test_list_root_uses_empty_path(self, config, make_api):
        server = ScriptedServer({("GET", "/api/files"): lambda r: httpx.Response(200, json={"items": []})})

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                assert await drive.list(await drive.get_root()) == []

        assert server.last("GET", "/api/files").url.params["path"] == ""

    @pytest.mark.asyncio
    async def test_make_dir(self, config, make_api):
        server = ScriptedServer({
            ("POST", "/api/files/folder"): lambda r: httpx.Response(
                200, json={"id": "new", "parentId": "dir-1", "updatedAt": "2026-01-01T00:00:00Z"}
            ),
        })

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                folder = await drive.make_dir(FOLDER, "2026")

        assert json.loads(server.last("POST", "/api/files/folder").content) == {"path": "/Videos/2026"}
        assert folder.id == "new"
        assert folder.is_folder is True
        assert folder.path == "/Videos/2026"

    @pytest.mark.asyncio
    async def test_make_dir_at_root_sends_bare_name(self, config, make_api):
        server = ScriptedServer({
            ("POST", "/api/files/folder"): lambda r: httpx.Response(200, json={"id": "top"}),
        })

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                root = await drive.get_root()
                folder = await drive.make_dir(root, "Inbox")

        assert json.loads(server.last("POST", "/api/files/folder").content) == {"path": "Inbox"}
        assert folder.path == "Inbox"

    @pytest.mark.asyncio
    async def test_remove_rename_move(self, config, make_api):
        ok = lambda r: httpx.Response(200, json={})
        server = ScriptedServer({
            ("DELETE", "/api/files"): ok,
            ("PATCH", "/api/files/file-9"): ok,
            ("POST", "/api/files/move"): ok,
        })
        target = DriveObject(id="dir-2", name="Archive", is_folder=True, path="/Archive")

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                await drive.remove(FILE)
                renamed = await drive.rename(FILE, "b.mkv")
                moved = await drive.move(FILE, target)

        assert json.loads(server.last("DELETE", "/api/files").content) == {"ids": ["file-9"]}
        assert json.loads(server.last("PATCH", "/api/files/file-9").content) == {"name": "b.mkv"}
        assert json.loads(server.last("POST", "/api/files/move").content) == {
            "destinationParent": "dir-2",
            "ids": ["file-9"],
        }
        assert renamed.path == "/Videos/b.mkv"
        assert moved.path == "/Archive/a.mkv"
        assert moved.parent_id == "dir-2"

    @pytest.mark.asyncio
    async def test_rename_failure_raises(self, config, make_api):
        server = ScriptedServer({
            ("PATCH", "/api/files/file-9"): lambda r: httpx.Response(409, json={"message": "exists"}),
        })

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                with pytest.raises(TeldriveAPIError):
                    await drive.rename(FILE, "b.mkv")

    @pytest.mark.asyncio
    async def test_link_reads_redirect(self, config, make_api):
        server = ScriptedServer({
            ("GET", "/api/files/download"): lambda r: httpx.Response(
                302, headers={"Location": "http://cdn.test/a.mkv"}
            ),
        })

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                url = await drive.link(FILE)

        assert url == "http://cdn.test/a.mkv"
        assert server.last("GET", "/api/files/download").url.params["id"] == "file-9"

    @pytest.mark.asyncio
    async def test_link_without_location_raises(self, config, make_api):
        server = ScriptedServer({("GET", "/api/files/download"): lambda r: httpx.Response(200)})

        async with make_api(server) as api:
            async with TeldriveDriver(config, api=api) as drive:
                with pytest.raises(TeldriveAPIError):
                    await drive.link(FILE)

    @pytest.mark.asyncio
    async def test_link_rejects_folders(self, config, make_api):
        async with make_api(ScriptedServer({})) as api:
            async with TeldriveDriver(config, api=api) as drive:
                with pytest.raises(NotAFileError):
                    await drive.link(FOLDER)

    @pytest.mark.asyncio
    async def test_put_uses_owner_and_destination(self, fake_server, config, make_api):
        source = UploadSource(name="a.bin", size=3, stream=io.BytesIO(b"abc"))

        async with make_api() as api:
            async with TeldriveDriver(config, api=api) as drive:
                record = await drive.put(FOLDER, source)

        assert fake_server.created[0]["path"] == "/Videos/a.bin"
        assert fake_server.uploads[0]["body"] == b"abc"
        assert record.size == 3

    @pytest.mark.asyncio
    async def test_put_requires_init(self, config):
        drive = TeldriveDriver(config)
        source = UploadSource(name="a.bin", size=3, stream=io.BytesIO(b"abc"))

        with pytest.raises(RuntimeError):
            await drive.put(FOLDER, source)
